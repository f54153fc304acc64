"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from ixfr_store.config import AppConfig
from ixfr_store.models import RecordSet, ResourceRecord

ZONE = "example.com."
SOA_TEXT = "ns1.example.com. hostmaster.example.com. {serial} 3600 600 86400 3600"


def make_soa(serial: int = 42, name: str = "@") -> ResourceRecord:
    """Build an SOA record for the test zone."""
    return ResourceRecord.from_text(name, "SOA", SOA_TEXT.format(serial=serial), ZONE)


def make_records(serial: int = 42) -> RecordSet:
    """Build a small zone with one apex SOA."""
    return RecordSet(
        [
            make_soa(serial),
            ResourceRecord.from_text("@", "NS", "ns1.example.com.", ZONE),
            ResourceRecord.from_text("ns1", "A", "192.0.2.1", ZONE),
            ResourceRecord.from_text("www", "A", "192.0.2.10", ZONE, ttl=300),
            ResourceRecord.from_text("www", "A", "192.0.2.11", ZONE, ttl=300),
            ResourceRecord.from_text("mail", "MX", "10 mx.example.com.", ZONE),
            ResourceRecord.from_text("alias", "CNAME", "www.example.com.", ZONE),
            ResourceRecord.from_text("@", "TXT", '"v=spf1 -all"', ZONE),
        ]
    )


@pytest.fixture
def zone() -> str:
    """Zone name fixture."""
    return ZONE


@pytest.fixture
def sample_records() -> RecordSet:
    """Sample zone content fixture."""
    return make_records()


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    """Empty snapshot directory fixture."""
    directory = tmp_path / "store"
    directory.mkdir()
    return directory


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Configuration pointing at a temporary work directory."""
    work_dir = tmp_path / "snapshots"
    work_dir.mkdir()
    return AppConfig(
        work_dir=work_dir,
        zones_file=tmp_path / "zones.yml",
        keep=2,
        primary_port=53,
        query_timeout=None,
        axfr_timeout=10.0,
        tsig=None,
        log_level="INFO",
    )

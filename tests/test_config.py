"""Tests for environment configuration."""

import base64

import pytest

from ixfr_store.config import load_config

KEYFILE = """key "xfr-key" {
    algorithm hmac-sha512;
    secret "c2VjcmV0LWtleS1tYXRlcmlhbA==";
};
"""

ENV_VARS = [
    "IXFR_WORK_DIR",
    "IXFR_ZONES_FILE",
    "IXFR_KEEP",
    "IXFR_PRIMARY_PORT",
    "IXFR_QUERY_TIMEOUT",
    "AXFR_TIMEOUT",
    "IXFR_TSIG_KEYFILE_B64",
    "IXFR_TSIG_NAME",
    "IXFR_TSIG_ALGORITHM",
    "IXFR_TSIG_SECRET",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Start every test from an empty configuration."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, tmp_path):
        config = load_config()
        assert config.work_dir == (tmp_path / "snapshots").resolve()
        assert config.work_dir.is_dir()
        assert config.zones_file == (tmp_path / "zones.yml").resolve()
        assert config.keep == 20
        assert config.primary_port == 53
        assert config.query_timeout is None
        assert config.axfr_timeout == 10.0
        assert config.tsig is None
        assert config.log_level == "INFO"

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("IXFR_WORK_DIR", str(tmp_path / "store"))
        monkeypatch.setenv("IXFR_KEEP", "3")
        monkeypatch.setenv("IXFR_PRIMARY_PORT", "5300")
        monkeypatch.setenv("IXFR_QUERY_TIMEOUT", "2.5")
        config = load_config()
        assert config.work_dir == (tmp_path / "store").resolve()
        assert config.keep == 3
        assert config.primary_port == 5300
        assert config.query_timeout == 2.5

    def test_invalid_keep(self, monkeypatch):
        monkeypatch.setenv("IXFR_KEEP", "0")
        with pytest.raises(ValueError, match="IXFR_KEEP"):
            load_config()

    def test_tsig_from_keyfile(self, monkeypatch):
        monkeypatch.setenv("IXFR_TSIG_KEYFILE_B64", base64.b64encode(KEYFILE.encode()).decode())
        tsig = load_config().tsig
        assert tsig.name == "xfr-key"
        assert tsig.algorithm == "hmac-sha512"
        assert tsig.secret == "c2VjcmV0LWtleS1tYXRlcmlhbA=="

    def test_keyfile_overrides(self, monkeypatch):
        monkeypatch.setenv("IXFR_TSIG_KEYFILE_B64", base64.b64encode(KEYFILE.encode()).decode())
        monkeypatch.setenv("IXFR_TSIG_NAME", "other-key")
        assert load_config().tsig.name == "other-key"

    def test_tsig_from_variables(self, monkeypatch):
        monkeypatch.setenv("IXFR_TSIG_NAME", "xfr-key")
        monkeypatch.setenv("IXFR_TSIG_SECRET", "c2VjcmV0")
        tsig = load_config().tsig
        assert tsig.algorithm == "hmac-sha256"

    def test_incomplete_tsig_variables(self, monkeypatch):
        monkeypatch.setenv("IXFR_TSIG_NAME", "xfr-key")
        with pytest.raises(ValueError, match="must be set together"):
            load_config()

    def test_malformed_keyfile(self, monkeypatch):
        monkeypatch.setenv("IXFR_TSIG_KEYFILE_B64", base64.b64encode(b"nothing here").decode())
        with pytest.raises(ValueError, match="expected format"):
            load_config()

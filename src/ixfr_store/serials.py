"""Serial discovery in record sets and snapshot directories."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

import dns.name
import dns.rdatatype
import dns.rdtypes.ANY.SOA

from .models import RecordSet, ResourceRecord, StoreIOError, as_soa

MAX_SERIAL = 2**32 - 1
SERIAL_HALF_RANGE = 2**31

CANONICAL_SERIAL_PATTERN = re.compile(r"0|[1-9][0-9]*")


@dataclass(frozen=True)
class ApexVersion:
    """The apex SOA of a record set together with its serial."""

    serial: int
    record: ResourceRecord
    soa: dns.rdtypes.ANY.SOA.SOA


def is_canonical_serial(name: str) -> bool:
    """Return True if name is the plain decimal rendering of a 32-bit serial."""
    if not CANONICAL_SERIAL_PATTERN.fullmatch(name):
        return False
    return int(name) <= MAX_SERIAL


def list_serials(directory: str | Path) -> list[int]:
    """Return every committed snapshot serial in directory, ascending."""
    try:
        entries = os.listdir(directory)
    except OSError as exc:
        raise StoreIOError(f"Could not open snapshot directory '{directory}': {exc.strerror}") from exc
    return sorted(int(entry) for entry in entries if is_canonical_serial(entry))


def highest_serial(directory: str | Path) -> int:
    """Return the highest serial stored in directory, or 0 if there is none."""
    return max(list_serials(directory), default=0)


def serial_gt(left: int, right: int) -> bool:
    """Return True if serial left is newer than right under RFC 1982 arithmetic."""
    if left == right:
        return False
    if left < right:
        return right - left > SERIAL_HALF_RANGE
    return left - right < SERIAL_HALF_RANGE


def extract_apex_version(records: RecordSet) -> ApexVersion | None:
    """Return the first apex SOA of records.

    Owners are stored relative to the zone, so the apex is the empty name.
    None is returned both when there is no apex SOA and when the first match
    does not hold SOA content.
    """
    matches = records.find(dns.name.empty, dns.rdatatype.SOA)
    if not matches:
        return None
    record = matches[0]
    soa = as_soa(record.content)
    if soa is None:
        return None
    return ApexVersion(serial=soa.serial, record=record, soa=soa)

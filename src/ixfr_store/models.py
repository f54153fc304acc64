"""Core data models used by ixfr-store."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Iterator

import dns.name
import dns.rdata
import dns.rdataclass
import dns.rdatatype
import dns.rdtypes.ANY.SOA

DEFAULT_TTL = 3600

RecordKey = tuple[dns.name.Name, dns.rdatatype.RdataType]


def as_zone_name(zone: str | dns.name.Name) -> dns.name.Name:
    """Return the zone as an absolute dnspython name."""
    if isinstance(zone, dns.name.Name):
        return zone
    stripped = zone.strip()
    if stripped in {"", "@"}:
        return dns.name.root
    return dns.name.from_text(stripped)


def as_soa(content: dns.rdata.Rdata) -> dns.rdtypes.ANY.SOA.SOA | None:
    """Narrow record content to an SOA rdata, or None when it is some other kind."""
    if isinstance(content, dns.rdtypes.ANY.SOA.SOA):
        return content
    return None


@dataclass(frozen=True)
class ResourceRecord:
    """A single resource record with its owner stored relative to the zone origin.

    The TTL is carried along but ignored for equality: snapshot files do not
    store it, so a reloaded record only gets the parser default.
    """

    name: dns.name.Name
    rdtype: dns.rdatatype.RdataType
    content: dns.rdata.Rdata
    ttl: int = field(default=DEFAULT_TTL, compare=False)
    rdclass: dns.rdataclass.RdataClass = dns.rdataclass.IN

    @classmethod
    def from_text(
        cls,
        name: str,
        rdtype: str,
        content: str,
        origin: str | dns.name.Name,
        ttl: int = DEFAULT_TTL,
    ) -> "ResourceRecord":
        """Build a record from zone-file style text."""
        zone = as_zone_name(origin)
        owner = dns.name.from_text(name, zone).relativize(zone)
        type_ = dns.rdatatype.from_text(rdtype)
        rdata = dns.rdata.from_text(dns.rdataclass.IN, type_, content, origin=zone, relativize=False)
        return cls(name=owner, rdtype=type_, content=rdata, ttl=ttl)

    @property
    def is_apex(self) -> bool:
        """Return True if the owner is the zone apex."""
        return self.name == dns.name.empty

    def owner_text(self) -> str:
        """Return the owner as written in a snapshot file."""
        if self.is_apex:
            return "@"
        return self.name.to_text(omit_final_dot=True)

    def key(self) -> RecordKey:
        return (self.name, self.rdtype)


class RecordSet:
    """Ordered multiset of resource records indexed by owner and type."""

    def __init__(self, records: Iterable[ResourceRecord] = ()) -> None:
        self._records: list[ResourceRecord] = []
        self._index: dict[RecordKey, list[ResourceRecord]] = defaultdict(list)
        for record in records:
            self.add(record)

    def add(self, record: ResourceRecord) -> None:
        """Append a record; duplicates are preserved."""
        self._records.append(record)
        self._index[record.key()].append(record)

    def find(self, name: dns.name.Name, rdtype: dns.rdatatype.RdataType) -> list[ResourceRecord]:
        """Return every record with this owner and type, in insertion order."""
        return list(self._index.get((name, rdtype), ()))

    def clear(self) -> None:
        self._records.clear()
        self._index.clear()

    def __iter__(self) -> Iterator[ResourceRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordSet):
            return NotImplemented
        return Counter(self._records) == Counter(other._records)

    def __repr__(self) -> str:
        return f"RecordSet({len(self._records)} records)"


class IxfrStoreError(Exception):
    """Base exception for ixfr-store."""


class StoreIOError(IxfrStoreError):
    """Raised when a snapshot file or directory cannot be opened, written or renamed."""


class RemoteError(IxfrStoreError):
    """Raised when the primary answers with an error or cannot be reached."""

    def __init__(self, message: str, address: str, rcode: str | None = None):
        super().__init__(message)
        self.address = address
        self.rcode = rcode


class FormatError(IxfrStoreError):
    """Raised when a snapshot is incomplete or cannot be parsed."""


class ValidationError(IxfrStoreError):
    """Raised when the zones YAML is invalid."""

"""Utilities to serialise snapshots into YAML or JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import dns.name
import dns.rdataclass
import dns.rdatatype
import yaml

from .models import RecordSet, ResourceRecord, as_zone_name


def _record_to_dict(record: ResourceRecord) -> dict[str, Any]:
    """Convert a record into a serialisable dictionary."""
    return {
        "name": record.owner_text(),
        "class": dns.rdataclass.to_text(record.rdclass),
        "type": dns.rdatatype.to_text(record.rdtype),
        "ttl": record.ttl,
        "value": record.content.to_text(),
    }


def snapshot_to_dict(records: RecordSet, zone: str | dns.name.Name, serial: int) -> dict[str, Any]:
    """Create a dictionary describing one snapshot, records in file order."""
    return {
        "zone": as_zone_name(zone).to_text(),
        "serial": serial,
        "records": [_record_to_dict(record) for record in records],
    }


def snapshot_to_yaml(records: RecordSet, zone: str | dns.name.Name, serial: int) -> str:
    """Return YAML representation of a snapshot."""
    return yaml.safe_dump(snapshot_to_dict(records, zone, serial), sort_keys=False)


def snapshot_to_json(records: RecordSet, zone: str | dns.name.Name, serial: int) -> str:
    """Return JSON representation of a snapshot."""
    return json.dumps(snapshot_to_dict(records, zone, serial), indent=2)


def write_export(path: Path, content: str) -> None:
    """Write content to the given path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")

"""Serial-named zone snapshots on disk."""

from __future__ import annotations

import logging
import os
import tempfile
from itertools import chain
from pathlib import Path

import dns.exception
import dns.name
import dns.rdata
import dns.rdatatype
import dns.rdtypes.ANY.SOA

from .models import FormatError, RecordSet, ResourceRecord, StoreIOError, as_soa, as_zone_name
from .serials import extract_apex_version, list_serials
from .zoneparser import ZoneEntry, iter_zone_entries

LOG = logging.getLogger("ixfr_store")

PARTIAL_SUFFIX = ".partial"


def _render_record(record: ResourceRecord) -> str:
    """Return the snapshot line for one record."""
    return "\t".join(
        [
            record.owner_text(),
            "IN",
            dns.rdatatype.to_text(record.rdtype),
            record.content.to_text(),
        ]
    )


def _entry_to_record(entry: ZoneEntry, zone: dns.name.Name) -> ResourceRecord:
    """Turn a parsed zone line into a record owned relative to zone."""
    content = entry.content
    if entry.rdtype == dns.rdatatype.CNAME and not content:
        content = "."
    rdata = dns.rdata.from_text(entry.rdclass, entry.rdtype, content, origin=entry.origin, relativize=False)
    return ResourceRecord(
        name=entry.name.relativize(zone),
        rdtype=entry.rdtype,
        content=rdata,
        ttl=entry.ttl,
        rdclass=entry.rdclass,
    )


def write_snapshot(
    records: RecordSet,
    zone: str | dns.name.Name,
    directory: str | Path,
    logger: logging.Logger | None = None,
) -> Path:
    """Persist records as directory/<serial>, replacing the file atomically.

    The apex SOA is written before and after the full record set; the loader
    relies on the trailing copy to detect truncated files. Each call writes
    its own <serial>.partial.<random> file, so concurrent writers of the same
    serial never share a temporary file and the last rename wins.
    """
    log = logger or LOG
    origin = as_zone_name(zone)
    apex = extract_apex_version(records)
    if apex is None:
        raise FormatError(f"No SOA record found at the apex of {origin}")

    final_path = Path(directory) / str(apex.serial)
    try:
        fd, partial_name = tempfile.mkstemp(dir=directory, prefix=f"{apex.serial}{PARTIAL_SUFFIX}.")
    except OSError as exc:
        raise StoreIOError(
            f"Unable to open file '{final_path}{PARTIAL_SUFFIX}' for writing: {exc.strerror}"
        ) from exc
    partial_path = Path(partial_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            os.fchmod(handle.fileno(), 0o644)
            handle.write(f"$ORIGIN {origin.to_text()}\n")
            for record in chain([apex.record], records, [apex.record]):
                handle.write(_render_record(record) + "\n")
            handle.flush()
            os.fsync(handle.fileno())
    except OSError as exc:
        partial_path.unlink(missing_ok=True)
        raise StoreIOError(f"Unable to write file '{partial_path}': {exc.strerror}") from exc

    try:
        os.replace(partial_path, final_path)
    except OSError as exc:
        raise StoreIOError(f"Unable to rename '{partial_path}' to '{final_path}': {exc.strerror}") from exc
    log.info("Wrote snapshot of %s serial %s to %s", origin, apex.serial, final_path)
    return final_path


def load_snapshot(
    path: str | Path,
    zone: str | dns.name.Name,
    records: RecordSet | None = None,
    logger: logging.Logger | None = None,
) -> RecordSet:
    """Load a snapshot written by write_snapshot and verify it is complete.

    Only the first SOA is kept. The file is accepted only when the last record
    in it is an SOA; otherwise records is cleared and FormatError is raised.
    When records is given it is filled in place.
    """
    log = logger or LOG
    origin = as_zone_name(zone)
    result = records if records is not None else RecordSet()
    seen_soa = False
    last_type: dns.rdatatype.RdataType | None = None
    parsed = 0

    try:
        for entry in iter_zone_entries(path, origin):
            parsed += 1
            last_type = entry.rdtype
            record = _entry_to_record(entry, origin)
            if entry.rdtype != dns.rdatatype.SOA or not seen_soa:
                result.add(record)
            if entry.rdtype == dns.rdatatype.SOA:
                seen_soa = True
    except OSError as exc:
        result.clear()
        raise StoreIOError(f"Unable to read snapshot '{path}': {exc.strerror}") from exc
    except (dns.exception.DNSException, UnicodeDecodeError) as exc:
        result.clear()
        raise FormatError(f"Snapshot '{path}' could not be parsed: {exc}") from exc

    log.info("Parsed %d records from %s", parsed, path)
    if not (seen_soa and last_type == dns.rdatatype.SOA):
        result.clear()
        raise FormatError(f"Snapshot '{path}' is incomplete: no SOA at the end")
    log.debug("Snapshot %s is complete (SOA at end)", path)
    return result


def load_apex_version_only(path: str | Path, zone: str | dns.name.Name) -> dns.rdtypes.ANY.SOA.SOA | None:
    """Return the first SOA of a snapshot without checking that the file is complete."""
    origin = as_zone_name(zone)
    try:
        for entry in iter_zone_entries(path, origin):
            if entry.rdtype == dns.rdatatype.SOA:
                return as_soa(_entry_to_record(entry, origin).content)
    except OSError as exc:
        raise StoreIOError(f"Unable to read snapshot '{path}': {exc.strerror}") from exc
    except (dns.exception.DNSException, UnicodeDecodeError) as exc:
        raise FormatError(f"Snapshot '{path}' could not be parsed: {exc}") from exc
    return None


def prune_snapshots(directory: str | Path, keep: int, logger: logging.Logger | None = None) -> list[Path]:
    """Delete the oldest snapshots so that at most keep remain."""
    log = logger or LOG
    if keep < 1:
        raise ValueError("keep must be at least 1.")
    serials = list_serials(directory)
    removed: list[Path] = []
    for serial in serials[: max(len(serials) - keep, 0)]:
        path = Path(directory) / str(serial)
        try:
            path.unlink()
        except OSError as exc:
            raise StoreIOError(f"Unable to remove snapshot '{path}': {exc.strerror}") from exc
        log.info("Removed old snapshot %s", path)
        removed.append(path)
    return removed

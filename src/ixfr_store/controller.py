"""High-level orchestration for ixfr-store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import dns.name

from .config import AppConfig
from .models import IxfrStoreError, RecordSet, as_zone_name
from .remote import fetch_zone_records, query_remote_serial
from .serials import extract_apex_version, highest_serial, list_serials, serial_gt
from .snapshot import load_snapshot, prune_snapshots, write_snapshot
from .zones_loader import ZoneTarget

LOG = logging.getLogger("ixfr_store")


@dataclass
class SyncResult:
    """Outcome of syncing one zone."""

    zone: dns.name.Name
    local_serial: int
    remote_serial: int | None
    written: Path | None = None

    @property
    def updated(self) -> bool:
        return self.written is not None


class SnapshotController:
    """Coordinates serial checks, transfers and snapshot housekeeping."""

    def __init__(self, config: AppConfig, work_dir: Path | None = None, keep: int | None = None):
        """Store configuration; work_dir and keep override the config values."""
        self.config = config
        self.work_dir = work_dir or config.work_dir
        self.keep = keep or config.keep

    def zone_dir(self, zone: str | dns.name.Name) -> Path:
        """Return the snapshot directory of a zone."""
        origin = as_zone_name(zone)
        name = "root" if origin == dns.name.root else origin.to_text(omit_final_dot=True)
        return self.work_dir / name.lower()

    def local_serial(self, zone: str | dns.name.Name) -> int:
        """Return the highest serial stored for zone, 0 if there is none yet."""
        directory = self.zone_dir(zone)
        if not directory.exists():
            return 0
        return highest_serial(directory)

    def remote_serial(self, target: ZoneTarget) -> int | None:
        """Return the serial the primary currently serves."""
        return query_remote_serial(
            target.primary,
            target.zone,
            tsig=target.tsig,
            port=target.port,
            timeout=self.config.query_timeout,
        )

    def sync(self, target: ZoneTarget) -> SyncResult:
        """Store a new snapshot of target when the primary has a newer serial."""
        directory = self.zone_dir(target.zone)
        directory.mkdir(parents=True, exist_ok=True)
        serials = list_serials(directory)
        local = serials[-1] if serials else 0
        remote = self.remote_serial(target)
        result = SyncResult(zone=target.zone, local_serial=local, remote_serial=remote)

        if remote is None:
            LOG.warning("Primary %s returned no SOA for %s", target.primary, target.zone)
            return result
        if serials and not serial_gt(remote, local):
            LOG.info("%s is up to date at serial %s", target.zone, local)
            return result

        LOG.info("Transferring %s serial %s from %s", target.zone, remote, target.primary)
        records = fetch_zone_records(
            target.primary,
            target.zone,
            tsig=target.tsig,
            port=target.port,
            timeout=self.config.axfr_timeout,
        )
        apex = extract_apex_version(records)
        if apex is None:
            raise IxfrStoreError(f"Transfer of {target.zone} did not include an apex SOA.")
        if apex.serial != remote:
            LOG.warning("%s changed to serial %s during transfer (queried %s)", target.zone, apex.serial, remote)
            result.remote_serial = apex.serial
            if serials and not serial_gt(apex.serial, local):
                LOG.warning("Not storing %s serial %s: not newer than local %s", target.zone, apex.serial, local)
                return result
        result.written = write_snapshot(records, target.zone, directory)
        prune_snapshots(directory, self.keep)
        return result

    def load_latest(self, zone: str | dns.name.Name) -> tuple[int, RecordSet]:
        """Load the newest complete snapshot stored for zone."""
        directory = self.zone_dir(zone)
        serials = list_serials(directory)
        if not serials:
            raise IxfrStoreError(f"No snapshots stored for {as_zone_name(zone)} in {directory}")
        serial = serials[-1]
        return serial, load_snapshot(directory / str(serial), zone)


def configure_logging(level: str) -> None:
    """Configure logging output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

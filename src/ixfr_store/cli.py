"""Command-line entry point for ixfr-store."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import AppConfig, load_config
from .controller import SnapshotController, configure_logging
from .exporter import snapshot_to_json, snapshot_to_yaml, write_export
from .models import IxfrStoreError, as_zone_name
from .remote import query_remote_serial
from .serials import extract_apex_version
from .snapshot import load_snapshot
from .zones_loader import ZonesFile, load_zones


def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser."""
    parser = argparse.ArgumentParser(description="Keep serial-numbered snapshots of DNS zones.")
    parser.add_argument("--log-level", help="Override log level (default from config).")
    parser.add_argument("--zones-file", help="Path to the zones YAML (default from config).")
    parser.add_argument(
        "-e",
        "--var",
        action="append",
        help="Template variable for the zones YAML in KEY=VALUE form. Can be repeated.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    remote_parser = subparsers.add_parser("remote-serial", help="Ask a primary for its current serial.")
    remote_parser.add_argument("--zone", required=True, help="Zone name.")
    remote_parser.add_argument("--primary", help="Primary address (default from the zones file).")
    remote_parser.add_argument("--port", type=int, help="Primary port.")

    local_parser = subparsers.add_parser("local-serial", help="Show the newest stored serial of a zone.")
    local_parser.add_argument("--zone", required=True, help="Zone name.")

    sync_parser = subparsers.add_parser("sync", help="Snapshot zones whose primary has a newer serial.")
    sync_parser.add_argument("--zone", help="Only sync this zone.")

    show_parser = subparsers.add_parser("show", help="Export a stored snapshot.")
    show_parser.add_argument("--zone", required=True, help="Zone name.")
    show_parser.add_argument("--serial", type=int, help="Serial to show (default newest).")
    show_parser.add_argument("--output", help="Path to write the export (default stdout).")
    show_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Serialization format for the export.",
    )

    check_parser = subparsers.add_parser("check", help="Verify that a snapshot file is complete.")
    check_parser.add_argument("path", help="Snapshot file.")
    check_parser.add_argument("--zone", required=True, help="Zone name.")

    return parser


def _parse_template_vars(values: list[str] | None) -> dict[str, str]:
    """Convert KEY=VALUE pairs into a dict."""
    result: dict[str, str] = {}
    if not values:
        return result
    for value in values:
        if "=" not in value:
            raise IxfrStoreError(f"Invalid template var '{value}', expected KEY=VALUE.")
        key, val = value.split("=", 1)
        result[key] = val
    return result


def _load_zones_file(config: AppConfig, args: argparse.Namespace, required: bool) -> ZonesFile | None:
    """Load the zones YAML if it exists (or fail when required)."""
    path = Path(args.zones_file) if args.zones_file else config.zones_file
    if not path.exists():
        if required:
            raise IxfrStoreError(f"Zones file {path} does not exist.")
        return None
    return load_zones(path, config, template_vars=_parse_template_vars(args.var))


def _build_controller(config: AppConfig, zones: ZonesFile | None) -> SnapshotController:
    if zones is None:
        return SnapshotController(config)
    return SnapshotController(config, work_dir=zones.work_dir, keep=zones.keep)


def _run_remote_serial(config: AppConfig, args: argparse.Namespace) -> None:
    """Execute the remote-serial command."""
    zones = _load_zones_file(config, args, required=args.primary is None)
    target = zones.find(args.zone) if zones else None
    if args.primary is None and target is None:
        raise IxfrStoreError(f"Zone {args.zone} is not listed in the zones file; pass --primary.")
    primary = args.primary or target.primary
    port = args.port or (target.port if target else config.primary_port)
    tsig = target.tsig if target else config.tsig
    serial = query_remote_serial(primary, args.zone, tsig=tsig, port=port, timeout=config.query_timeout)
    if serial is None:
        print(f"{primary} returned no SOA for {as_zone_name(args.zone)}")
    else:
        print(serial)


def _run_local_serial(config: AppConfig, args: argparse.Namespace) -> None:
    """Execute the local-serial command."""
    controller = _build_controller(config, _load_zones_file(config, args, required=False))
    print(controller.local_serial(args.zone))


def _run_sync(config: AppConfig, args: argparse.Namespace) -> None:
    """Execute the sync command."""
    zones = _load_zones_file(config, args, required=True)
    controller = _build_controller(config, zones)
    targets = zones.targets
    if args.zone:
        target = zones.find(args.zone)
        if target is None:
            raise IxfrStoreError(f"Zone {args.zone} is not listed in the zones file.")
        targets = [target]
    for target in targets:
        result = controller.sync(target)
        if result.updated:
            print(f"{result.zone}: {result.local_serial} -> {result.remote_serial} ({result.written})")
        else:
            print(f"{result.zone}: unchanged at {result.local_serial}")


def _run_show(config: AppConfig, args: argparse.Namespace) -> None:
    """Execute the show command."""
    controller = _build_controller(config, _load_zones_file(config, args, required=False))
    if args.serial is None:
        serial, records = controller.load_latest(args.zone)
    else:
        serial = args.serial
        records = load_snapshot(controller.zone_dir(args.zone) / str(serial), args.zone)
    if args.format == "json":
        content = snapshot_to_json(records, args.zone, serial)
    else:
        content = snapshot_to_yaml(records, args.zone, serial)
    if args.output:
        write_export(Path(args.output), content)
        print(f"Wrote snapshot to {args.output}")
    else:
        print(content)


def _run_check(args: argparse.Namespace) -> None:
    """Execute the check command."""
    records = load_snapshot(Path(args.path), args.zone)
    apex = extract_apex_version(records)
    serial = apex.serial if apex else "unknown"
    print(f"{args.path}: complete, {len(records)} records, serial {serial}")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config()
        configure_logging(args.log_level or config.log_level)
        if args.command == "remote-serial":
            _run_remote_serial(config, args)
        elif args.command == "local-serial":
            _run_local_serial(config, args)
        elif args.command == "sync":
            _run_sync(config, args)
        elif args.command == "show":
            _run_show(config, args)
        elif args.command == "check":
            _run_check(args)
        else:  # pragma: no cover - argparse ensures we never reach here
            parser.error(f"Unsupported command {args.command}")
    except IxfrStoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as exc:  # noqa: BLE001
        print(f"Unexpected error: {exc}", file=sys.stderr)
        sys.exit(3)


if __name__ == "__main__":
    main()

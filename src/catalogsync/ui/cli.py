from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalogsync.adapters.snapshot import SnapshotListing
from catalogsync.app import cascade_entity, export_pending, reconcile_source, revive_entity
from catalogsync.config import configure_logging, get_export_config
from catalogsync.domain.model import AssetType, EntityKey

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

ASSET_TYPE_CHOICES = tuple(asset_type.value for asset_type in AssetType)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _add_type_filter(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--asset-type",
        dest="asset_types",
        action="append",
        choices=ASSET_TYPE_CHOICES,
        help="Restrict to this asset type (repeatable; default: all types)",
    )


def _add_export_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--batch-size",
        type=_positive_int,
        default=None,
        help="Entities per import job (defaults to config)",
    )
    parser.add_argument(
        "--concurrency",
        type=_positive_int,
        default=None,
        help="Asset types exported in parallel (defaults to config)",
    )


def _add_entity_key(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--asset-type", required=True, choices=ASSET_TYPE_CHOICES)
    parser.add_argument("--id", dest="external_id", required=True, help="External id in source")
    parser.add_argument("--scope", required=True, help="Scope the id is unique in (e.g. site)")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mirror a source catalog into a governance catalog")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Apply a source snapshot to the mirror")
    reconcile.add_argument("--snapshot", required=True, help="Path to a JSON source snapshot")
    _add_type_filter(reconcile)

    export = subparsers.add_parser("export", help="Push pending changes to the catalog")
    _add_type_filter(export)
    _add_export_options(export)

    sync = subparsers.add_parser("sync", help="Reconcile a snapshot, then export")
    sync.add_argument("--snapshot", required=True, help="Path to a JSON source snapshot")
    _add_type_filter(sync)
    _add_export_options(sync)

    cascade = subparsers.add_parser("cascade", help="Soft-delete an entity and its descendants")
    _add_entity_key(cascade)

    revive = subparsers.add_parser("revive", help="Revive a deleted entity for the next export")
    _add_entity_key(revive)

    return parser.parse_args(list(argv))


def _asset_types(args: argparse.Namespace) -> set[AssetType] | None:
    if not args.asset_types:
        return None
    return {AssetType(value) for value in args.asset_types}


def _entity_key(args: argparse.Namespace) -> EntityKey:
    external_id = args.external_id.strip()
    scope = args.scope.strip()
    if not external_id or not scope:
        raise ValueError("--id and --scope must not be blank")
    return EntityKey(AssetType(args.asset_type), external_id, scope)


def _export(args: argparse.Namespace) -> bool:
    config = get_export_config()
    if args.batch_size is not None:
        config = replace(config, batch_size=args.batch_size)
    if args.concurrency is not None:
        config = replace(config, concurrency=args.concurrency)

    result = export_pending(config=config, asset_types=_asset_types(args))
    log.info(
        "Export: created=%s, updated=%s, relations=%s, skipped=%s, deleted=%s",
        result.created,
        result.updated,
        result.relations_created,
        result.skipped,
        result.deleted,
    )
    if not result.success:
        log.error(f"Export failed: {result.message}")
    return result.success


def _reconcile(args: argparse.Namespace) -> None:
    source = SnapshotListing.from_path(args.snapshot)
    reconcile_source(source=source, asset_types=_asset_types(args))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        key = _entity_key(parsed_args) if parsed_args.command in {"cascade", "revive"} else None
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    success = True
    try:
        if parsed_args.command == "reconcile":
            _reconcile(parsed_args)
        elif parsed_args.command == "export":
            success = _export(parsed_args)
        elif parsed_args.command == "sync":
            _reconcile(parsed_args)
            success = _export(parsed_args)
        elif parsed_args.command == "cascade" and key is not None:
            changed = cascade_entity(key)
            log.info("Cascade from %s marked %s entities deleted", key, len(changed))
        elif parsed_args.command == "revive" and key is not None:
            entity = revive_entity(key)
            log.info("Revived %r", entity)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)

    if not success:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

"""Singerframe CLI entry points.
This module exposes commands to list, export, and snapshot synced streams.
It maps argparse commands onto the reader, exporter, and snapshot store.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import EtlConfig
from core.constants import (
    DEFAULT_PRIMARY_KEY,
    INPUT_DIR_NAME,
    OUTPUT_DIR_NAME,
    SNAPSHOTS_DIR_NAME,
    SUPPORTED_EXPORT_FORMATS,
)
from core.errors import SingerFrameError
from core.logging_config import get_logger
from core.types import ExportOptions, SnapshotMergeOptions
from ingest.input_reader import Reader
from store.frame_export import to_export
from store.snapshot_store import SnapshotStore

_LOGGER = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="singerframe", description="Singerframe ETL CLI")
    parser.add_argument("--root-dir", help="Override ROOT_DIR and its default directories")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_streams_command(subparsers)
    _add_export_command(subparsers)
    _add_snapshot_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the singerframe CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.root_dir)
    if args.command == "streams":
        return _run_streams_command(config)
    if args.command == "export":
        return _run_export_command(config, args)
    if args.command == "snapshot":
        return _run_snapshot_command(config, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(root_dir: str | None) -> EtlConfig:
    """Build config with optional root override.

    Args:
        root_dir: Optional override path.

    Returns:
        Runtime configuration.
    """
    config = EtlConfig.from_env()
    if root_dir:
        resolved_root = Path(root_dir).expanduser().resolve()
        config = replace(
            config,
            root_dir=resolved_root,
            input_dir=resolved_root / INPUT_DIR_NAME,
            output_dir=resolved_root / OUTPUT_DIR_NAME,
            snapshot_dir=resolved_root / SNAPSHOTS_DIR_NAME,
        )
    return config


def _run_streams_command(config: EtlConfig) -> int:
    """Handle streams command.

    Args:
        config: Runtime configuration.

    Returns:
        Exit code.
    """
    reader = Reader(config)
    for stream in reader.keys():
        print(f"{stream}\t{reader.path_for(stream)}")
    return 0


def _run_export_command(config: EtlConfig, args: argparse.Namespace) -> int:
    """Handle export command.

    Failures are logged per stream so one bad stream does not stop the rest.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code, ``1`` when any stream failed.
    """
    reader = Reader(config)
    streams = [args.stream] if args.stream else reader.keys()
    failed = 0
    for stream in streams:
        try:
            frame = reader.get(stream, catalog_types=args.catalog_types)
            if frame is None:
                _LOGGER.warning("stream_not_found", stream=stream)
                failed += 1
                continue
            output_path = to_export(
                frame,
                stream,
                config.output_dir,
                config,
                ExportOptions(export_format=args.format),
            )
        except SingerFrameError as error:
            _LOGGER.error("stream_export_failed", stream=stream, error=str(error))
            failed += 1
            continue
        print(output_path)
    return 1 if failed else 0


def _run_snapshot_command(config: EtlConfig, args: argparse.Namespace) -> int:
    """Handle snapshot command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    reader = Reader(config)
    stream_data = reader.get(args.stream, catalog_types=args.catalog_types)
    options = SnapshotMergeOptions(
        primary_key=args.primary_key,
        just_new=args.just_new,
        use_csv=args.csv,
        coerce_types=args.coerce_types,
        localize_datetimes=args.localize_datetimes,
        overwrite=args.overwrite,
    )
    result = SnapshotStore(config.snapshot_dir).merge(stream_data, args.stream, options)
    print(0 if result is None else len(result))
    return 0


def _add_streams_command(subparsers: Any) -> None:
    """Register streams subcommand."""
    subparsers.add_parser("streams", help="List streams found in the input directory")


def _add_export_command(subparsers: Any) -> None:
    """Register export subcommand."""
    parser = subparsers.add_parser("export", help="Export input streams to the output directory")
    parser.add_argument("--stream", help="Export only this stream")
    parser.add_argument(
        "--format",
        choices=SUPPORTED_EXPORT_FORMATS,
        help="Export format; defaults to DEFAULT_EXPORT_FORMAT",
    )
    parser.add_argument(
        "--catalog-types",
        action="store_true",
        help="Read CSV inputs with catalog-declared types",
    )


def _add_snapshot_command(subparsers: Any) -> None:
    """Register snapshot subcommand."""
    parser = subparsers.add_parser("snapshot", help="Merge an input stream into its snapshot")
    parser.add_argument("--stream", required=True, help="Stream name")
    parser.add_argument("--primary-key", default=DEFAULT_PRIMARY_KEY, help="Deduplication key")
    parser.add_argument("--just-new", action="store_true", help="Report only incoming rows")
    parser.add_argument("--csv", action="store_true", help="Persist the snapshot as CSV")
    parser.add_argument(
        "--coerce-types",
        action="store_true",
        help="Cast merged columns to the incoming dtypes",
    )
    parser.add_argument(
        "--localize-datetimes",
        action="store_true",
        help="Tag naive snapshot datetimes as UTC before merging",
    )
    parser.add_argument("--overwrite", action="store_true", help="Replace the snapshot")
    parser.add_argument(
        "--catalog-types",
        action="store_true",
        help="Read CSV input with catalog-declared types",
    )

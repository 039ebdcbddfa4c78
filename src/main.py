"""CLI entry point for the temperature heatmap (GUI launch and image export)."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from config import settings
from gui.services.logging_service import LoggingService
from services.dataset_provider import (
    DatasetProvider,
    FileDatasetProvider,
    HttpDatasetProvider,
    RetrievalFailure,
)

log = logging.getLogger("heatmap.cli")


def _provider(args: argparse.Namespace) -> DatasetProvider:
    if args.dataset:
        return FileDatasetProvider(args.dataset)
    return HttpDatasetProvider(args.url, use_cache=not args.no_cache)


def cmd_show(args: argparse.Namespace) -> int:
    from gui.app import main as gui_main

    return gui_main(_provider(args), strict=args.strict)


def cmd_export(args: argparse.Namespace) -> int:
    from gui.charting.export import export_heatmap

    try:
        dataset = asyncio.run(_provider(args).fetch_dataset())
    except RetrievalFailure as e:
        log.error("cannot export: %s", e)
        return 1
    result = export_heatmap(dataset, args.out, format=args.format, dpi=args.dpi, strict=args.strict)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--dataset", required=False, help="Local global-temperature.json instead of the URL")
    p.add_argument("--url", default=settings.DATASET_URL, help="Dataset URL")
    p.add_argument("--no-cache", action="store_true", help="Bypass the on-disk HTTP cache")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="temperature-heatmap")
    p.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (DEBUG, INFO, ...)")
    p.add_argument("--log-file", required=False, help="Write captured log records as JSON lines")
    p.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Raise on out-of-domain scale lookups instead of clamping",
    )
    sub = p.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Open the interactive heatmap window")
    _add_source_args(show)
    show.set_defaults(func=cmd_show)

    export = sub.add_parser("export", help="Render the heatmap to an image file")
    _add_source_args(export)
    export.add_argument("--out", required=True, help="Output file path")
    export.add_argument("--format", choices=("png", "svg"), default="png")
    export.add_argument("--dpi", type=int, default=None, help="Raster resolution for PNG")
    export.set_defaults(func=cmd_export)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    capture = LoggingService()
    capture.attach_root()
    try:
        return args.func(args)
    finally:
        capture.detach_root()
        if args.log_file:
            capture.export_jsonl(args.log_file)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

"""Command line entry point: export the graphic of a saved page."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Sequence

from canvasprint.api import create_pipeline
from canvasprint.config import DEVELOPMENT, PRODUCTION, ExportSettings
from canvasprint.obs.events import PRINT_PORT
from canvasprint.view import LiveView


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="canvasprint",
        description="Export the live SVG graphic of an XHTML page as a standalone document.",
    )
    parser.add_argument("page", type=Path, help="XHTML page containing the graphic")
    parser.add_argument("--mode", choices=(DEVELOPMENT, PRODUCTION), help="override CANVASPRINT_ENV")
    parser.add_argument("--sink", choices=("download", "diagnostic"), help="delivery sink")
    parser.add_argument("--locator", help="id of the graphic element")
    parser.add_argument("--out", type=Path, help="download directory")
    parser.add_argument("--filename", help="download filename")
    parser.add_argument("--base-url", help="base URL for relative stylesheet links")
    declaration = parser.add_mutually_exclusive_group()
    declaration.add_argument("--declaration", dest="declaration", action="store_true", default=None)
    declaration.add_argument("--no-declaration", dest="declaration", action="store_false")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def _settings_from_args(args: argparse.Namespace) -> ExportSettings:
    overrides = {
        "sink": args.sink,
        "locator": args.locator,
        "output_dir": args.out,
        "filename": args.filename,
        "base_url": args.base_url,
        "declaration": args.declaration,
    }
    settings = ExportSettings.from_env()
    return dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})


async def _run(args: argparse.Namespace) -> int:
    pipeline = create_pipeline(LiveView.from_path(args.page), _settings_from_args(args))
    if args.mode is not None:
        pipeline.style_resolver.mode = lambda: args.mode
    results = await asyncio.gather(*pipeline.bus.send(PRINT_PORT))
    return 0 if all(result is not None for result in results) else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())

# src/main.py - v2
"""CLI entry point: ingest and identify commands.

Usage:
    docwrite ingest <file.json> --collection entries [--subject NAME]
    docwrite identify <file.json>
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from docwrite.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="docwrite",
        description=f"docwrite v{__version__} - deduplicating document writer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- ingest ---
    p_ingest = subparsers.add_parser(
        "ingest", help="Write a JSON document or array as one batch",
    )
    p_ingest.add_argument("file", type=Path, help="Path to JSON file")
    p_ingest.add_argument(
        "-c", "--collection", default="entries",
        help="Target collection (default: entries)",
    )
    p_ingest.add_argument(
        "--subject", default=None,
        help="Subject name stamped on written documents",
    )
    p_ingest.set_defaults(func=_cmd_ingest)

    # --- identify ---
    p_identify = subparsers.add_parser(
        "identify", help="Print computed identifiers without writing",
    )
    p_identify.add_argument("file", type=Path, help="Path to JSON file")
    p_identify.set_defaults(func=_cmd_identify)

    return parser


async def _cmd_ingest(args: argparse.Namespace) -> int:
    """Run one batch against the configured store."""
    from docwrite.api.facade import DocumentWriteEngine
    from docwrite.config.settings import Settings
    from docwrite.core.models import CallerContext
    from docwrite.security.authorizer import AllowAllAuthorizer

    body = _load_json(args.file)
    if body is None:
        return 1

    settings = Settings()
    engine = DocumentWriteEngine(
        args.collection, authorizer=AllowAllAuthorizer(), settings=settings,
    )
    caller = CallerContext(subject=args.subject)

    try:
        response = await engine.process_batch(caller, body)
    finally:
        engine.close()

    print(json.dumps(response.to_body(), indent=2))
    return 0 if response.status < 400 else 2


async def _cmd_identify(args: argparse.Namespace) -> int:
    """Print the identifier of every document in the file."""
    from docwrite.core.errors import DocWriteError
    from docwrite.core.models import Document
    from docwrite.identity.dates import normalize_date
    from docwrite.identity.resolver import calculate_identifier

    body = _load_json(args.file)
    if body is None:
        return 1

    items = body if isinstance(body, list) else [body]
    for index, raw in enumerate(items):
        try:
            doc = Document.parse(raw)
        except DocWriteError as e:
            print(f"{index}\t-\t{e.message}")
            continue
        normalize_date(doc)
        print(f"{index}\t{calculate_identifier(doc)}\t{doc.get('identifier') or ''}")
    return 0


def _load_json(path: Path) -> Any:
    if not path.exists():
        logger.error("File not found: %s", path)
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        return None


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from docwrite.logging.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "INFO", log_format="text")
    logging.getLogger("pymongo").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())

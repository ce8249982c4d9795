"""
Command-line interface.

Usage:
    storeglot translate page.html -t fr
    storeglot translate description.json -t de -s en --type EDITOR_JS -o out.json
    storeglot extract README.md
    storeglot sync product -t es
    storeglot serve --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from storeglot.backends import BACKEND_NAMES, create_backend
from storeglot.config import configure_logging, get_settings
from storeglot.core.errors import StoreglotError
from storeglot.core.models import ContentType
from storeglot.core.registry import default_registry
from storeglot.i18n import EntityTranslator, TranslationMemory, TranslationOrchestrator
from storeglot.sources import ENTITY_TYPES, SaleorSource

logger = logging.getLogger(__name__)

CONTENT_TYPES = [t.value for t in ContentType]


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _orchestrator(backend_name: str | None) -> TranslationOrchestrator:
    settings = get_settings()
    memory = TranslationMemory(
        path=settings.translation_memory_path or None,
        max_entries=settings.translation_memory_max_entries,
    )
    return TranslationOrchestrator.from_settings(
        create_backend(backend_name, settings), memory=memory, settings=settings
    )


# =============================================================================
# Commands
# =============================================================================


async def run_translate(args: argparse.Namespace) -> int:
    orchestrator = _orchestrator(args.backend)
    try:
        translation = await orchestrator.process_document(
            _read(args.file),
            args.source,
            args.target,
            context=args.context,
            content_type=args.type,
        )
    finally:
        await orchestrator.backend.aclose()

    if args.output:
        Path(args.output).write_text(translation.translated_text, encoding="utf-8")
        logger.info("Wrote %s translation to %s", args.target, args.output)
    else:
        sys.stdout.write(translation.translated_text)
        if not translation.translated_text.endswith("\n"):
            sys.stdout.write("\n")

    validation = orchestrator.validate_translation(translation)
    for issue in validation.issues:
        logger.warning(issue)
    return 0


def run_extract(args: argparse.Namespace) -> int:
    parser, fragments = default_registry().extract(_read(args.file), args.type, strict=True)
    output = {
        "content_type": parser.content_type.value,
        "fragments": [fragment.model_dump(mode="json") for fragment in fragments],
    }
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


async def run_sync(args: argparse.Namespace) -> int:
    settings = get_settings()
    orchestrator = _orchestrator(args.backend)
    translator = EntityTranslator(
        orchestrator,
        SaleorSource.from_settings(settings),
        source_language=settings.default_source_language,
    )
    failed = 0
    try:
        for target in args.target or settings.target_languages_list:
            for result in await translator.translate_entities(args.content_type, target):
                print(f"{result.entity_id} [{target}] {result.status.value}")
                for error in result.errors:
                    print(f"  ! {error}")
                failed += bool(result.errors)
    finally:
        await orchestrator.backend.aclose()
    return 1 if failed else 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storeglot.api.app:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
    )
    return 0


# =============================================================================
# CLI Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storeglot",
        description="Translate structured store content without breaking its markup",
    )
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL setting)")
    commands = parser.add_subparsers(dest="command", required=True)

    translate = commands.add_parser("translate", help="Translate a document")
    translate.add_argument("file", help="Input file, or - for stdin")
    translate.add_argument("--target", "-t", required=True, help="Target language code")
    translate.add_argument("--source", "-s", help="Source language code (default: auto)")
    translate.add_argument("--type", type=str.upper, choices=CONTENT_TYPES, help="Content type (default: detect)")
    translate.add_argument("--context", default="", help="Context passed to the backend")
    translate.add_argument("--output", "-o", help="Output file (default: stdout)")
    translate.add_argument("--backend", choices=BACKEND_NAMES, help="Translation backend")

    extract = commands.add_parser("extract", help="List translatable fragments")
    extract.add_argument("file", help="Input file, or - for stdin")
    extract.add_argument("--type", type=str.upper, choices=CONTENT_TYPES, help="Content type (default: detect)")

    sync = commands.add_parser("sync", help="Translate untranslated Saleor entities")
    sync.add_argument("content_type", choices=list(ENTITY_TYPES))
    sync.add_argument(
        "--target", "-t",
        nargs="+",
        help="Target languages (default: ENABLED_TARGET_LANGUAGES)",
    )
    sync.add_argument("--backend", choices=BACKEND_NAMES, help="Translation backend")

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.add_argument("--reload", action="store_true")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "translate":
            return asyncio.run(run_translate(args))
        if args.command == "extract":
            return run_extract(args)
        if args.command == "sync":
            return asyncio.run(run_sync(args))
        return run_serve(args)
    except (StoreglotError, OSError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
jsonlingo - command line entry point.

Translate a JSON file and write the translated document (and optionally a
minimal patch) next to it.

Usage:
    python -m jsonlingo messages.json -t fr
    python -m jsonlingo messages.json -s en -t de -o messages.de.json --patch de.patch.json
    python -m jsonlingo messages.json -t es --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from jsonlingo.config import Settings, get_settings
from jsonlingo.core.errors import JsonLingoError
from jsonlingo.core.log_config import configure_logging
from jsonlingo.core.models import SessionStatus, TranslationConfig, TranslationSession
from jsonlingo.processing import (
    create_patch,
    deduplicate_strings,
    estimate_translation_cost,
    extract_strings,
    format_file_size,
    validate_json,
)
from jsonlingo.services.orchestrator import create_orchestrator


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonlingo",
        description="Translate the human-readable strings of a JSON document.",
    )
    parser.add_argument("input", type=Path, help="JSON file to translate")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: <input>.<target>.json)")
    parser.add_argument("-s", "--source", default=settings.default_source_language,
                        help="Source language code, or 'auto' (default: %(default)s)")
    parser.add_argument("-t", "--target", default=settings.default_target_language,
                        help="Target language code (default: %(default)s)")
    parser.add_argument("--batch-size", type=int, default=settings.batch_size)
    parser.add_argument("--max-retries", type=int, default=settings.max_retries)
    parser.add_argument("--patch", type=Path, help="Also write a minimal patch of changed strings")
    parser.add_argument("--dry-run", action="store_true",
                        help="Only report what would be translated")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show pipeline logs")
    return parser


def default_output_path(input_path: Path, target: str) -> Path:
    return input_path.with_name(f"{input_path.stem}.{target}{input_path.suffix or '.json'}")


def print_dry_run(data) -> None:
    strings = extract_strings(data)
    unique, _ = deduplicate_strings(strings)
    print(f"  Translatable strings: {len(strings)}")
    print(f"  Unique strings:       {len(unique)}")
    print(f"  Estimated tokens:     {estimate_translation_cost(u.value for u in unique)}")


def print_progress(session: TranslationSession) -> None:
    done = session.translated_strings + session.skipped_strings + session.error_strings
    print(
        f"\r  {done}/{session.unique_strings} unique strings "
        f"({session.error_strings} errors)",
        end="",
        flush=True,
    )


async def run(args: argparse.Namespace, settings: Settings) -> int:
    text = args.input.read_text(encoding="utf-8")
    ok, error, data = validate_json(text)
    if not ok:
        print(f"Invalid JSON in {args.input}: {error}", file=sys.stderr)
        return 2

    print(f"Loaded {args.input} ({format_file_size(len(text.encode('utf-8')))})")

    if args.dry_run:
        print_dry_run(data)
        return 0

    config = TranslationConfig(
        source_language=args.source,
        target_language=args.target,
        batch_size=args.batch_size,
        max_retries=args.max_retries,
    )

    orchestrator = create_orchestrator(settings)
    orchestrator.set_progress_callback(print_progress)
    try:
        session = await orchestrator.start_translation(data, config)
    finally:
        print()
        await orchestrator.backend.aclose()
        await orchestrator.cache.store.close()

    if session.status != SessionStatus.COMPLETED:
        print(f"Translation ended with status {session.status.value}", file=sys.stderr)
        return 1

    output = args.output or default_output_path(args.input, args.target)
    output.write_text(
        json.dumps(session.translated_json, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    print(f"  ✓ Wrote {output}")

    if args.patch:
        patch = create_patch(session.original_json, session.translated_json)
        args.patch.write_text(json.dumps(patch, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        print(f"  ✓ Wrote patch {args.patch}")

    stats = orchestrator.get_translation_stats()
    print(
        f"  ✓ {stats.total_translated} translated, {stats.total_errors} failed, "
        f"cache hit rate {stats.cache_hit_rate:.0%}"
    )
    return 1 if stats.total_errors else 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)
    configure_logging(settings.log_level if args.verbose else "WARNING")

    try:
        return asyncio.run(run(args, settings))
    except (JsonLingoError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

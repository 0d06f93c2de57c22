"""CLI entry point for batch matching."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from dotenv import load_dotenv

from .config import load_config
from .dates import DateFormatExpander
from .label_fields import extract_batch_information
from .orchestrator import MatchOrchestrator


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="medscan-match",
        description="Match OCR label text against registered pharmaceutical batches",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )

    sub = parser.add_subparsers(dest="command")

    # match
    match_parser = sub.add_parser("match", help="Exact batch + expiry matching")
    _add_text_args(match_parser)
    match_parser.add_argument(
        "--catalog", type=str, required=True, help="JSON file of candidate batches"
    )
    match_parser.add_argument(
        "--threshold", type=float, default=None, help="Batch similarity threshold"
    )
    match_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # rank
    rank_parser = sub.add_parser("rank", help="Top-5 weighted ranking")
    _add_text_args(rank_parser)
    rank_parser.add_argument(
        "--catalog", type=str, required=True, help="JSON file of candidate batches"
    )
    rank_parser.add_argument(
        "--quantities", type=str, default=None, metavar="FILE",
        help="JSON object mapping item codes to requested quantities",
    )
    rank_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # formats
    formats_parser = sub.add_parser("formats", help="List rendered forms of a date")
    formats_parser.add_argument("date", type=str)
    formats_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # extract
    extract_parser = sub.add_parser("extract", help="Extract label fields from text")
    _add_text_args(extract_parser)
    extract_parser.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)
    logging.basicConfig(level=config.logging.level)

    match args.command:
        case "match":
            _cmd_match(config, args)
        case "rank":
            _cmd_rank(config, args)
        case "formats":
            _cmd_formats(args)
        case "extract":
            _cmd_extract(args)


def _add_text_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--text", type=str, help="Recognized label text")
    group.add_argument(
        "--text-file", type=str, metavar="FILE", help="File holding recognized text"
    )


def _read_text(args) -> str:
    if args.text is not None:
        return args.text
    try:
        return Path(args.text_file).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Cannot read text file: {e}", file=sys.stderr)
        sys.exit(1)


def _read_json(path: str, expected: type, label: str):
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot load {label}: {e}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, expected):
        print(
            f"{label} must be a JSON {expected.__name__}, got {type(data).__name__}",
            file=sys.stderr,
        )
        sys.exit(1)
    return data


def _cmd_match(config, args) -> None:
    text = _read_text(args)
    catalog = _read_json(args.catalog, list, "catalog")

    with MatchOrchestrator(config) as orchestrator:
        outcome = orchestrator.process_text(text, catalog, args.threshold)

    if args.json:
        data = {
            "success": outcome.success,
            "error": outcome.error,
            "matches": [m.to_dict() for m in outcome.matches],
            "nearestMatches": [m.to_dict() for m in outcome.nearest_matches],
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if not outcome.success:
        print(outcome.error)
        return
    if outcome.matches:
        print(f"Exact matches ({len(outcome.matches)}):")
        for m in outcome.matches:
            print(f"  {m.batch.batch_number:<16} {m.similarity:.0%}  expiry OK")
    elif outcome.nearest_matches:
        print("No exact match. Nearest batches for review:")
        for m in outcome.nearest_matches:
            print(f"  {m.batch.batch_number:<16} {m.similarity:.0%}")
    else:
        print("No matching batch found.")


def _cmd_rank(config, args) -> None:
    text = _read_text(args)
    catalog = _read_json(args.catalog, list, "catalog")
    hints = (
        _read_json(args.quantities, dict, "quantities") if args.quantities else None
    )

    with MatchOrchestrator(config) as orchestrator:
        ranked = orchestrator.find_top_ranked(text, catalog, quantity_hints=hints)

    if args.json:
        print(json.dumps([r.to_dict() for r in ranked], ensure_ascii=False, indent=2))
        return

    if not ranked:
        print("No batch scored high enough to rank.")
        return
    for r in ranked:
        inferred = " (inferred)" if r.quantity_inferred else ""
        print(
            f"  {r.rank_display:<4} {r.batch.batch_number:<16} "
            f"{r.composite_score:5.1f}  qty {r.requested_quantity}{inferred}"
        )


def _cmd_formats(args) -> None:
    formats = DateFormatExpander().expand(args.date)
    if args.json:
        print(json.dumps(formats, ensure_ascii=False, indent=2))
        return
    print(f"{len(formats)} forms:")
    for fmt in formats:
        print(f"  {fmt}")


def _cmd_extract(args) -> None:
    fields = extract_batch_information(_read_text(args))
    if args.json:
        print(json.dumps(asdict(fields), ensure_ascii=False, indent=2))
        return
    for name, value in asdict(fields).items():
        print(f"  {name:<20} {value if value is not None else '-'}")

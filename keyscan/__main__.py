"""
CLI interface for keyscan.

Usage:
    python -m keyscan decode "<raw scan>" [options]
    python -m keyscan simulate "<keys>" [options]
    python -m keyscan history [options]

In ``simulate``, a key name longer than one character is written in
braces, e.g. ``"0100681599063722{Enter}"``.
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .ai_table import APPLICATION_IDENTIFIERS
from .core.scanner import Scanner, ScannerOptions, ScanValues
from .core.schedulers import ManualScheduler
from .decoders.basic import decode_basic
from .decoders.gs1 import DEFAULT_FUNCTION_CODES, gs1_decoder
from .formatters.json_formatter import format_payload_json
from .words import SPECIAL_KEYS

_KEY_TOKEN = re.compile(r"\{([^{}]+)\}|.", re.DOTALL)


def split_keys(text: str) -> List[str]:
    """Split ``"AB{Enter}"`` into ``["A", "B", "Enter"]``."""
    return [m.group(1) or m.group(0) for m in _KEY_TOKEN.finditer(text)]


def format_result(raw: str, payload: Optional[Dict[str, Any]]) -> str:
    """Format a decode result for display."""
    lines = [
        "=" * 60,
        "Scan Decode Result",
        "=" * 60,
        f"Raw Input: {raw!r}",
    ]

    if not payload:
        lines.append("Nothing decoded")
        return '\n'.join(lines)

    lines.append(f"Linear (1D): {payload['1D']!r}")

    structured = payload.get("2D")
    if structured:
        lines.extend([
            f"GS1: {structured['gs1']}",
            "",
            "Fields:",
            "-" * 40,
        ])
        for ai, value in structured.items():
            if ai == "gs1":
                continue
            entry = APPLICATION_IDENTIFIERS.get(ai)
            lines.append(f"  AI({ai}): {entry.purpose if entry else 'Unknown'}")
            lines.append(f"    Value: {value!r}")

    return '\n'.join(lines)


def _build_decoder(args: argparse.Namespace):
    special_keys = tuple(args.special_key) if args.special_key else SPECIAL_KEYS
    if args.basic:
        return lambda raw: decode_basic(raw, special_keys)
    function_codes = tuple(args.fnc) if args.fnc else DEFAULT_FUNCTION_CODES
    return gs1_decoder(function_codes, special_keys)


def _cmd_decode(args: argparse.Namespace) -> int:
    payload = _build_decoder(args)(args.raw)

    if args.json:
        print(format_payload_json(payload, raw_payload=args.raw_payload))
    else:
        print(format_result(args.raw, payload))

    return 0 if payload else 1


def _cmd_simulate(args: argparse.Namespace) -> int:
    scheduler = ManualScheduler()
    scans: List[ScanValues] = []

    options = ScannerOptions(
        timer=args.timer,
        prefix_keys=args.prefix or (),
        suffix_keys=args.suffix or (),
        exclude_listening_from_nodes=(),
        key_gap=args.key_gap,
        on_scan=scans.append,
        decoder=_build_decoder(args),
    )

    with Scanner(options, scheduler=scheduler) as scanner:
        for key in split_keys(args.keys):
            scanner.feed(key, timestamp=scheduler.now())
            scheduler.advance(args.interval)
        scheduler.run_all()

    for values in scans:
        if args.json:
            print(format_payload_json(values.parsed, scanned=values.scanned, raw_payload=args.raw_payload))
        else:
            print(format_result(values.scanned, values.parsed))

    if not scans:
        print("No scan detected", file=sys.stderr)
    return 0 if scans else 1


def _cmd_history(args: argparse.Namespace) -> int:
    from . import storage
    from .reports import export_csv, to_dataframe

    storage.init_db()
    scans = storage.list_scans(limit=args.limit)

    if args.csv:
        path = export_csv(to_dataframe(scans), Path(args.csv))
        print(f"Exported {len(scans)} scan(s) to {path}")
        return 0

    for scan in scans:
        parsed = scan.get("parsed") or {}
        structured = parsed.get("2D") or {}
        shown = structured.get("gs1") or parsed.get("1D", "")
        print(f"{scan.get('timestamp', '')}  {shown}")

    return 0 if scans else 1


def _add_decoder_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--fnc',
        action='append',
        metavar='TOKEN',
        help='Function code separating GS1 groups (repeatable, '
             f'default: {", ".join(DEFAULT_FUNCTION_CODES)})'
    )
    parser.add_argument(
        '--basic',
        action='store_true',
        help='Only strip special keys, no GS1 decoding'
    )
    parser.add_argument(
        '--special-key',
        action='append',
        metavar='KEY',
        help='Key name to strip (repeatable, replaces the default set)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Output result as JSON'
    )
    parser.add_argument(
        '--raw-payload',
        action='store_true',
        help='With --json, output the payload structure instead of field names'
    )


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='keyscan',
        description='Decode keyboard-wedge barcode scans'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    decode = subparsers.add_parser('decode', help='Decode a raw scan string')
    decode.add_argument('raw', help='Raw scan as typed by the scanner')
    _add_decoder_arguments(decode)
    decode.set_defaults(func=_cmd_decode)

    simulate = subparsers.add_parser(
        'simulate',
        help='Replay keystrokes through the scanner state machine'
    )
    simulate.add_argument('keys', help='Keys to type, e.g. "0100681599063722{Enter}"')
    simulate.add_argument(
        '--interval',
        type=float,
        default=10,
        help='Milliseconds between keystrokes (default: 10)'
    )
    simulate.add_argument(
        '--key-gap',
        type=float,
        default=40,
        help='Maximum milliseconds between keys of one scan (default: 40)'
    )
    simulate.add_argument(
        '--suffix',
        action='append',
        metavar='KEY',
        help='Suffix key ending a scan (repeatable)'
    )
    simulate.add_argument(
        '--prefix',
        action='append',
        metavar='KEY',
        help='Prefix key starting a scan (repeatable)'
    )
    simulate.add_argument(
        '--timer',
        type=float,
        default=100,
        help='Milliseconds after a prefix key at which the scan ends (default: 100)'
    )
    _add_decoder_arguments(simulate)
    simulate.set_defaults(func=_cmd_simulate)

    history = subparsers.add_parser('history', help='List recorded scans')
    history.add_argument(
        '--limit',
        type=int,
        default=None,
        help='Maximum number of scans to list'
    )
    history.add_argument(
        '--csv',
        default=None,
        help='Export the listed scans to this CSV file'
    )
    history.set_defaults(func=_cmd_history)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())

#!/usr/bin/env python3
"""
CLASSIC - Crash Log Auto Scanner - Main Entry Point

Command-line launcher for the crash log scanning tools.
"""

import sys
import json
import argparse
from pathlib import Path

# Load .env before any classic_scanner imports (so CLASSIC_DATA_PATH etc. are set)
from dotenv import load_dotenv

load_dotenv()

# Add classic_scanner to path
sys.path.insert(0, str(Path(__file__).parent))


def print_banner():
    from classic_scanner.constants import APP_NAME, APP_TITLE, VERSION

    print("=" * 62)
    print(APP_NAME.center(62))
    print(APP_TITLE.center(62))
    print(f"Version {VERSION}".center(62))
    print("=" * 62)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='CLASSIC - Crash log analysis for Fallout 4 and Skyrim',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan a crash log
  %(prog)s scan crash-2024-01-01-12-00-00.log

  # Scan and write JSON results
  %(prog)s scan crash.log --json --output results.json

  # Use an extra FormID database
  %(prog)s scan crash.log --formid-db "D:/CLASSIC/Fallout4 FormIDs Main.db"

  # Show how the log was segmented
  %(prog)s segments crash.log

  # List FormID database locations
  %(prog)s db-paths --game skyrim

  # Download a crash log shared on Pastebin
  %(prog)s fetch https://pastebin.com/abc123
        """
    )

    parser.add_argument(
        'command',
        choices=['scan', 'segments', 'db-paths', 'fetch'],
        help='Command to execute'
    )

    parser.add_argument(
        'target',
        nargs='?',
        help='Crash log path (scan, segments) or Pastebin URL (fetch)'
    )

    parser.add_argument(
        '--game',
        choices=['fallout4', 'skyrim'],
        help='Game the crash log belongs to (default: auto-detect)'
    )

    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        default=None,
        help='Print progress messages'
    )

    parser.add_argument(
        '--json',
        action='store_true',
        help='Print results as JSON'
    )

    parser.add_argument(
        '--output',
        '-o',
        help='Output file for results (default: console); target directory for fetch'
    )

    parser.add_argument(
        '--no-formids',
        action='store_true',
        help='Skip FormID suspect analysis'
    )

    parser.add_argument(
        '--no-formid-values',
        action='store_true',
        help='Do not look up FormID descriptions in the databases'
    )

    parser.add_argument(
        '--formid-db',
        action='append',
        default=[],
        metavar='PATH',
        help='Additional FormID database file (repeatable)'
    )

    parser.add_argument(
        '--max-errors',
        type=int,
        help='Maximum number of issues to report'
    )

    return parser


def _scan(args) -> int:
    from classic_scanner.analyzer import format_formid_analysis
    from classic_scanner.core import ScanConfig, scan_crash_log

    config = ScanConfig.from_env(
        args.target,
        game=args.game,
        verbose=args.verbose,
        max_errors=args.max_errors,
        enable_formid_analysis=not args.no_formids,
        show_formid_values=not args.no_formid_values,
        formid_database_paths=args.formid_db,
    )

    result = scan_crash_log(config)

    if args.json:
        text = json.dumps(result.to_dict(), indent=2)
    else:
        lines = [
            f"Status: {result.status}",
            f"Game: {result.metadata.game}",
            f"Lines processed: {result.metadata.lines_processed}",
            f"Duration: {result.metadata.duration_ms or 0:.0f} ms",
            f"Issues found: {len(result.issues)}",
            "",
        ]
        for issue in result.issues:
            lines.append(f"[{issue.severity.upper()}] {issue.title}: {issue.description}")
        if result.issues:
            lines.append("")

        if result.formid_analysis is not None:
            lines.append("# LIST OF (POSSIBLE) FORM ID SUSPECTS #")
            lines.extend(format_formid_analysis(result.formid_analysis))
            if not result.formid_analysis.database_available and not args.no_formid_values:
                lines.append("(No FormID database found, descriptions unavailable)")
        text = "\n".join(lines)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text + "\n")
        print(f"\n✓ Results saved to: {args.output}")
    else:
        print(text)

    return 0 if result.status == 'completed' else 1


def _segments(args) -> int:
    from classic_scanner.core import ScanConfig, read_crash_log
    from classic_scanner.constants import DEFAULT_GAME
    from classic_scanner.segments import detect_game, parse_log_segments

    content, error = read_crash_log(args.target)
    if content is None:
        print(f"[-] {error}")
        return 1

    game = (ScanConfig.from_env(args.target, game=args.game).game
            or detect_game(content, Path(args.target).name) or DEFAULT_GAME)
    parsed = parse_log_segments(content, game)

    print(f"Game: {parsed.game}")
    if parsed.generator:
        print(f"Generator: {parsed.generator} {parsed.generator_version or ''}".rstrip())
    print(f"Total lines: {parsed.total_lines}")
    print("\nSEGMENTS")
    print("=" * 60)
    for segment in parsed.segments:
        print(f"  {segment.type.value:<10} lines {segment.start_line:>5} - {segment.end_line:<5} ({len(segment.lines)})")
    return 0


def _db_paths(args) -> int:
    from classic_scanner.constants import DEFAULT_GAME
    from classic_scanner.core import ScanConfig
    from classic_scanner.db_paths import database_exists, get_formid_database_paths

    game = ScanConfig.from_env(None, game=args.game).game or DEFAULT_GAME
    print(f"FormID database locations for {game}:")
    for db_path in get_formid_database_paths(game) + [Path(p) for p in args.formid_db]:
        marker = "[+]" if database_exists(db_path) else "[-]"
        print(f"  {marker} {db_path}")
    return 0


def _fetch(args) -> int:
    import requests
    from classic_scanner.pastebin import fetch_pastebin_log

    try:
        path = fetch_pastebin_log(args.target, output_dir=args.output, verbose=bool(args.verbose))
    except requests.RequestException as e:
        print(f"[-] Download failed: {type(e).__name__}: {e}")
        return 1

    print(f"[OK] Crash log saved to: {path}")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in ('scan', 'segments', 'fetch') and not args.target:
        parser.error(f"{args.command} command requires a target argument")

    if not args.json:
        print_banner()

    # Route to appropriate handler
    if args.command == 'scan':
        return _scan(args)
    elif args.command == 'segments':
        return _segments(args)
    elif args.command == 'db-paths':
        return _db_paths(args)
    elif args.command == 'fetch':
        return _fetch(args)
    return 1


if __name__ == '__main__':
    sys.exit(main())

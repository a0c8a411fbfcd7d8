#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence

from slipscan import __version__


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Receipt line-item extraction CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  parse <text_file>          Extract items from saved OCR text
  scan <image>               OCR a receipt photo and extract items
  serve [--host] [--port]    Start the receipt HTTP server

Exit codes:
  0 = items found, 2 = no items detected, 1 = error
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Extract items from saved OCR text")
    parse_parser.add_argument("text_file", help="Path to a text file with OCR output")
    parse_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parse_parser.add_argument(
        "--rules",
        action="append",
        metavar="PATH",
        help="Extra receipt rules TOML (repeatable; replaces the project rules file)",
    )

    # scan command
    scan_parser = subparsers.add_parser("scan", help="OCR a receipt photo and extract items")
    scan_parser.add_argument("image", help="Path to receipt image")
    scan_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    scan_parser.add_argument("--no-ai", action="store_true", help="Skip AI parsing and classification")
    scan_parser.add_argument("--save-text", action="store_true", help="Save the raw OCR text under receipts/ocr_text/")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the receipt HTTP server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "parse":
        from slipscan.cli.receipt import cmd_parse

        return _run_command(cmd_parse, args)
    elif args.command == "scan":
        from slipscan.cli.receipt import cmd_scan

        return _run_command(cmd_scan, args)
    elif args.command == "serve":
        from slipscan.cli.receipt import cmd_serve

        return _run_command(cmd_serve, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())

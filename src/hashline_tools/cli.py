"""
Command-line interface for hashline-tools.

Usage:
    hashline-tools read src/app.py --offset 100 --limit 50
    hashline-tools edit src/app.py --edits '[{"op": "set_line", "anchor": "2#ZPMQ", "new_text": "x = 1"}]'
    cat batch.json | hashline-tools edit src/app.py --edits -
"""

import argparse
import logging
import sys
import traceback

from .config import settings
from .engine import HashlineEngine
from .errors import HashlineError
from .fingerprint import FingerprintMode
from .render import render_error
from .tools.file_io import read_text_file, write_text_atomic

logger = logging.getLogger("hashline_tools")


def setup_logging(verbose: bool = False) -> None:
    """Send package logs to stderr so stdout stays machine-readable."""
    if logger.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(handler)
    logger.setLevel("DEBUG" if verbose else settings.log_level.upper())


def _engine(args: argparse.Namespace) -> HashlineEngine:
    return HashlineEngine(
        mode=args.mode or settings.fingerprint_mode,
        diff_context=settings.diff_context,
        mismatch_context=settings.mismatch_context,
    )


def register_commands(subparsers: argparse._SubParsersAction) -> None:
    """Register the read and edit commands."""
    modes = [m.value for m in FingerprintMode]

    # read command
    read_parser = subparsers.add_parser(
        "read",
        help="List a file with line anchors",
        description="Print every line of a file prefixed with its LINE#FP anchor.",
    )
    read_parser.add_argument("file", type=str, help="File to read")
    read_parser.add_argument(
        "--offset",
        type=int,
        default=0,
        help="0-based index of the first line to list (default: 0)",
    )
    read_parser.add_argument(
        "--limit",
        type=int,
        default=settings.read_limit,
        help=f"Maximum number of lines to list (default: {settings.read_limit})",
    )
    read_parser.add_argument("--mode", choices=modes, help="Fingerprint mode")
    read_parser.set_defaults(func=cmd_read)

    # edit command
    edit_parser = subparsers.add_parser(
        "edit",
        help="Apply an anchored edit batch",
        description="Validate and apply a JSON array of edits to a file, all or nothing.",
    )
    edit_parser.add_argument("file", type=str, help="File to edit")
    edit_parser.add_argument(
        "--edits",
        "-e",
        type=str,
        required=True,
        help="JSON array of edit operations, or '-' to read it from stdin",
    )
    edit_parser.add_argument("--mode", choices=modes, help="Fingerprint mode")
    edit_parser.set_defaults(func=cmd_edit)


def cmd_read(args: argparse.Namespace) -> int:
    """Print the anchored listing of a file."""
    try:
        content = read_text_file(args.file, max_bytes=settings.max_file_bytes)
    except (OSError, ValueError) as exc:
        print(f"Error: Failed to read file: {exc}", file=sys.stderr)
        return 1

    print(_engine(args).render_read(content, args.offset, args.limit))
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    """Apply an edit batch and print the resulting diff."""
    edits = sys.stdin.read() if args.edits == "-" else args.edits

    try:
        content = read_text_file(args.file, max_bytes=settings.max_file_bytes)
    except (OSError, ValueError) as exc:
        print(f"Error: Failed to read file: {exc}", file=sys.stderr)
        return 1

    try:
        outcome = _engine(args).apply_edit_batch(content, edits)
    except HashlineError as exc:
        print(render_error(exc), file=sys.stderr)
        return 1

    if not outcome.changed:
        print(outcome.diff)
        return 0

    try:
        write_text_atomic(args.file, outcome.text)
    except OSError as exc:
        print(f"Error: Failed to write file: {exc}", file=sys.stderr)
        return 1

    print("Edit applied successfully.")
    print()
    print(outcome.diff)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="hashline-tools",
        description="Read and edit files through line-fingerprint anchors",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging and full tracebacks on error",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    register_commands(subparsers)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        sys.exit(args.func(args))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

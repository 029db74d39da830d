"""
Cascade Thinking CLI.

Usage:
    cascade-thinking serve [--log-level LEVEL]
    cascade-thinking replay FILE [--json] [--quiet] [--mode MODE]

``replay`` feeds a JSON-lines file of cascade_thinking arguments (one
object per line, ``-`` for stdin) through a single engine and prints what
the engine made of each line.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional, TextIO

from cascade_thinking import ThinkingEngine
from cascade_thinking.logging_config import setup_cascade_logging
from cascade_thinking.mcp.tool_definitions import VALID_RESPONSE_MODES

# Set up logging
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)


def cmd_serve(args) -> int:
    """Start the MCP server on stdio."""
    from cascade_thinking.mcp.server import main as serve

    serve(args.log_level)
    return 0


def _read_lines(source: TextIO) -> List[str]:
    return [line for line in source.read().splitlines() if line.strip()]


def cmd_replay(args, engine: Optional[ThinkingEngine] = None) -> int:
    """Replay recorded tool calls and print each result."""
    engine = engine or ThinkingEngine(disable_thought_logging=True)

    if args.file == "-":
        lines = _read_lines(sys.stdin)
    else:
        with open(args.file, encoding="utf-8") as f:
            lines = _read_lines(f)

    failures = 0
    for line_number, line in enumerate(lines, start=1):
        try:
            arguments = json.loads(line)
        except json.JSONDecodeError as e:
            print(f"line {line_number}: invalid JSON ({e.msg})")
            failures += 1
            continue

        if args.mode and isinstance(arguments, dict):
            arguments["responseMode"] = args.mode

        result = engine.process_thought(arguments)
        if result.is_error:
            failures += 1
        elif args.quiet:
            continue

        if args.json:
            print(result.text)
        elif result.is_error:
            print(f"line {line_number}: ✗ {result.payload['error']}")
        else:
            payload = result.payload
            print(
                f"line {line_number}: {payload['thoughtNumber']} "
                f"[{payload['absoluteThoughtNumber']}] {payload['hint']}"
            )

    if not args.quiet:
        state = engine.snapshot()
        print(
            f"\n{len(lines)} calls, {failures} rejected, "
            f"{state['absoluteCounter']} thoughts in {len(state['sequences'])} sequences, "
            f"{len(state['branches'])} branches"
        )
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cascade-thinking",
        description="Cascade thinking - multi-sequence, branching thought bookkeeping",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the MCP server (stdio)")
    serve.add_argument("--log-level", default=None, help="Log level (default: CASCADE_LOG_LEVEL or INFO)")

    replay = subparsers.add_parser("replay", help="Replay a JSON-lines file of tool calls")
    replay.add_argument("file", help="Path to a .jsonl file, or - for stdin")
    replay.add_argument("--json", action="store_true", help="Print full JSON payloads")
    replay.add_argument("--quiet", "-q", action="store_true", help="Only print rejected calls")
    replay.add_argument("--mode", choices=VALID_RESPONSE_MODES, help="Override responseMode")
    replay.add_argument("--log-level", default=None, help="Log level for engine diagnostics")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        return cmd_serve(args)

    if args.log_level:
        setup_cascade_logging(args.log_level)
    try:
        return cmd_replay(args)
    except OSError as e:
        logger.error(f"Cannot read {args.file}: {e}")
        print(f"Error: cannot read {args.file}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

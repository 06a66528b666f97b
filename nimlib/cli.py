"""
nimlib CLI - Command-line interface for the engine.

Usage:
    nimlib splits <height> [--csv]            Ways to split a height
    nimlib nimber <height>... [--rules R]     Nimbers for stack heights
    nimlib moves <height>... [--rules R]      Legal moves for a position
    nimlib make-rule-set [-n ...] [-o ...]    Build a JSON rule set
    nimlib serve [--host H] [--port P]        Run the HTTP API

Rules (R) are given as a JSON string or a path to a JSON file, in the
format printed by make-rule-set. Without --rules, the classic game
(take 1, 2 or 3, never split) is used.
"""

import argparse
import logging
import sys
from pathlib import Path

from .engine_core import (
    NimGame,
    Stack,
    calculate_splits,
    describe_action,
    enumerate_moves,
)
from .engine_core.nimbers import NimberEvaluator
from .spec_schema import RuleSet, RuleSetValidationError, Split, make_rule_set, rule_set_to_json
from .spec_schema.serialization import rule_set_from_json

logger = logging.getLogger("nimlib.cli")

_SPLIT_CHOICES = {s.value.lower(): s for s in Split}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose - args.quiet)

    if args.command == "splits":
        cmd_splits(args)
    elif args.command == "nimber":
        cmd_nimber(args)
    elif args.command == "moves":
        cmd_moves(args)
    elif args.command == "make-rule-set":
        cmd_make_rule_set(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="A Nim-game CLI: nimbers, moves and rule sets",
        prog="nimlib",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output")
    parser.add_argument("-q", "--quiet", action="count", default=0, help="Less log output")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Splits command
    splits_parser = subparsers.add_parser("splits", help="Calculate all possible splits for a height")
    splits_parser.add_argument("height", type=_non_negative, help="Height of the stack to split")
    splits_parser.add_argument("--csv", "-c", action="store_true", help="Output as CSV")

    # Nimber command
    nimber_parser = subparsers.add_parser("nimber", help="Calculate nimbers for stack heights")
    nimber_parser.add_argument("heights", type=_non_negative, nargs="+", help="Stack heights")
    nimber_parser.add_argument("--rules", "-r", help="Rule set as JSON or a path to a JSON file")

    # Moves command
    moves_parser = subparsers.add_parser("moves", help="List legal moves for a position")
    moves_parser.add_argument("heights", type=_non_negative, nargs="+", help="Stack heights")
    moves_parser.add_argument("--rules", "-r", help="Rule set as JSON or a path to a JSON file")
    moves_parser.add_argument("--pool-a", type=_non_negative, default=0, help="Coins in pool A")
    moves_parser.add_argument("--pool-b", type=_non_negative, default=0, help="Coins in pool B")

    # Make rule set command
    make_parser = subparsers.add_parser("make-rule-set", help="Create a JSON rule set")
    make_parser.add_argument(
        "--take-split-never", "-n", type=_positive, nargs="+", default=[],
        help="Amounts which may be taken, remainder never split",
    )
    make_parser.add_argument(
        "--take-split-optional", "-o", type=_positive, nargs="+", default=[],
        help="Amounts which may be taken, remainder optionally split",
    )
    make_parser.add_argument(
        "--take-split-always", "-a", type=_positive, nargs="+", default=[],
        help="Amounts which may be taken, remainder always split",
    )
    make_parser.add_argument(
        "--allow-any-take", "-s", choices=sorted(_SPLIT_CHOICES),
        help="Allow taking any amount, with the given split policy",
    )
    make_parser.add_argument(
        "--allow-place", "-p", action="store_true",
        help="Allow placing coins from a pool",
    )
    make_parser.add_argument(
        "--pretty-print", "-P", action="store_true", help="Pretty-print the JSON output"
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    return parser


def configure_logging(verbosity: int):
    """Map -v/-q counts onto a log level."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def cmd_splits(args):
    """Print all splits for a height."""
    splits = calculate_splits(args.height)

    if args.csv:
        print("left,right")
        for left, right in splits:
            print(f"{left},{right}")
        return

    if not splits:
        print(f"No splits for height {args.height}")
        return

    print(f"Splits for height {args.height}:")

    left_width = len(str(splits[-1][0]))
    right_width = len(str(splits[0][1]))
    for left, right in splits:
        print(f"{left.height:>{left_width}} + {right.height:>{right_width}}")


def cmd_nimber(args):
    """Print the nimber of each height, and their XOR for several heights."""
    rules = _load_rules_or_exit(args.rules)
    evaluator = NimberEvaluator()

    total = 0
    for height in args.heights:
        nimber = evaluator.nimber_for_height(height, rules)
        total ^= int(nimber)
        print(f"{height}: {int(nimber)}")

    if len(args.heights) > 1:
        print(f"Game nimber: {total}")
    logger.info("Evaluated %d height(s) under %d rule(s)", len(args.heights), len(rules))


def cmd_moves(args):
    """Print every legal move, one per line."""
    rules = _load_rules_or_exit(args.rules)
    game = NimGame(
        rules=rules,
        stacks=[Stack(h) for h in args.heights],
        pool_a=args.pool_a,
        pool_b=args.pool_b,
    )

    try:
        moves = enumerate_moves(game)
    except RuleSetValidationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if not moves:
        print("No legal moves")
        return

    for move in moves:
        print(describe_action(move))


def cmd_make_rule_set(args):
    """Build a rule set from per-policy take lists and print it as JSON."""
    allow_any = _SPLIT_CHOICES[args.allow_any_take] if args.allow_any_take else None
    rules = make_rule_set(
        take_split_never=args.take_split_never,
        take_split_optional=args.take_split_optional,
        take_split_always=args.take_split_always,
        allow_any_take=allow_any,
        allow_place=args.allow_place,
    )
    print(f"Made rule set:\n{rule_set_to_json(rules, pretty=args.pretty_print)}")


def cmd_serve(args):
    """Run the HTTP API under uvicorn."""
    import uvicorn
    from .api import create_app

    logger.info("Serving nimlib API on %s:%d", args.host, args.port)
    uvicorn.run(create_app(), host=args.host, port=args.port)


def load_rules(source: str | None) -> RuleSet:
    """
    Load a rule set from a JSON string or a file path.

    None yields the classic take-1-2-or-3 rules.
    """
    if source is None:
        return NimGame.default().rules

    path = Path(source)
    if not source.lstrip().startswith("[") and path.is_file():
        logger.debug("Loading rules from %s", path)
        return rule_set_from_json(path.read_text(encoding="utf-8"))
    return rule_set_from_json(source)


def _load_rules_or_exit(source: str | None) -> RuleSet:
    try:
        return load_rules(source)
    except RuleSetValidationError as e:
        print(f"Error: {e}")
        sys.exit(1)


def _non_negative(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"{value} is negative")
    return number


def _positive(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"{value} is not positive")
    return number


if __name__ == "__main__":
    main()

"""Command line front-end for the solver port."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List

from ports.solver_port import solve_puzzle
from project_config import get_section
from solver import InvalidInput, check_validity, format_grid, from_string

EXIT_SOLVED = 0
EXIT_UNSATISFIABLE = 1
EXIT_INVALID = 2

_EXIT_CODES = {"solved": EXIT_SOLVED, "unsatisfiable": EXIT_UNSATISFIABLE, "invalid": EXIT_INVALID}


def _cli_env(args: argparse.Namespace) -> Dict[str, str]:
    env: Dict[str, str] = {}
    if getattr(args, "trace", False):
        env["CLI_SUDOKU_TRACE_LEVEL"] = "steps"
    if getattr(args, "events_dir", None):
        env["CLI_SUDOKU_EVENTS_ENABLED"] = "1"
        env["CLI_SUDOKU_EVENTS_DIR"] = args.events_dir
    return env


def _read_puzzle(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text("utf-8")
    if args.puzzle:
        return args.puzzle
    raise SystemExit("either PUZZLE or --file is required")


def _render_text(payload: dict) -> str:
    status = payload["status"]
    if status == "invalid":
        lines = [f"invalid: {payload['error']}"]
        lines.extend(f"  {issue['path']}: {issue['msg']}" for issue in payload["issues"])
        return "\n".join(lines)
    stats = payload["stats"]
    summary = (
        f"{status} (forced={stats['forced']} guesses={stats['guesses']} "
        f"backtracks={stats['backtracks']} depth={stats['max_depth']})"
    )
    return format_grid(payload["values"]) + "\n" + summary


def cmd_solve(args: argparse.Namespace) -> int:
    payload = solve_puzzle(_read_puzzle(args), env=_cli_env(args))
    if args.format == "json":
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print(_render_text(payload))
    return _EXIT_CODES[payload["status"]]


def _iter_puzzles(path: Path) -> Iterable[str]:
    for line in path.read_text("utf-8").splitlines():
        value = line.strip()
        if not value or value.startswith("#"):
            continue
        yield value


def cmd_batch(args: argparse.Namespace) -> int:
    env = _cli_env(args)
    payloads: List[dict] = [solve_puzzle(puzzle, env=env) for puzzle in _iter_puzzles(Path(args.file))]
    print(json.dumps(payloads, indent=2, sort_keys=True))
    return max((_EXIT_CODES[payload["status"]] for payload in payloads), default=EXIT_SOLVED)


def cmd_check(args: argparse.Namespace) -> int:
    try:
        cells = from_string(args.puzzle)
    except InvalidInput as exc:
        print(f"invalid: {exc}")
        return EXIT_INVALID
    if check_validity(cells):
        print("valid")
        return EXIT_SOLVED
    print("invalid: conflicting givens")
    return EXIT_INVALID


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve classic 9x9 Sudoku puzzles")
    parser.add_argument("--log-level", default=None, help="Root logging level (default from config.toml)")
    sub = parser.add_subparsers(dest="command", required=True)

    solve = sub.add_parser("solve", help="Solve a single puzzle")
    solve.add_argument("puzzle", nargs="?", help="81 cells, row-major; 0 or . for blanks")
    solve.add_argument("-f", "--file", default=None, help="Read the puzzle from a file")
    solve.add_argument("--trace", action="store_true", help="Include the step trace")
    solve.add_argument("--format", choices=("text", "json"), default="text")
    solve.add_argument("--events-dir", default=None, help="Append a solve event under this directory")
    solve.set_defaults(func=cmd_solve)

    batch = sub.add_parser("batch", help="Solve every puzzle listed in a file, one per line")
    batch.add_argument("file")
    batch.add_argument("--trace", action="store_true")
    batch.add_argument("--events-dir", default=None)
    batch.set_defaults(func=cmd_batch)

    check = sub.add_parser("check", help="Check that the givens of a puzzle do not conflict")
    check.add_argument("puzzle")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    level = args.log_level or str(get_section("logging.level", "WARNING"))
    logging.basicConfig(level=level.upper(), stream=sys.stderr)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

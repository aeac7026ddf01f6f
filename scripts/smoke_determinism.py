#!/usr/bin/env python3
"""Smoke-test deterministic solving over the bundled puzzle corpus."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from solver import from_string, solve

CORPUS = ROOT / "data" / "puzzles.txt"


def _load_corpus(path: Path) -> List[str]:
    lines = (line.strip() for line in path.read_text("utf-8").splitlines())
    return [line for line in lines if line and not line.startswith("#")]


def main() -> int:
    puzzles = _load_corpus(CORPUS)
    for number, puzzle in enumerate(puzzles, start=1):
        cells = from_string(puzzle)
        first = solve(cells)
        second = solve(cells)
        if first.digest != second.digest:
            print(f"determinism failed for puzzle {number}: {first.digest} vs {second.digest}")
            return 1
        print(f"puzzle {number}: {first.status.value} {first.digest[:19]}")

    print("Determinism smoke-test passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Sudoku 9x9 solving engine: board state, propagation and search."""

from __future__ import annotations

from .engine import SolveResult, SolveStats, SolveStatus, Solver, SolverState, solve
from .errors import Contradiction, InvalidInput, SudokuError
from .grid import Grid, Snapshot, check_validity, find_conflicts, peers, units
from .notation import format_grid, from_string, to_string
from .trace import SolveTrace, TraceEvent, TraceOp

__all__ = [
    "Contradiction",
    "Grid",
    "InvalidInput",
    "Snapshot",
    "SolveResult",
    "SolveStats",
    "SolveStatus",
    "SolveTrace",
    "Solver",
    "SolverState",
    "SudokuError",
    "TraceEvent",
    "TraceOp",
    "check_validity",
    "find_conflicts",
    "format_grid",
    "from_string",
    "peers",
    "solve",
    "to_string",
    "units",
]

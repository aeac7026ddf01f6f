"""Constraint propagation and backtracking search over a :class:`Grid`."""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from contracts.jsoncanon import jcs_sha256

from .errors import Contradiction
from .grid import Grid, mask_digits, popcount
from .trace import SolveTrace, TraceOp, check_trace_level

_LOGGER = logging.getLogger(__name__)


class SolverState(str, Enum):
    """Lifecycle of a single :meth:`Solver.solve` call."""

    READY = "ready"
    PROPAGATING = "propagating"
    SEARCHING = "searching"
    SOLVED = "solved"
    UNSATISFIABLE = "unsatisfiable"


_TRANSITIONS = {
    SolverState.READY: frozenset({SolverState.PROPAGATING}),
    SolverState.PROPAGATING: frozenset(
        {SolverState.SOLVED, SolverState.UNSATISFIABLE, SolverState.SEARCHING}
    ),
    SolverState.SEARCHING: frozenset({SolverState.SOLVED, SolverState.UNSATISFIABLE}),
    SolverState.SOLVED: frozenset(),
    SolverState.UNSATISFIABLE: frozenset(),
}


class SolveStatus(str, Enum):
    SOLVED = "solved"
    UNSATISFIABLE = "unsatisfiable"


@dataclass
class SolveStats:
    """Counters collected during one solve."""

    forced: int = 0
    guesses: int = 0
    backtracks: int = 0
    max_depth: int = 0
    elapsed_us: int = 0

    def to_payload(self) -> Dict[str, int]:
        return {
            "forced": self.forced,
            "guesses": self.guesses,
            "backtracks": self.backtracks,
            "max_depth": self.max_depth,
            "elapsed_us": self.elapsed_us,
        }


@dataclass(frozen=True)
class SolveResult:
    """Final outcome of a solve.

    ``values`` holds all 81 digits when solved.  When the puzzle is
    unsatisfiable it holds the givens, with ``0`` for every open cell.
    """

    status: SolveStatus
    values: Tuple[int, ...]
    givens: Tuple[int, ...]
    stats: SolveStats
    trace: Optional[SolveTrace] = None

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.SOLVED

    @property
    def digest(self) -> str:
        """Content digest of the outcome; timings are not part of it."""

        return jcs_sha256({"status": self.status.value, "values": list(self.values)})

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "status": self.status.value,
            "values": list(self.values),
            "givens": list(self.givens),
            "digest": self.digest,
            "stats": self.stats.to_payload(),
        }
        if self.trace is not None:
            payload["trace"] = self.trace.to_payload()
        return payload


class Solver:
    """Solve one :class:`Grid` in place.

    Propagation assigns every cell whose candidates collapse to a single
    digit until nothing changes.  When it stalls, the open cell with the
    fewest candidates (lowest index on ties) is tried with each candidate in
    ascending order, rolling the grid back to a snapshot after each failure.
    """

    def __init__(self, grid: Grid, *, trace_level: str = "none") -> None:
        if grid.snapshot().depth:
            raise ValueError("grid has journaled changes; solve a freshly built grid")
        self.grid = grid
        self.state = SolverState.READY
        self.stats = SolveStats()
        level = check_trace_level(trace_level)
        self._trace: Optional[SolveTrace] = SolveTrace() if level == "steps" else None

    def solve(self) -> SolveResult:
        if self.state is not SolverState.READY:
            raise RuntimeError("Solver instances are single-use; build a new one per grid")

        started = time.perf_counter_ns()
        grid = self.grid
        givens = tuple(grid.givens())
        root = grid.snapshot()
        _LOGGER.debug("solve started with %d open cells", len(grid.empty_cells()))

        self._transition(SolverState.PROPAGATING)
        try:
            self._propagate(depth=0)
        except Contradiction as exc:
            _LOGGER.debug("initial propagation failed: %s", exc)
            solved = False
        else:
            if grid.is_complete():
                solved = True
            else:
                self._transition(SolverState.SEARCHING)
                solved = self._search(depth=1)

        if solved:
            self._transition(SolverState.SOLVED)
            status = SolveStatus.SOLVED
        else:
            grid.restore(root)
            self._transition(SolverState.UNSATISFIABLE)
            status = SolveStatus.UNSATISFIABLE

        self.stats.elapsed_us = (time.perf_counter_ns() - started) // 1000
        _LOGGER.debug(
            "solve finished: %s (forced=%d guesses=%d backtracks=%d)",
            status.value,
            self.stats.forced,
            self.stats.guesses,
            self.stats.backtracks,
        )
        return SolveResult(
            status=status,
            values=tuple(grid.values()),
            givens=givens,
            stats=self.stats,
            trace=self._trace,
        )

    # Internal helpers -------------------------------------------------

    def _transition(self, target: SolverState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal solver transition {self.state.value} -> {target.value}")
        self.state = target

    def _record(self, op: TraceOp, cell: int, digit: int, depth: int) -> None:
        if self._trace is not None:
            self._trace.record(op, cell, digit, depth)

    def _propagate(self, depth: int) -> None:
        """Assign naked singles until a fixed point; raise on an emptied cell."""

        grid = self.grid
        pending = deque(
            index for index in grid.empty_cells() if popcount(grid.candidate_mask(index)) <= 1
        )
        while pending:
            index = pending.popleft()
            if grid.value(index):
                continue
            mask = grid.candidate_mask(index)
            if not mask:
                raise Contradiction(index, "no candidates left")
            (digit,) = mask_digits(mask)
            pending.extend(grid.assign(index, digit))
            self.stats.forced += 1
            self._record(TraceOp.PLACE, index, digit, depth)

    def _choose_cell(self) -> int:
        grid = self.grid
        return min(grid.empty_cells(), key=lambda index: (popcount(grid.candidate_mask(index)), index))

    def _search(self, depth: int) -> bool:
        grid = self.grid
        cell = self._choose_cell()
        self.stats.max_depth = max(self.stats.max_depth, depth)
        for digit in grid.candidates(cell):
            frame = grid.snapshot()
            self.stats.guesses += 1
            self._record(TraceOp.GUESS, cell, digit, depth)
            try:
                grid.assign(cell, digit)
                self._propagate(depth)
                if grid.is_complete() or self._search(depth + 1):
                    return True
            except Contradiction as exc:
                _LOGGER.debug("depth %d: %d at cell %d failed: %s", depth, digit, cell, exc)
            grid.restore(frame)
            self.stats.backtracks += 1
            self._record(TraceOp.BACKTRACK, cell, digit, depth)
        return False


def solve(values: Sequence[Any], *, trace_level: str = "none") -> SolveResult:
    """Build a :class:`Grid` from 81 values and solve it.

    Raises :class:`~solver.errors.InvalidInput` for malformed puzzles; every
    other outcome is reported through :class:`SolveResult`.
    """

    return Solver(Grid(values), trace_level=trace_level).solve()


__all__ = [
    "SolveResult",
    "SolveStats",
    "SolveStatus",
    "Solver",
    "SolverState",
    "solve",
]

"""Exception types raised by the Sudoku engine."""

from __future__ import annotations

from typing import Iterable, Tuple

from contracts.errors import ValidationIssue


class SudokuError(Exception):
    """Base class for engine errors."""


class InvalidInput(SudokuError, ValueError):
    """Raised when a puzzle is malformed before any solving starts.

    ``issues`` lists every problem found so callers can report them all at
    once instead of fixing one cell at a time.
    """

    def __init__(self, message: str, issues: Iterable[ValidationIssue] = ()) -> None:
        self.issues: Tuple[ValidationIssue, ...] = tuple(issues)
        super().__init__(message)


class Contradiction(SudokuError):
    """Internal signal that the current grid state admits no completion."""

    def __init__(self, cell: int, detail: str) -> None:
        self.cell = cell
        self.detail = detail
        super().__init__(f"cell {cell}: {detail}")


__all__ = ["Contradiction", "InvalidInput", "SudokuError"]

"""Text notation helpers for 81-cell boards."""

from __future__ import annotations

from typing import List, Sequence

from contracts.errors import make_error

from .errors import InvalidInput

_BLANKS = frozenset("0._")
_SEPARATORS = frozenset("|+-")
_RULE = "+-------+-------+-------+"


def from_string(text: str) -> List[int]:
    """Parse a puzzle written as 81 cells, row-major.

    Digits ``1``-``9`` are givens; ``0``, ``.`` and ``_`` are blanks.  Whitespace
    and the ``|``, ``+`` and ``-`` characters of boxed layouts are skipped.
    """

    cells: List[int] = []
    for position, char in enumerate(text):
        if char.isspace() or char in _SEPARATORS:
            continue
        if char in _BLANKS:
            cells.append(0)
        elif char in "123456789":
            cells.append(int(char))
        else:
            issue = make_error("cell.type", f"unexpected character {char!r}", f"@{position}")
            raise InvalidInput(issue.msg, [issue])
    if len(cells) != 81:
        issue = make_error("grid.length", f"puzzle must have exactly 81 cells, got {len(cells)}", "$")
        raise InvalidInput(issue.msg, [issue])
    return cells


def to_string(values: Sequence[int]) -> str:
    return "".join(str(value or 0) for value in values)


def format_grid(values: Sequence[int]) -> str:
    lines = []
    for row in range(9):
        if row % 3 == 0:
            lines.append(_RULE)
        chunks = []
        for start in (0, 3, 6):
            cells = values[row * 9 + start : row * 9 + start + 3]
            chunks.append(" ".join(str(value) if value else "." for value in cells))
        lines.append("| " + " | ".join(chunks) + " |")
    lines.append(_RULE)
    return "\n".join(lines)


__all__ = ["format_grid", "from_string", "to_string"]

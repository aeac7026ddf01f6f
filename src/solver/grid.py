"""Board state and candidate bookkeeping for the classic 9x9 Sudoku.

Candidates are kept as one 9-bit mask per cell (bit ``d - 1`` is set while
digit ``d`` is still possible).  Givens are applied once at construction;
every later mutation is pushed onto a journal so that :meth:`Grid.restore`
can unwind it exactly, without recomputing candidates from scratch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple, Union

from contracts.errors import ValidationIssue, make_error

from .errors import Contradiction, InvalidInput
from .notation import format_grid, to_string

SIZE = 9
BOX = 3
CELLS = SIZE * SIZE
DIGITS = tuple(range(1, SIZE + 1))
ALL_CANDIDATES = (1 << SIZE) - 1

CellRef = Union[int, Tuple[int, int]]


def box_of(row: int, col: int) -> int:
    """Return the index of the 3x3 box holding ``(row, col)``."""

    return (row // BOX) * BOX + col // BOX


def _build_units() -> Tuple[Tuple[int, ...], ...]:
    rows = [tuple(r * SIZE + c for c in range(SIZE)) for r in range(SIZE)]
    cols = [tuple(r * SIZE + c for r in range(SIZE)) for c in range(SIZE)]
    boxes = [
        tuple((br * BOX + r) * SIZE + bc * BOX + c for r in range(BOX) for c in range(BOX))
        for br in range(BOX)
        for bc in range(BOX)
    ]
    return tuple(rows + cols + boxes)


# Rows 0-8, columns 9-17, boxes 18-26.
UNITS = _build_units()
_UNIT_KINDS = ("row", "col", "box")
_CELL_UNITS = tuple(tuple(unit for unit in UNITS if index in unit) for index in range(CELLS))
PEERS = tuple(
    tuple(sorted({peer for unit in _CELL_UNITS[index] for peer in unit} - {index}))
    for index in range(CELLS)
)


def cell_index(cell: CellRef) -> int:
    """Normalise a ``(row, col)`` pair or flat index to a flat index."""

    if isinstance(cell, tuple):
        if len(cell) != 2:
            raise TypeError(f"cell must be a (row, col) pair, got {cell!r}")
        row, col = cell
        if not (0 <= row < SIZE and 0 <= col < SIZE):
            raise IndexError(f"cell {cell!r} is outside the 9x9 board")
        return row * SIZE + col
    if isinstance(cell, bool) or not isinstance(cell, int):
        raise TypeError(f"cell must be an int or (row, col) pair, got {type(cell)!r}")
    if not 0 <= cell < CELLS:
        raise IndexError(f"cell index must be in [0, 80], got {cell}")
    return cell


def peers(cell: CellRef) -> Tuple[int, ...]:
    """Return the 20 cells sharing a row, column or box with ``cell``."""

    return PEERS[cell_index(cell)]


def units(cell: CellRef) -> Tuple[Tuple[int, ...], ...]:
    """Return the row, column and box containing ``cell``."""

    return _CELL_UNITS[cell_index(cell)]


def bit(digit: int) -> int:
    return 1 << (digit - 1)


_MASK_DIGITS = tuple(
    tuple(digit for digit in DIGITS if mask & (1 << (digit - 1))) for mask in range(ALL_CANDIDATES + 1)
)


def mask_digits(mask: int) -> Tuple[int, ...]:
    return _MASK_DIGITS[mask]


def popcount(mask: int) -> int:
    return len(_MASK_DIGITS[mask])


def _check_digit(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= SIZE:
        raise ValueError(f"digit must be an int in [1, 9], got {value!r}")
    return value


def _coerce_values(values: Sequence[Any]) -> List[int]:
    try:
        items = list(values)
    except TypeError as exc:
        issue = make_error("grid.type", "puzzle must be a sequence of 81 values", "$")
        raise InvalidInput(issue.msg, [issue]) from exc

    if len(items) != CELLS:
        issue = make_error(
            "grid.length", f"puzzle must have exactly 81 cells, got {len(items)}", "$"
        )
        raise InvalidInput(issue.msg, [issue])

    cells: List[int] = []
    issues: List[ValidationIssue] = []
    for index, item in enumerate(items):
        path = f"$[{index}]"
        if item is None or item == "":
            cells.append(0)
        elif isinstance(item, bool) or not isinstance(item, int):
            issues.append(make_error("cell.type", f"expected an int, got {type(item).__name__}", path))
            cells.append(0)
        elif not 0 <= item <= SIZE:
            issues.append(make_error("cell.range", f"value {item} is outside 0-9", path))
            cells.append(0)
        else:
            cells.append(item)
    if issues:
        raise InvalidInput(f"puzzle has {len(issues)} malformed cell(s)", issues)
    return cells


def find_conflicts(values: Sequence[int]) -> List[ValidationIssue]:
    """Return one issue per digit repeated within a row, column or box."""

    issues: List[ValidationIssue] = []
    for unit_id, unit in enumerate(UNITS):
        kind = _UNIT_KINDS[unit_id // SIZE]
        seen: Dict[int, List[int]] = {}
        for index in unit:
            digit = values[index]
            if digit:
                seen.setdefault(digit, []).append(index)
        for digit in sorted(seen):
            where = seen[digit]
            if len(where) > 1:
                issues.append(
                    make_error(
                        "given.conflict",
                        f"digit {digit} appears {len(where)} times in {kind} {unit_id % SIZE} "
                        f"(cells {', '.join(str(i) for i in where)})",
                        f"{kind}s[{unit_id % SIZE}]",
                    )
                )
    return issues


def check_validity(values: Sequence[Any]) -> bool:
    """Return ``True`` when ``values`` is a well-formed, conflict-free board."""

    try:
        cells = _coerce_values(values)
    except InvalidInput:
        return False
    return not find_conflicts(cells)


@dataclass(frozen=True)
class Snapshot:
    """Journal position captured by :meth:`Grid.snapshot`."""

    depth: int
    version: int


@dataclass(frozen=True)
class _Entry:
    op: str
    cell: int
    digit: int
    touched: Tuple[int, ...]
    prior_mask: int
    version: int


class Grid:
    """Mutable 9x9 board owning the per-cell candidate masks."""

    def __init__(self, values: Sequence[Any]) -> None:
        cells = _coerce_values(values)
        conflicts = find_conflicts(cells)
        if conflicts:
            raise InvalidInput(f"puzzle has {len(conflicts)} conflicting given(s)", conflicts)

        self._values: List[int] = cells
        self._givens: Tuple[bool, ...] = tuple(bool(digit) for digit in cells)
        self._masks: List[int] = [bit(digit) if digit else ALL_CANDIDATES for digit in cells]
        for index, digit in enumerate(cells):
            if not digit:
                continue
            for peer in PEERS[index]:
                if not cells[peer]:
                    self._masks[peer] &= ~bit(digit)
        self._journal: List[_Entry] = []
        self._version = 0

    # Queries ------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    def value(self, cell: CellRef) -> int:
        return self._values[cell_index(cell)]

    def candidate_mask(self, cell: CellRef) -> int:
        index = cell_index(cell)
        return 0 if self._values[index] else self._masks[index]

    def candidates(self, cell: CellRef) -> Tuple[int, ...]:
        """Return the remaining digits of an empty cell in ascending order."""

        return mask_digits(self.candidate_mask(cell))

    def is_given(self, cell: CellRef) -> bool:
        return self._givens[cell_index(cell)]

    def empty_cells(self) -> List[int]:
        return [index for index, digit in enumerate(self._values) if not digit]

    def is_complete(self) -> bool:
        return all(self._values)

    def is_valid(self) -> bool:
        return not find_conflicts(self._values)

    def values(self) -> List[int]:
        return list(self._values)

    def givens(self) -> List[int]:
        return [digit if given else 0 for digit, given in zip(self._values, self._givens)]

    def copy(self) -> "Grid":
        """Return an independent clone, journal included."""

        clone = Grid.__new__(Grid)
        clone._values = list(self._values)
        clone._givens = self._givens
        clone._masks = list(self._masks)
        clone._journal = list(self._journal)
        clone._version = self._version
        return clone

    # Mutation -----------------------------------------------------------

    def assign(self, cell: CellRef, value: int) -> List[int]:
        """Place ``value`` and strike it from every empty peer.

        Returns the peers whose candidate set was reduced to one digit or
        emptied by this placement, in ascending cell order.
        """

        index = cell_index(cell)
        digit = _check_digit(value)
        current = self._values[index]
        if current:
            if current == digit:
                return []
            raise Contradiction(index, f"already holds {current}, cannot place {digit}")
        digit_bit = bit(digit)
        if not self._masks[index] & digit_bit:
            raise Contradiction(index, f"{digit} is not a candidate")

        touched: List[int] = []
        reduced: List[int] = []
        for peer in PEERS[index]:
            if self._values[peer]:
                continue
            mask = self._masks[peer]
            if mask & digit_bit:
                mask &= ~digit_bit
                self._masks[peer] = mask
                touched.append(peer)
                if mask & (mask - 1) == 0:
                    reduced.append(peer)

        self._version += 1
        self._journal.append(
            _Entry("assign", index, digit, tuple(touched), self._masks[index], self._version)
        )
        self._values[index] = digit
        self._masks[index] = digit_bit
        return reduced

    def eliminate(self, cell: CellRef, value: int) -> bool:
        """Strike ``value`` from an empty cell; return ``True`` if it was present."""

        index = cell_index(cell)
        digit = _check_digit(value)
        if self._values[index]:
            if self._values[index] == digit:
                raise Contradiction(index, f"cannot eliminate the placed digit {digit}")
            return False
        mask = self._masks[index]
        digit_bit = bit(digit)
        if not mask & digit_bit:
            return False
        if mask == digit_bit:
            raise Contradiction(index, f"eliminating {digit} leaves no candidates")

        self._version += 1
        self._journal.append(_Entry("eliminate", index, digit, (), mask, self._version))
        self._masks[index] = mask & ~digit_bit
        return True

    def undo_assign(self, cell: CellRef) -> None:
        """Revert the latest journal entry, which must be an assignment of ``cell``."""

        index = cell_index(cell)
        if self._journal:
            last = self._journal[-1]
            if last.op == "assign" and last.cell == index:
                self._undo(self._journal.pop())
                return
        if self._givens[index]:
            raise ValueError(f"cell {index} holds a given and cannot be undone")
        raise ValueError(f"cell {index} is not the most recent assignment")

    def snapshot(self) -> Snapshot:
        version = self._journal[-1].version if self._journal else 0
        return Snapshot(depth=len(self._journal), version=version)

    def restore(self, snapshot: Snapshot) -> None:
        """Unwind every mutation made since ``snapshot`` was taken."""

        if snapshot.depth > len(self._journal):
            raise ValueError("snapshot is ahead of the current grid state")
        anchor = self._journal[snapshot.depth - 1].version if snapshot.depth else 0
        if anchor != snapshot.version:
            raise ValueError("snapshot is stale: its journal position was rewritten")
        while len(self._journal) > snapshot.depth:
            self._undo(self._journal.pop())

    def _undo(self, entry: _Entry) -> None:
        if entry.op == "assign":
            digit_bit = bit(entry.digit)
            for peer in entry.touched:
                self._masks[peer] |= digit_bit
            self._values[entry.cell] = 0
        self._masks[entry.cell] = entry.prior_mask

    # Rendering ----------------------------------------------------------

    def __str__(self) -> str:
        return format_grid(self._values)

    def __repr__(self) -> str:
        return f"Grid({to_string(self._values)!r})"


__all__ = [
    "ALL_CANDIDATES",
    "CELLS",
    "DIGITS",
    "PEERS",
    "UNITS",
    "CellRef",
    "Grid",
    "Snapshot",
    "box_of",
    "cell_index",
    "check_validity",
    "find_conflicts",
    "mask_digits",
    "peers",
    "popcount",
    "units",
]

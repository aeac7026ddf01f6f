"""Step trace recorded while solving.

The trace lists every placement in the order the solver made it, which makes
the deterministic search order observable from outside the engine.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Mapping, MutableSequence

TRACE_LEVELS = ("none", "steps")


class TraceValidationError(ValueError):
    """Raised when a trace event is malformed."""


class TraceOp(str, Enum):
    """Kinds of solver steps."""

    PLACE = "PLACE"
    GUESS = "GUESS"
    BACKTRACK = "BACKTRACK"

    @classmethod
    def from_value(cls, value: str) -> "TraceOp":
        try:
            return cls(value)
        except ValueError as exc:
            raise TraceValidationError(f"Unsupported trace op: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class TraceEvent:
    """Single solver step."""

    step: int
    op: TraceOp
    cell: int
    digit: int
    depth: int

    def __post_init__(self) -> None:
        if not isinstance(self.op, TraceOp):
            object.__setattr__(self, "op", TraceOp.from_value(str(self.op)))
        if self.step < 1:
            raise TraceValidationError("step must be >= 1")
        if not 0 <= self.cell <= 80:
            raise TraceValidationError(f"cell must be in [0, 80], got {self.cell!r}")
        if not 1 <= self.digit <= 9:
            raise TraceValidationError(f"digit must be in [1, 9], got {self.digit!r}")
        if self.depth < 0:
            raise TraceValidationError("depth must be >= 0")

    def to_payload(self) -> dict:
        return {
            "step": int(self.step),
            "op": self.op.value,
            "cell": int(self.cell),
            "digit": int(self.digit),
            "depth": int(self.depth),
        }


@dataclass
class SolveTrace:
    """Accumulator of :class:`TraceEvent` records with increasing steps."""

    entries: MutableSequence[TraceEvent] = field(default_factory=list)

    def append(self, entry: TraceEvent | Mapping[str, object]) -> None:
        if isinstance(entry, Mapping):
            entry = TraceEvent(**entry)  # type: ignore[arg-type]
        if self.entries and entry.step <= self.entries[-1].step:
            raise TraceValidationError("trace steps must be strictly increasing")
        self.entries.append(entry)

    def extend(self, entries: Iterable[TraceEvent | Mapping[str, object]]) -> None:
        for entry in entries:
            self.append(entry)

    def record(self, op: TraceOp, cell: int, digit: int, depth: int) -> None:
        step = self.entries[-1].step + 1 if self.entries else 1
        self.append(TraceEvent(step=step, op=op, cell=cell, digit=digit, depth=depth))

    def snapshot(self) -> List[TraceEvent]:
        return list(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_payload(self) -> List[dict]:
        return [entry.to_payload() for entry in self.entries]

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False, separators=(",", ":"), indent=indent)


def check_trace_level(level: str) -> str:
    normalised = str(level).strip().lower()
    if normalised not in TRACE_LEVELS:
        raise ValueError(f"Unsupported trace level: {level!r} (expected one of {TRACE_LEVELS})")
    return normalised


__all__ = [
    "TRACE_LEVELS",
    "SolveTrace",
    "TraceEvent",
    "TraceOp",
    "TraceValidationError",
    "check_trace_level",
]

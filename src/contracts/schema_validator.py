"""JSON Schema validation for solver result payloads."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

_SCHEMA_ROOT = Path(__file__).resolve().parent / "schemas"
_RESULT_SCHEMA = "solve_result.schema.json"
# Built here: solver imports contracts, so contracts cannot import solver.grid.
_DIGITS = list(range(1, 10))
_UNITS = (
    [(f"row {r}", [r * 9 + c for c in range(9)]) for r in range(9)]
    + [(f"col {c}", [r * 9 + c for r in range(9)]) for c in range(9)]
    + [
        (f"box {b}", [(b // 3 * 3 + r) * 9 + b % 3 * 3 + c for r in range(3) for c in range(3)])
        for b in range(9)
    ]
)


class SchemaValidationError(RuntimeError):
    """Exception raised when a payload fails validation."""

    def __init__(self, code: str, detail: Optional[str] = None) -> None:
        self.code = code
        self.detail = detail
        message = code if detail is None else f"{code}:{detail}"
        super().__init__(message)


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    """Load a schema shipped next to this module."""

    path = _SCHEMA_ROOT / name
    try:
        schema = json.loads(path.read_text("utf-8"))
    except FileNotFoundError as exc:
        raise SchemaValidationError("schema-not-found", name) from exc
    jsonschema.validators.validator_for(schema).check_schema(schema)
    return schema


def _require(condition: bool, detail: str) -> None:
    if not condition:
        raise SchemaValidationError("invalid-result", detail)


def _manual_validate(payload: Dict[str, Any]) -> None:
    status = payload["status"]
    if status == "invalid":
        return
    values = payload["values"]
    givens = payload["givens"]
    for index, given in enumerate(givens):
        if given:
            _require(values[index] == given, f"given at cell {index} was changed")
    if status == "solved":
        _require(all(values), "solved result has open cells")
        for name, unit in _UNITS:
            _require(sorted(values[index] for index in unit) == _DIGITS, f"{name} is not a permutation of 1-9")
    else:
        _require(values == givens, "unsatisfiable result must echo the givens")


def validate_result(payload: Dict[str, Any]) -> None:
    """Validate a solve payload against the schema and result invariants."""

    schema = load_schema(_RESULT_SCHEMA)
    validator = jsonschema.validators.validator_for(schema)(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda error: list(error.absolute_path))
    if errors:
        first = errors[0]
        location = "/".join(str(part) for part in first.absolute_path) or "$"
        raise SchemaValidationError("schema-violation", f"{location}: {first.message}")

    # Cross-field invariants the schema cannot express.
    _manual_validate(payload)


__all__ = ["SchemaValidationError", "load_schema", "validate_result"]

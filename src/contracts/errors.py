"""Shared validation issue types for puzzle input checks."""

from __future__ import annotations


from dataclasses import dataclass
from typing import Any, Dict

SEVERITY_ERROR = "ERROR"


@dataclass(frozen=True)
class ValidationIssue:
    """Single finding produced while checking a puzzle."""

    code: str
    msg: str
    path: str
    severity: str

    def to_payload(self) -> Dict[str, Any]:
        return {"code": self.code, "msg": self.msg, "path": self.path, "severity": self.severity}


def make_error(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct an error-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_ERROR)


__all__ = [
    "SEVERITY_ERROR",
    "ValidationIssue",
    "make_error",
]

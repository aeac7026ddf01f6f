"""Validation contracts shared by the solver and its ports."""

from __future__ import annotations

from .errors import ValidationIssue, make_error
from .jsoncanon import jcs_dump, jcs_sha256
from .schema_validator import SchemaValidationError, validate_result

__all__ = [
    "SchemaValidationError",
    "ValidationIssue",
    "jcs_dump",
    "jcs_sha256",
    "make_error",
    "validate_result",
]

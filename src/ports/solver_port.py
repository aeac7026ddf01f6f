"""Facade used by external shells to solve a puzzle.

The port turns every outcome into a JSON-ready payload: ``solved`` and
``unsatisfiable`` carry the 81 values, ``invalid`` carries the list of issues
and never a board.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from contracts.schema_validator import validate_result
from project_config import get_section
from solver import InvalidInput, from_string, solve, to_string
from solver.trace import TRACE_LEVELS
from telemetry import log as event_log

from ._utils import build_env, collect_overrides

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverSettings:
    """Finalised solver settings after precedence resolution."""

    trace_level: str
    validate: bool
    events_enabled: bool
    events_dir: str
    events_max_bytes: int


_DEFAULTS = SolverSettings(
    trace_level="none",
    validate=True,
    events_enabled=False,
    events_dir="logs/solves",
    events_max_bytes=100 * 1024 * 1024,
)


def _parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in {"1", "true", "yes", "on"}:
            return True
        if normalised in {"0", "false", "no", "off"}:
            return False
    return None


def _parse_int(value: Any) -> Optional[int]:
    try:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip():
            return int(value)
    except (TypeError, ValueError):
        return None
    return None


def _apply_overrides(settings: SolverSettings, overrides: Mapping[str, Any]) -> SolverSettings:
    trace_level = settings.trace_level
    validate = settings.validate
    events_enabled = settings.events_enabled
    events_dir = settings.events_dir
    events_max_bytes = settings.events_max_bytes

    if "trace_level" in overrides:
        value = overrides["trace_level"]
        if isinstance(value, str) and value.strip().lower() in TRACE_LEVELS:
            trace_level = value.strip().lower()
    if "validate" in overrides:
        maybe = _parse_bool(overrides["validate"])
        if maybe is not None:
            validate = maybe
    if "events_enabled" in overrides:
        maybe = _parse_bool(overrides["events_enabled"])
        if maybe is not None:
            events_enabled = maybe
    if "events_dir" in overrides:
        value = overrides["events_dir"]
        if isinstance(value, str) and value:
            events_dir = value
    if "events_max_bytes" in overrides:
        maybe_int = _parse_int(overrides["events_max_bytes"])
        if maybe_int is not None and maybe_int > 0:
            events_max_bytes = maybe_int

    return SolverSettings(
        trace_level=trace_level,
        validate=validate,
        events_enabled=events_enabled,
        events_dir=events_dir,
        events_max_bytes=events_max_bytes,
    )


def _config_overrides() -> Dict[str, Any]:
    solver_section = get_section("solver", {})
    events_section = get_section("events", {})
    payload: Dict[str, Any] = {}
    if isinstance(solver_section, dict):
        for key in ("trace_level", "validate"):
            if key in solver_section:
                payload[key] = solver_section[key]
    if isinstance(events_section, dict):
        for key in ("enabled", "dir", "max_bytes"):
            if key in events_section:
                payload[f"events_{key}"] = events_section[key]
    return payload


_ENV_KEYS = {
    "trace_level": "SUDOKU_TRACE_LEVEL",
    "validate": "SUDOKU_VALIDATE",
    "events_enabled": "SUDOKU_EVENTS_ENABLED",
    "events_dir": "SUDOKU_EVENTS_DIR",
    "events_max_bytes": "SUDOKU_EVENTS_MAX_BYTES",
}


def resolve_settings(env: Mapping[str, str] | None = None) -> SolverSettings:
    """Resolve settings: defaults < config.toml < ``SUDOKU_*`` < ``CLI_SUDOKU_*``."""

    env_map = build_env(env)
    settings = _apply_overrides(_DEFAULTS, _config_overrides())
    settings = _apply_overrides(settings, collect_overrides(env_map, _ENV_KEYS))
    settings = _apply_overrides(settings, collect_overrides(env_map, _ENV_KEYS, prefix="CLI_"))
    return settings


def _emit_event(settings: SolverSettings, payload: Dict[str, Any]) -> None:
    event_log.configure(settings.events_dir, max_bytes=settings.events_max_bytes)

    event: Dict[str, Any] = {"event": "solve", "status": payload["status"]}
    if "digest" in payload:
        event["puzzle"] = to_string(payload["givens"])
        event["digest"] = payload["digest"]
        event["stats"] = payload["stats"]
    else:
        event["issues"] = [issue["code"] for issue in payload["issues"]]
    path = event_log.append_event(event)
    _LOGGER.debug("solve event appended to %s", path)


def solve_puzzle(
    values: Sequence[Any] | str,
    *,
    env: Mapping[str, str] | None = None,
) -> Dict[str, Any]:
    """Solve ``values`` (81 cells or puzzle text) and return the result payload."""

    settings = resolve_settings(env)
    try:
        cells = from_string(values) if isinstance(values, str) else values
        payload = solve(cells, trace_level=settings.trace_level).to_payload()
    except InvalidInput as exc:
        _LOGGER.info("rejected puzzle: %s", exc)
        payload = {
            "status": "invalid",
            "error": str(exc),
            "issues": [issue.to_payload() for issue in exc.issues],
        }

    if settings.validate:
        validate_result(payload)
    if settings.events_enabled:
        _emit_event(settings, payload)
    return payload


__all__ = ["SolverSettings", "resolve_settings", "solve_puzzle"]

"""Environment helpers for port facades."""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping


def build_env(overrides: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Return the process environment with ``overrides`` layered on top."""

    env: Dict[str, str] = {str(k): str(v) for k, v in os.environ.items()}
    if overrides:
        env.update({str(k): str(v) for k, v in overrides.items()})
    return env


def collect_overrides(env: Mapping[str, str], keys: Mapping[str, str], *, prefix: str = "") -> Dict[str, Any]:
    """Map ``prefix + variable`` entries present in ``env`` onto setting names."""

    return {field: env[prefix + name] for field, name in keys.items() if prefix + name in env}


__all__ = ["build_env", "collect_overrides"]

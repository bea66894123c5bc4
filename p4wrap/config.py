"""Runtime defaults sourced from environment variables."""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RuntimeDefaults:
    """Defaults applied to a `P4` client when not passed explicitly."""

    executable: str
    cwd: Path
    timeout: float | None


def get_runtime_defaults(env: Mapping[str, str] | None = None) -> RuntimeDefaults:
    """Validate and return runtime defaults from environment variables."""
    return RuntimeDefaults(
        executable=default_executable(env),
        cwd=default_cwd(env),
        timeout=default_timeout(env),
    )


def default_executable(env: Mapping[str, str] | None = None) -> str:
    source = os.environ if env is None else env
    return source.get("P4WRAP_EXECUTABLE", "").strip() or "p4"


def default_cwd(env: Mapping[str, str] | None = None) -> Path:
    source = os.environ if env is None else env
    cwd_env = source.get("P4WRAP_CWD", "").strip()
    return (Path(cwd_env) if cwd_env else Path.cwd()).resolve()


def default_timeout(env: Mapping[str, str] | None = None) -> float | None:
    source = os.environ if env is None else env
    return _parse_timeout_env(source, "P4WRAP_TIMEOUT")


def _parse_timeout_env(source: Mapping[str, str], key: str) -> float | None:
    raw = source.get(key, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number of seconds.") from exc
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{key} must be greater than 0.")
    return value

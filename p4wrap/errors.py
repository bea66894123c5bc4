"""Error taxonomy for p4 invocations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Stable classification of every failure a `P4` call can raise."""

    LAUNCH = "LAUNCH"
    EXECUTION = "EXECUTION"
    DIAGNOSTIC = "DIAGNOSTIC"
    AUTH = "AUTH"
    INVALID_REPORT = "INVALID_REPORT"
    MISSING_ARGUMENT = "MISSING_ARGUMENT"


@dataclass(eq=False)
class P4Error(Exception):
    """Structured exception raised for a single failed p4 call."""

    kind: ErrorKind
    message: str
    stdout: str | None = None
    stderr: str | None = None
    returncode: int | None = None

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "error",
            "error_kind": self.kind.value,
            "message": self.message,
            "stdout": self.stdout or "",
            "stderr": self.stderr or "",
            "returncode": self.returncode,
        }

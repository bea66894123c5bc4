"""Process execution for p4wrap.

Every command p4wrap issues goes through an `Executor`: a callable that takes a fully
composed shell command line plus a working directory and environment, runs it to
completion, and returns an `ExecResult(returncode, stdout, stderr)`.

- `ShellExecutor` is the real implementation. It runs the command line through the
  system shell (`subprocess.run(..., shell=True)`) because callers compose pipelines
  such as `echo "$PASS" | p4 login`. Nothing is escaped.
- Tests substitute any callable with the same signature.

Launch failures (the shell itself cannot be started, or the optional timeout expires)
are raised as `OSError` / `subprocess.TimeoutExpired`; a command that starts but exits
non-zero is reported through `returncode`, never raised.
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ExecResult:
    returncode: int
    stdout: str
    stderr: str


class Executor(Protocol):
    def __call__(
        self,
        command_line: str,
        *,
        cwd: str,
        env: Mapping[str, str],
        timeout: float | None = None,
    ) -> ExecResult: ...


class ShellExecutor:
    def __init__(self, *, timeout: float | None = None) -> None:
        self.timeout = timeout

    def __call__(
        self,
        command_line: str,
        *,
        cwd: str,
        env: Mapping[str, str],
        timeout: float | None = None,
    ) -> ExecResult:
        p = subprocess.run(
            command_line,
            shell=True,
            cwd=cwd,
            env=dict(env),
            text=True,
            capture_output=True,
            check=False,
            timeout=(timeout if timeout is not None else self.timeout),
        )
        return ExecResult(returncode=p.returncode, stdout=p.stdout or "", stderr=p.stderr or "")

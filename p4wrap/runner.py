"""Command execution and failure classification for p4 commands.

`CommandRunner.run(command, args)` composes `"<executable> <command> <args>"`, executes it
through the injected `Executor` in the session's working directory, and either returns
stdout or raises `P4Error`. Exactly one outcome per call:

- LAUNCH: the executor raised before producing a result (missing shell, timeout, a
  command line `subprocess` rejects outright, e.g. one containing a NUL byte).
- EXECUTION: the command exited non-zero. stderr is attached but not classified.
- DIAGNOSTIC: the command exited zero but wrote to stderr. Lines containing
  `no such file` are dropped first (`p4 fstat *` reports them for directories); if
  nothing is left the call succeeds.
- AUTH: like DIAGNOSTIC, but the remaining stderr is exactly the "password invalid or
  unset" message. See below.

Automatic re-login
The runner has two states, NORMAL and RETRYING. An AUTH failure in NORMAL state calls
the `login` hook (normally `P4.login` with cached credentials) and re-issues the same
command line once in RETRYING state. In RETRYING state nothing is intercepted, so a
persistent AUTH failure is raised to the caller after exactly one extra login. If the
login itself fails, the login error is raised instead of the original AUTH failure.

Environment
The command always runs with `cwd=session.cwd`. Its environment is a copy of the
session's `env` option when set (an empty mapping counts as set), otherwise a copy of
`os.environ`; in both cases `PWD` is overwritten with the working directory so tools
that read it agree with the real cwd.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from .errors import ErrorKind, P4Error
from .executor import ExecResult, Executor
from .session import Session

logger = logging.getLogger(__name__)

AUTH_FAILURE_SIGNATURE = "Perforce password (P4PASSWD) invalid or unset."
_NO_SUCH_FILE_RE = re.compile(r"no such file")

Args = str | Sequence[str] | None


class RetryState(Enum):
    NORMAL = "normal"
    RETRYING = "retrying"


def join_args(args: Args) -> str:
    if args is None:
        return ""
    if isinstance(args, str):
        return args
    return " ".join(args)


def filter_benign_stderr(stderr: str) -> str:
    """Drop `no such file(s)` lines; an all-benign stream becomes empty."""
    return "\n".join(line for line in stderr.split("\n") if not _NO_SUCH_FILE_RE.search(line))


def classify_stderr(stderr: str) -> tuple[ErrorKind | None, str]:
    """Classify the stderr of a command that exited zero.

    Returns `(kind, filtered_stderr)` where `kind` is None on success.
    """
    filtered = filter_benign_stderr(stderr)
    if not filtered:
        return None, ""
    # p4 terminates the message with a newline; the bare string is accepted too.
    if filtered in (AUTH_FAILURE_SIGNATURE, AUTH_FAILURE_SIGNATURE + "\n"):
        return ErrorKind.AUTH, filtered
    return ErrorKind.DIAGNOSTIC, filtered


class CommandRunner:
    def __init__(
        self,
        *,
        session: Session,
        executor: Executor,
        executable: str = "p4",
        login: Callable[[], object] | None = None,
    ) -> None:
        self.session = session
        self.executor = executor
        self.executable = executable
        self.login = login

    def compose(self, command: str, args: Args = None) -> str:
        return f"{self.executable} {command} {join_args(args)}"

    def environment(
        self,
        extra: dict[str, str] | None = None,
        *,
        drop: tuple[str, ...] = (),
    ) -> dict[str, str]:
        options = self.session.options
        env = dict(options["env"] if options.get("env") is not None else os.environ)
        for key in drop:
            env.pop(key, None)
        env["PWD"] = self.session.cwd
        if extra:
            env.update(extra)
        return env

    def run(self, command: str, args: Args = None) -> str:
        """Run a p4 command and return its stdout, re-logging in at most once."""
        command_line = self.compose(command, args)
        state = RetryState.NORMAL
        while True:
            try:
                return self._run_once(command_line)
            except P4Error as err:
                if err.kind is not ErrorKind.AUTH or state is RetryState.RETRYING or self.login is None:
                    raise
                logger.info("p4 ticket rejected; logging in again before retrying %r", command)
                try:
                    self.login()
                except P4Error:
                    logger.warning("automatic p4 login failed; giving up on %r", command)
                    raise
                state = RetryState.RETRYING

    def run_shell(
        self,
        command_line: str,
        *,
        env_extra: dict[str, str] | None = None,
        env_drop: tuple[str, ...] = (),
    ) -> str:
        """Run an arbitrary shell command line. Any stderr output is a failure."""
        res = self.execute(command_line, env=self.environment(env_extra, drop=env_drop))
        if res.returncode != 0:
            raise _execution_error(command_line, res)
        if res.stderr:
            raise P4Error(
                kind=ErrorKind.DIAGNOSTIC,
                message=res.stderr,
                stdout=res.stdout,
                stderr=res.stderr,
                returncode=res.returncode,
            )
        return res.stdout

    def execute(self, command_line: str, *, env: dict[str, str]) -> ExecResult:
        cwd = self.session.cwd
        kwargs: dict[str, Any] = {}
        if "timeout" in self.session.options:
            kwargs["timeout"] = self.session.options["timeout"]
        logger.debug("exec %s (cwd=%s)", command_line, cwd)
        try:
            return self.executor(command_line, cwd=cwd, env=env, **kwargs)
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            raise P4Error(kind=ErrorKind.LAUNCH, message=str(exc)) from exc

    def _run_once(self, command_line: str) -> str:
        res = self.execute(command_line, env=self.environment())
        if res.returncode != 0:
            raise _execution_error(command_line, res)
        kind, filtered = classify_stderr(res.stderr)
        if kind is not None:
            raise P4Error(
                kind=kind,
                message=filtered,
                stdout=res.stdout,
                stderr=res.stderr,
                returncode=res.returncode,
            )
        return res.stdout


def _execution_error(command_line: str, res: ExecResult) -> P4Error:
    detail = res.stderr.strip() or command_line.strip()
    return P4Error(
        kind=ErrorKind.EXECUTION,
        message=f"Command failed with exit code {res.returncode}: {detail}",
        stdout=res.stdout,
        stderr=res.stderr,
        returncode=res.returncode,
    )

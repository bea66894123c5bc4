"""The `P4` client: one method per Perforce verb.

`P4` owns a `Session` (working directory + execution options) and a `CommandRunner`
bound to it. Methods are small and map closely to a single `p4` invocation, so callers
can reason about side effects:

- `cd(dir)` / `set_opts(opts)` / `pwd()`
  Session bookkeeping. `cd` resolves relative to the current directory and accepts
  absolute paths; `set_opts` ignores `cwd`. Both return the client for chaining:
  `p4.cd("src").cd("lib").edit("foo.py")`.
- `run_command(command, args=None) -> str`
  `p4 <command> <args>`, with automatic re-login (see `p4wrap.runner`).
- `run_shell_command(command, args=None) -> str`
  Any shell command line in the session directory. DOES NOT SHELL ESCAPE ANYTHING.
  The cached password is exported as `$PASS`; without one, `$PASS` is unset.
- `login(username=None, password=None) -> str`
  `echo "$PASS" | p4 -u "<user>" login`. Credentials passed together are cached and
  reused for later calls and for automatic re-login; they are never expired.
- `edit`, `add`, `smart_edit`, `revert`, `revert_unchanged`, `sync`, `sync_dir`,
  `recursive_sync_dir`, `submit` return raw stdout.
- `stat`, `stat_dir`, `recursive_stat_dir` return parsed `p4 fstat` output (a dict for
  one file, a list otherwise); `have` returns the `haveRev` field of `stat`.

Directory side effects
`stat` changes the session directory to the file's parent before running. `stat_dir`,
`recursive_stat_dir`, `sync_dir` and `recursive_sync_dir` change it to `path` when one
is given. The change persists after the call, like `cd`.

File names
`sanitize_filepath` escapes the Perforce wildcard characters `@ # * %` as `%40 %23 %2A
%25`. `edit`, `revert`, `stat`, `sync` and `submit` sanitize their path; `add` passes
it through untouched because `p4 add` takes literal file names.

Errors
Every failure is raised as `p4wrap.errors.P4Error`; `kind` says which. Methods that need
a path raise `MISSING_ARGUMENT` before executing anything.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from typing import Any

from .config import default_cwd, default_executable, default_timeout
from .errors import ErrorKind, P4Error
from .executor import Executor, ShellExecutor
from .fstat import FstatRecord, parse_fstat
from .runner import Args, CommandRunner, join_args
from .session import Session

logger = logging.getLogger(__name__)

_SPECIAL_CHARS = {
    "@": "%40",
    "#": "%23",
    "*": "%2A",
    "%": "%25",
}
_SPECIAL_CHARS_RE = re.compile(r"[@#*%]")


class P4:
    def __init__(
        self,
        executor: Executor | None = None,
        *,
        cwd: str | os.PathLike[str] | None = None,
        executable: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.session = Session(cwd=cwd if cwd is not None else default_cwd(environ))
        self.username: str | None = None
        self.password: str | None = None
        self.runner = CommandRunner(
            session=self.session,
            executor=executor if executor is not None else ShellExecutor(timeout=default_timeout(environ)),
            executable=executable or default_executable(environ),
            login=self.login,
        )

    # Session

    def cd(self, directory: str | os.PathLike[str]) -> P4:
        self.session.cd(directory)
        return self

    def set_opts(self, opts: Mapping[str, Any]) -> P4:
        self.session.set_opts(opts)
        return self

    def pwd(self) -> str:
        return self.session.pwd()

    # Raw commands

    def run_command(self, command: str, args: Args = None) -> str:
        return self.runner.run(command, args)

    def run_shell_command(self, command: str, args: Args = None) -> str:
        command_line = f"{command} {join_args(args)}"
        if self.password is None:
            # No cached password: $PASS stays unset.
            return self.runner.run_shell(command_line, env_drop=("PASS",))
        return self.runner.run_shell(command_line, env_extra={"PASS": self.password})

    def login(self, username: str | None = None, password: str | None = None) -> str:
        if username and password:
            self.username = username
            self.password = password
        user = self.username or ""
        logger.debug("p4 login as %s", user)
        return self.run_shell_command(f'echo "$PASS" | {self.runner.executable} -u "{user}" login')

    # Verbs

    def edit(self, filepath: str) -> str:
        return self.run_command("edit", self.sanitize_filepath(filepath))

    def add(self, filepath: str) -> str:
        return self.run_command("add", filepath)

    def smart_edit(self, filepath: str) -> str:
        """`p4 edit`, falling back to `p4 add` when the edit fails."""
        try:
            return self.edit(filepath)
        except P4Error as err:
            logger.debug("edit of %s failed (%s); trying add", filepath, err.kind.value)
            return self.add(filepath)

    def revert(self, filepath: str | None = None) -> str:
        if not filepath:
            raise P4Error(kind=ErrorKind.MISSING_ARGUMENT, message="Please pass a file to revert!")
        return self.run_command("revert", self.sanitize_filepath(filepath))

    def revert_unchanged(self, filepath: str | None = None) -> str:
        # `revert -a` always applies to the whole client; the path is ignored.
        _ = filepath
        return self.run_command("revert", "-a")

    def stat(self, filepath: str | None = None) -> FstatRecord | list[FstatRecord]:
        if not filepath:
            raise P4Error(kind=ErrorKind.MISSING_ARGUMENT, message="Please pass a file to stat!")
        self.cd(os.path.dirname(filepath) or ".")
        name = os.path.basename(self.sanitize_filepath(filepath))
        return parse_fstat(self.run_command("fstat", name))

    def have(self, filepath: str | None = None) -> object:
        if not filepath:
            raise P4Error(kind=ErrorKind.MISSING_ARGUMENT, message="Please pass a file to inspect!")
        stats = self.stat(filepath)
        if isinstance(stats, dict):
            return stats.get("haveRev")
        return None

    def stat_dir(self, filepath: str | None = None) -> FstatRecord | list[FstatRecord]:
        if filepath:
            self.cd(filepath)
        return parse_fstat(self.run_command("fstat", "*"))

    def recursive_stat_dir(self, filepath: str | None = None) -> FstatRecord | list[FstatRecord]:
        if filepath:
            self.cd(filepath)
        return parse_fstat(self.run_command("fstat", "..."))

    def sync(self, filepath: str | None = None) -> str:
        return self.run_command("sync", self.sanitize_filepath(filepath) if filepath else None)

    def sync_dir(self, filepath: str | None = None) -> str:
        if filepath:
            self.cd(filepath)
        return self.run_command("sync", "*")

    def recursive_sync_dir(self, filepath: str | None = None) -> str:
        if filepath:
            self.cd(filepath)
        return self.run_command("sync", "...")

    def submit(self, filepath: str, description: str) -> str:
        return self.run_command("submit", ["-d", f'"{description}"', self.sanitize_filepath(filepath)])

    @staticmethod
    def sanitize_filepath(filename: str) -> str:
        return _SPECIAL_CHARS_RE.sub(lambda m: _SPECIAL_CHARS[m.group(0)], filename)

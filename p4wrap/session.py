"""Per-client session state: working directory and execution options."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

RESERVED_OPTION = "cwd"


class Session:
    """Mutable state owned by exactly one `P4` client.

    `cwd` is always an absolute, normalized path. `options` holds extra execution
    options; the runner reads `env` (the process environment, used as-is when set,
    even if empty) and `timeout` (passed to the executor). The working directory can
    only change through `cd()`.
    """

    def __init__(self, *, cwd: str | os.PathLike[str]) -> None:
        self.cwd = os.path.normpath(os.path.abspath(os.fspath(cwd)))
        self.options: dict[str, Any] = {}

    def cd(self, directory: str | os.PathLike[str]) -> Session:
        # os.path.join discards self.cwd when `directory` is absolute.
        self.cwd = os.path.normpath(os.path.join(self.cwd, os.fspath(directory)))
        return self

    def set_opts(self, opts: Mapping[str, Any]) -> Session:
        for key, value in opts.items():
            if key == RESERVED_OPTION:
                continue
            self.options[key] = value
        return self

    def pwd(self) -> str:
        return self.cwd

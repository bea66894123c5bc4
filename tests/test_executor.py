from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from p4wrap import executor as executor_mod
from p4wrap.executor import ExecResult, ShellExecutor


def test_shell_executor_runs_through_shell_and_captures_text(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[Any, dict[str, Any]]] = []

    def fake_run(cmd: Any, **kwargs: Any) -> SimpleNamespace:
        calls.append((cmd, kwargs))
        return SimpleNamespace(returncode=3, stdout="out", stderr=None)

    monkeypatch.setattr(executor_mod.subprocess, "run", fake_run)

    res = ShellExecutor(timeout=9.0)("p4 info ", cwd=str(tmp_path), env={"A": "1"})

    assert res == ExecResult(returncode=3, stdout="out", stderr="")
    cmd, kwargs = calls[0]
    assert cmd == "p4 info "
    assert kwargs == {
        "shell": True,
        "cwd": str(tmp_path),
        "env": {"A": "1"},
        "text": True,
        "capture_output": True,
        "check": False,
        "timeout": 9.0,
    }


def test_shell_executor_call_timeout_overrides_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[Any] = []
    monkeypatch.setattr(
        executor_mod.subprocess,
        "run",
        lambda cmd, **kwargs: seen.append(kwargs["timeout"]) or SimpleNamespace(returncode=0, stdout="", stderr=""),
    )

    ShellExecutor(timeout=9.0)("true", cwd=str(tmp_path), env={}, timeout=1.0)

    assert seen == [1.0]


@pytest.mark.skipif(sys.platform == "win32", reason="posix shell")
def test_shell_executor_smoke(tmp_path: Path) -> None:
    res = ShellExecutor()('echo "$GREETING" && pwd', cwd=str(tmp_path), env={"GREETING": "yay", "PATH": "/usr/bin:/bin"})

    assert res.returncode == 0
    lines = res.stdout.splitlines()
    assert lines[0] == "yay"
    assert Path(lines[1]).resolve() == tmp_path.resolve()
    assert res.stderr == ""

from __future__ import annotations

from pathlib import Path

import pytest

from p4wrap.config import default_cwd, default_executable, default_timeout, get_runtime_defaults


def test_defaults_without_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    defaults = get_runtime_defaults({})

    assert defaults.executable == "p4"
    assert defaults.cwd == tmp_path.resolve()
    assert defaults.timeout is None


def test_values_from_env(tmp_path: Path) -> None:
    defaults = get_runtime_defaults(
        {
            "P4WRAP_EXECUTABLE": "/usr/local/bin/p4",
            "P4WRAP_CWD": str(tmp_path),
            "P4WRAP_TIMEOUT": "2.5",
        }
    )

    assert defaults.executable == "/usr/local/bin/p4"
    assert defaults.cwd == tmp_path.resolve()
    assert defaults.timeout == 2.5


def test_reads_process_environment_by_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("P4WRAP_CWD", str(tmp_path))
    monkeypatch.delenv("P4WRAP_EXECUTABLE", raising=False)
    monkeypatch.delenv("P4WRAP_TIMEOUT", raising=False)

    assert get_runtime_defaults().cwd == tmp_path.resolve()


@pytest.mark.parametrize("raw", ["soon", "0", "-1", "nan"])
def test_invalid_timeout_raises(raw: str) -> None:
    with pytest.raises(ValueError, match="P4WRAP_TIMEOUT"):
        get_runtime_defaults({"P4WRAP_TIMEOUT": raw})


def test_each_default_reads_only_its_variable(tmp_path: Path) -> None:
    env = {"P4WRAP_CWD": str(tmp_path), "P4WRAP_TIMEOUT": "bogus"}

    assert default_executable(env) == "p4"
    assert default_cwd(env) == tmp_path.resolve()
    with pytest.raises(ValueError, match="P4WRAP_TIMEOUT"):
        default_timeout(env)

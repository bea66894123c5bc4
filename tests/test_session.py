from __future__ import annotations

import os
from pathlib import Path

import pytest

from p4wrap.session import Session


def test_cd_resolves_relative_paths_and_composes() -> None:
    session = Session(cwd="/")

    assert session.cd("/dir0").cd("sub").pwd() == "/dir0/sub"


def test_cd_absolute_path_overrides_and_normalizes() -> None:
    session = Session(cwd="/work/space")

    session.cd("/foo/bar/../baz/")

    assert session.pwd() == "/foo/baz"


def test_cd_parent_directory() -> None:
    assert Session(cwd="/a/b/c").cd("..").cd("./d").pwd() == "/a/b/d"


def test_initial_cwd_is_made_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert Session(cwd="nested/../x").pwd() == os.path.join(os.getcwd(), "x")


def test_set_opts_merges_and_ignores_cwd() -> None:
    session = Session(cwd="/start")

    result = session.set_opts({"cwd": "/elsewhere", "env": {"P4USER": "me"}})
    session.set_opts({"timeout": 3})

    assert result is session
    assert session.pwd() == "/start"
    assert session.options == {"env": {"P4USER": "me"}, "timeout": 3}


def test_sessions_do_not_share_state() -> None:
    sessions = [Session(cwd="/").cd(f"dir{i}") for i in range(5)]
    sessions[0].set_opts({"env": {}})

    assert [s.pwd() for s in sessions] == [f"/dir{i}" for i in range(5)]
    assert [s.options for s in sessions[1:]] == [{}, {}, {}, {}]

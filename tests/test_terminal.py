"""Test terminal capability detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from termpix.enums import BackendType
from termpix.terminal import DeviceAttributesQuery, guess_backend, snapshot_environment

if TYPE_CHECKING:
    from pathlib import Path


class Query:
    """A stub terminal query which records how often it is called."""

    def __init__(self, result: bool | None) -> None:
        """Create a query which returns a fixed result."""
        self.result = result
        self.calls = 0

    def __call__(self) -> bool | None:
        """Return the fixed result."""
        self.calls += 1
        return self.result


def test_snapshot_environment() -> None:
    """Only terminal related variables are captured."""
    environ = {"TERM": "xterm", "HOME": "/root", "TMUX": "/tmp/tmux"}
    assert snapshot_environment(environ) == {"TERM": "xterm", "TMUX": "/tmp/tmux"}


@pytest.mark.parametrize(
    "term", ["mlterm", "yaft-256color", "foot", "foot-extra", "alacritty"]
)
def test_sixel_terminals(term: str) -> None:
    """Terminals known to support sixel graphics are not queried."""
    query = Query(False)
    assert guess_backend({"TERM": term}, query) is BackendType.SIXEL
    assert query.calls == 0


@pytest.mark.parametrize("term", ["st-256color", "xterm", "xterm-256color"])
def test_queried_terminals(term: str) -> None:
    """Some terminals are queried for sixel support."""
    assert guess_backend({"TERM": term}, Query(True)) is BackendType.SIXEL
    assert guess_backend({"TERM": term}, Query(False)) is BackendType.HALFBLOCKS
    assert guess_backend({"TERM": term}, Query(None)) is BackendType.HALFBLOCKS
    assert guess_backend({"TERM": term}) is BackendType.HALFBLOCKS


def test_kitty() -> None:
    """Kitty terminals are recognised by their terminal type."""
    query = Query(True)
    assert guess_backend({"TERM": "xterm-kitty"}, query) is BackendType.KITTY
    assert query.calls == 0


def test_term_program() -> None:
    """Terminals are recognised by the program name they report."""
    assert guess_backend({"TERM_PROGRAM": "MacTerm"}) is BackendType.SIXEL
    assert guess_backend({"TERM_PROGRAM": "iTerm.app"}) is BackendType.ITERM2
    assert guess_backend({"TERM_PROGRAM": "WezTerm"}) is BackendType.ITERM2


def test_unknown_terminal() -> None:
    """Unknown terminals fall back to half-block characters."""
    assert guess_backend({}) is BackendType.HALFBLOCKS
    assert guess_backend({"TERM": "vt100"}, Query(True)) is BackendType.HALFBLOCKS


@pytest.mark.parametrize("program", ["iTerm.app", "WezTerm"])
def test_iterm2_programs_with_xterm_type(program: str) -> None:
    """iTerm2 compatible terminals are recognised despite their xterm type."""
    query = Query(False)
    env = {"TERM": "xterm-256color", "TERM_PROGRAM": program}
    assert guess_backend(env, query) is BackendType.ITERM2
    assert query.calls == 0


def test_sixel_term_takes_precedence() -> None:
    """Terminal types known to support sixel are checked before the program."""
    env = {"TERM": "foot", "TERM_PROGRAM": "WezTerm"}
    assert guess_backend(env) is BackendType.SIXEL


def test_device_attributes_verify() -> None:
    """Sixel support is read from the primary device attributes response."""
    query = DeviceAttributesQuery()
    assert query.verify("\x1b[?62;4;6;22c") is True
    assert query.verify("\x1b[?4;7c") is True
    assert query.verify("\x1b[?64;1;2;6;9;15;22c") is False
    assert query.verify("\x1b[?1;2c") is False
    assert query.verify("") is None
    assert query.verify("garbage") is None


def test_device_attributes_not_a_terminal(tmp_path: Path) -> None:
    """Files which are not terminals are not queried."""
    with (tmp_path / "file").open("w+") as f:
        query = DeviceAttributesQuery(timeout=0.01, fd=f.fileno())
        assert query() is None
        assert f.tell() == 0

"""Test enumerations."""

from __future__ import annotations

from termpix.enums import BackendType


def test_next_cycles_in_declared_order() -> None:
    """Backends are cycled in declaration order, wrapping around."""
    assert BackendType.HALFBLOCKS.next() is BackendType.SIXEL
    assert BackendType.SIXEL.next() is BackendType.KITTY
    assert BackendType.KITTY.next() is BackendType.ITERM2
    assert BackendType.ITERM2.next() is BackendType.HALFBLOCKS


def test_next_without_iterm2() -> None:
    """Without iTerm2, kitty cycles back to halfblocks."""
    available = [BackendType.HALFBLOCKS, BackendType.SIXEL, BackendType.KITTY]
    assert BackendType.HALFBLOCKS.next(available) is BackendType.SIXEL
    assert BackendType.SIXEL.next(available) is BackendType.KITTY
    assert BackendType.KITTY.next(available) is BackendType.HALFBLOCKS


def test_next_skips_unavailable() -> None:
    """Unavailable backends are skipped."""
    available = [BackendType.HALFBLOCKS, BackendType.KITTY]
    assert BackendType.HALFBLOCKS.next(available) is BackendType.KITTY
    assert BackendType.KITTY.next(available) is BackendType.HALFBLOCKS
    # The current backend need not be available
    assert BackendType.SIXEL.next(available) is BackendType.KITTY
    assert BackendType.ITERM2.next(available) is BackendType.HALFBLOCKS


def test_uses_image_id() -> None:
    """Only the kitty protocol requires image identifiers."""
    assert [member for member in BackendType if member.uses_image_id] == [
        BackendType.KITTY
    ]


def test_values() -> None:
    """Backends can be looked up by their configuration value."""
    assert BackendType("iterm2") is BackendType.ITERM2
    assert BackendType("halfblocks") is BackendType.HALFBLOCKS

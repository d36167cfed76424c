"""Test the protocol registry."""

from __future__ import annotations

from termpix.enums import BackendType
from termpix.protocol import (
    Halfblocks,
    Iterm2,
    Kitty,
    Sixel,
    StatefulHalfblocks,
    StatefulIterm2,
    StatefulKitty,
    StatefulSixel,
)
from termpix.protocol.registry import get_protocol, registered_backends


def test_all_backends_registered() -> None:
    """Every backend has fixed and stateful adapters."""
    assert registered_backends() == list(BackendType)


def test_get_protocol() -> None:
    """Adapters are found by backend type."""
    assert get_protocol(BackendType.HALFBLOCKS)[:2] == (
        Halfblocks,
        StatefulHalfblocks,
    )
    assert get_protocol(BackendType.SIXEL)[:2] == (Sixel, StatefulSixel)
    assert get_protocol(BackendType.KITTY)[:2] == (Kitty, StatefulKitty)
    assert get_protocol(BackendType.ITERM2)[:2] == (Iterm2, StatefulIterm2)

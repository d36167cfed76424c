"""Define enumerations used throughout termpix."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection


class BackendType(Enum):
    """The terminal graphics protocols which can be used to display images.

    The declaration order defines the order in which backends are cycled:
    halfblocks, sixel, then kitty. The iTerm2 inline image protocol is an extra
    backend appended after kitty, so cycling from kitty reaches it before wrapping
    back to halfblocks.
    """

    HALFBLOCKS = "halfblocks"
    SIXEL = "sixel"
    KITTY = "kitty"
    ITERM2 = "iterm2"

    @property
    def uses_image_id(self) -> bool:
        """Whether the protocol requires a unique identifier for each image."""
        return self is BackendType.KITTY

    @property
    def uses_passthrough(self) -> bool:
        """Whether the protocol sends escape sequences which need wrapping in tmux."""
        return self is not BackendType.HALFBLOCKS

    def next(self, available: Collection[BackendType] | None = None) -> BackendType:
        """Return the next available backend, wrapping around to the first."""
        members = list(BackendType)
        if available is not None:
            members = [member for member in members if member in available]
        if not members:
            return self
        if self not in members:
            # Find the first available member declared after this one
            index = list(BackendType).index(self)
            for member in members:
                if list(BackendType).index(member) > index:
                    return member
            return members[0]
        return members[(members.index(self) + 1) % len(members)]

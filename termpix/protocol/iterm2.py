"""Contains the iTerm2 inline image protocol."""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING

from termpix.enums import BackendType
from termpix.protocol.base import (
    EscapeProtocol,
    StatefulProtocol,
    png_bytes,
    resize_source,
)
from termpix.protocol.registry import register

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage

    from termpix.data_structures import FontSize, Rect
    from termpix.resize import Color, Resize
    from termpix.source import ImageSource

__all__ = ["Iterm2", "StatefulIterm2", "encode"]

log = logging.getLogger(__name__)


def encode(image: PilImage, is_tmux: bool = False) -> str:
    """Encode an image as an iTerm2 inline image escape sequence.

    The image is sent as base64 encoded PNG data. The cursor is not moved by the
    terminal when the image is displayed.

    Args:
        image: The image to encode
        is_tmux: If set, the sequence is wrapped for tmux passthrough

    Returns:
        A single self-terminating escape sequence

    Raises:
        EncodeError: If the image could not be serialized as PNG

    """
    png = png_bytes(image)
    data = base64.standard_b64encode(png).decode()

    if is_tmux:
        start, end = "\x1bPtmux;\x1b\x1b", "\x1b\\"
    else:
        start, end = "\x1b", ""

    return (
        f"{start}]1337;File=inline=1;size={len(png)};"
        f"width={image.width}px;height={image.height}px;doNotMoveCursor=1:"
        f"{data}\x07{end}"
    )


@register(BackendType.ITERM2)
class Iterm2(EscapeProtocol):
    """An image encoded once using the iTerm2 inline image protocol."""

    backend_type = BackendType.ITERM2

    @classmethod
    def from_source(
        cls,
        source: ImageSource,
        font_size: FontSize,
        resize: Resize,
        background_color: Color | None,
        area: Rect,
        is_tmux: bool = False,
    ) -> Iterm2:
        """Encode an image source to fit in an area.

        Raises:
            EncodeError: If the image could not be encoded

        """
        image, rect = resize_source(source, font_size, resize, background_color, area)
        return cls(encode(image, is_tmux), rect, is_tmux)


@register(BackendType.ITERM2)
class StatefulIterm2(StatefulProtocol):
    """An image which is re-encoded with the iTerm2 protocol as its area changes."""

    backend_type = BackendType.ITERM2

    def __init__(
        self, source: ImageSource, font_size: FontSize, is_tmux: bool = False
    ) -> None:
        """Create a new stateful iTerm2 image."""
        self.is_tmux = is_tmux
        super().__init__(source, font_size)

    def empty(self) -> Iterm2:
        """Create an empty iTerm2 image."""
        return Iterm2(is_tmux=self.is_tmux)

    def encode(self, image: PilImage, rect: Rect) -> Iterm2:
        """Encode a resized image."""
        return Iterm2(encode(image, self.is_tmux), rect, self.is_tmux)

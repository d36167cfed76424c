"""Contains the kitty terminal graphics protocol."""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING

from termpix.enums import BackendType
from termpix.io import passthrough
from termpix.protocol.base import (
    EscapeProtocol,
    StatefulProtocol,
    png_bytes,
    resize_source,
)
from termpix.protocol.registry import register

if TYPE_CHECKING:
    from typing import Any

    from PIL.Image import Image as PilImage

    from termpix.data_structures import FontSize, Rect
    from termpix.resize import Color, Resize
    from termpix.source import ImageSource

__all__ = ["Kitty", "StatefulKitty", "encode"]

log = logging.getLogger(__name__)

CHUNK_SIZE = 4096


def _kitty_cmd(chunk: str = "", **params: Any) -> str:
    param_str = ",".join(
        [f"{key}={value}" for key, value in params.items() if value is not None]
    )
    cmd = f"\x1b_G{param_str}"
    if chunk:
        cmd += f";{chunk}"
    cmd += "\x1b\\"
    return cmd


def encode(image: PilImage, rect: Rect, image_id: int, is_tmux: bool = False) -> str:
    """Encode an image as kitty graphics commands which transmit and display it.

    Sending an image with an identifier which is already in use replaces the
    previous image.

    Args:
        image: The image to encode
        rect: The cells the image should be displayed across
        image_id: The unique identifier of the image
        is_tmux: If set, each command is wrapped for tmux passthrough

    Raises:
        EncodeError: If the image could not be serialized as PNG

    """
    data = base64.standard_b64encode(png_bytes(image)).decode()
    cmds = []
    first = True
    while first or data:
        chunk, data = data[:CHUNK_SIZE], data[CHUNK_SIZE:]
        if first:
            cmd = _kitty_cmd(
                chunk=chunk,
                a="T",  # Transmit and display the image
                t="d",  # Transferring the image directly
                f=100,  # Sending a PNG image
                i=image_id,
                p=1,  # Placement ID
                q=2,  # No chatback
                C=1,  # Do not move the cursor
                c=rect.width,
                r=rect.height,
                m=1 if data else 0,  # Data will be chunked
            )
            first = False
        else:
            cmd = _kitty_cmd(chunk=chunk, q=2, m=1 if data else 0)
        cmds.append(passthrough(cmd, is_tmux))
    return "".join(cmds)


@register(BackendType.KITTY)
class Kitty(EscapeProtocol):
    """An image encoded once using the kitty graphics protocol."""

    backend_type = BackendType.KITTY

    def __init__(
        self,
        data: str = "",
        area: Rect | None = None,
        is_tmux: bool = False,
        image_id: int = 0,
    ) -> None:
        """Create a new kitty image with the given identifier."""
        super().__init__(data, area, is_tmux)
        self.image_id = image_id

    @classmethod
    def from_source(
        cls,
        source: ImageSource,
        font_size: FontSize,
        resize: Resize,
        background_color: Color | None,
        area: Rect,
        image_id: int,
        is_tmux: bool = False,
    ) -> Kitty:
        """Encode an image source to fit in an area.

        Raises:
            EncodeError: If the image could not be encoded

        """
        image, rect = resize_source(source, font_size, resize, background_color, area)
        return cls(encode(image, rect, image_id, is_tmux), rect, is_tmux, image_id)


@register(BackendType.KITTY)
class StatefulKitty(StatefulProtocol):
    """An image which is re-sent using the kitty protocol as its area changes."""

    backend_type = BackendType.KITTY

    def __init__(
        self,
        source: ImageSource,
        font_size: FontSize,
        image_id: int,
        is_tmux: bool = False,
    ) -> None:
        """Create a new stateful kitty image."""
        self.image_id = image_id
        self.is_tmux = is_tmux
        super().__init__(source, font_size)

    def empty(self) -> Kitty:
        """Create an empty kitty image."""
        return Kitty(is_tmux=self.is_tmux, image_id=self.image_id)

    def encode(self, image: PilImage, rect: Rect) -> Kitty:
        """Encode a resized image."""
        return Kitty(
            encode(image, rect, self.image_id, self.is_tmux),
            rect,
            self.is_tmux,
            self.image_id,
        )

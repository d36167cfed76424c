"""Contains a fallback image protocol using unicode half-block characters.

Each terminal cell displays two vertically stacked pixels, using the upper half-block
character with separate foreground and background colours. This works in any
terminal with true-colour support.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL import Image

from termpix.data_structures import Rect
from termpix.enums import BackendType
from termpix.errors import EncodeError
from termpix.protocol.base import FixedProtocol, StatefulProtocol, resize_source
from termpix.protocol.registry import register

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage

    from termpix.data_structures import FontSize
    from termpix.layout.screen import Screen
    from termpix.resize import Color, Resize
    from termpix.source import ImageSource

__all__ = ["Halfblocks", "StatefulHalfblocks", "encode"]

log = logging.getLogger(__name__)

UPPER_HALF_BLOCK = "▀"
LOWER_HALF_BLOCK = "▄"

Cell = tuple[str, str]


def _hex(pixel: tuple[int, ...]) -> str | None:
    r, g, b, a = pixel
    if a < 128:
        return None
    return f"#{r:02x}{g:02x}{b:02x}"


def encode(image: PilImage, rect: Rect) -> list[list[Cell]]:
    """Encode an image as rows of styled half-block characters.

    Args:
        image: The image to encode
        rect: The cells the image should be displayed across

    Returns:
        A list of rows, each containing a ``(symbol, style)`` pair for each cell

    Raises:
        EncodeError: If the image could not be scaled

    """
    if rect.is_empty():
        return []
    try:
        scaled = image.convert("RGBA").resize(
            (rect.width, rect.height * 2), Image.Resampling.LANCZOS
        )
    except (OSError, ValueError) as error:
        raise EncodeError(f"Could not scale image: {error}") from error
    pixels = scaled.load()

    rows = []
    for y in range(0, rect.height * 2, 2):
        row: list[Cell] = []
        for x in range(rect.width):
            upper = _hex(pixels[x, y])
            lower = _hex(pixels[x, y + 1])
            if upper and lower:
                row.append((UPPER_HALF_BLOCK, f"fg:{upper} bg:{lower}"))
            elif upper:
                row.append((UPPER_HALF_BLOCK, f"fg:{upper}"))
            elif lower:
                row.append((LOWER_HALF_BLOCK, f"fg:{lower}"))
            else:
                row.append((" ", ""))
        rows.append(row)
    return rows


@register(BackendType.HALFBLOCKS)
class Halfblocks(FixedProtocol):
    """An image encoded once as half-block characters."""

    backend_type = BackendType.HALFBLOCKS

    def __init__(
        self, data: list[list[Cell]] | None = None, area: Rect | None = None
    ) -> None:
        """Create a new half-block image."""
        super().__init__(area or Rect())
        self.data = data or []

    @classmethod
    def from_source(
        cls,
        source: ImageSource,
        font_size: FontSize,
        resize: Resize,
        background_color: Color | None,
        area: Rect,
    ) -> Halfblocks:
        """Encode an image source to fit in an area.

        Raises:
            EncodeError: If the image could not be encoded

        """
        image, rect = resize_source(source, font_size, resize, background_color, area)
        return cls(encode(image, rect), rect)

    def draw(self, target: Rect, screen: Screen) -> None:
        """Write a half-block character to each cell in the target area."""
        for dy, row in enumerate(self.data[: target.height]):
            for dx, (symbol, style) in enumerate(row[: target.width]):
                screen.set_symbol(target.x + dx, target.y + dy, symbol, style)


@register(BackendType.HALFBLOCKS)
class StatefulHalfblocks(StatefulProtocol):
    """An image which is re-encoded as half-block characters as its area changes."""

    backend_type = BackendType.HALFBLOCKS

    def empty(self) -> Halfblocks:
        """Create an empty half-block image."""
        return Halfblocks()

    def encode(self, image: PilImage, rect: Rect) -> Halfblocks:
        """Encode a resized image."""
        return Halfblocks(encode(image, rect), rect)

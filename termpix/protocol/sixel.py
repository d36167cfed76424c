"""Contains the sixel graphics protocol.

Sixel encodes images as bands of six pixel rows, using printable characters, with a
palette of up to 256 colors. It is supported by foot, mlterm, xterm (when compiled
with sixel support), and others.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from termpix.enums import BackendType
from termpix.errors import EncodeError
from termpix.io import passthrough
from termpix.protocol.base import EscapeProtocol, StatefulProtocol, resize_source
from termpix.protocol.registry import register

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage

    from termpix.data_structures import FontSize, Rect
    from termpix.resize import Color, Resize
    from termpix.source import ImageSource

__all__ = ["Sixel", "StatefulSixel", "encode"]

log = logging.getLogger(__name__)

MAX_COLORS = 256


def _rle(band: list[int]) -> str:
    """Run-length encode a row of sixel values.

    Runs of three or more are written as ``!<count><char>``.
    """
    # Trailing empty sixels need not be sent
    end = len(band)
    while end and not band[end - 1]:
        end -= 1

    parts = []
    i = 0
    while i < end:
        value = band[i]
        count = 1
        while i + count < end and band[i + count] == value:
            count += 1
        char = chr(value + 63)
        parts.append(f"!{count}{char}" if count >= 3 else char * count)
        i += count
    return "".join(parts)


def encode(image: PilImage, is_tmux: bool = False) -> str:
    """Encode an image as a sixel escape sequence.

    Pixels which are mostly transparent are not drawn.

    Raises:
        EncodeError: If the image could not be converted to a palette image

    """
    try:
        rgba = image.convert("RGBA")
        quantized = rgba.convert("RGB").quantize(colors=MAX_COLORS)
    except (OSError, ValueError) as error:
        raise EncodeError(f"Could not quantize image: {error}") from error

    width, height = quantized.size
    palette = quantized.getpalette() or []
    pixels = quantized.tobytes()
    alpha = rgba.getchannel("A").tobytes()

    # DCS with P2=1, so unset pixels keep their current colour
    parts = ["\x1bP0;1;0q", f'"1;1;{width};{height}']
    for i in range(min(MAX_COLORS, len(palette) // 3)):
        r, g, b = (round(value * 100 / 255) for value in palette[i * 3 : i * 3 + 3])
        parts.append(f"#{i};2;{r};{g};{b}")

    for band_y in range(0, height, 6):
        bands: dict[int, list[int]] = {}
        for bit, y in enumerate(range(band_y, min(band_y + 6, height))):
            offset = y * width
            for x in range(width):
                if alpha[offset + x] < 128:
                    continue
                color = pixels[offset + x]
                if (band := bands.get(color)) is None:
                    band = bands[color] = [0] * width
                band[x] |= 1 << bit
        for color, band in bands.items():
            # Select colour, draw, then return to the start of the band
            parts.append(f"#{color}{_rle(band)}$")
        # Move to the next band
        parts.append("-")

    parts.append("\x1b\\")
    return passthrough("".join(parts), is_tmux)


@register(BackendType.SIXEL)
class Sixel(EscapeProtocol):
    """An image encoded once as sixels."""

    backend_type = BackendType.SIXEL

    @classmethod
    def from_source(
        cls,
        source: ImageSource,
        font_size: FontSize,
        resize: Resize,
        background_color: Color | None,
        area: Rect,
        is_tmux: bool = False,
    ) -> Sixel:
        """Encode an image source to fit in an area.

        Raises:
            EncodeError: If the image could not be encoded

        """
        image, rect = resize_source(source, font_size, resize, background_color, area)
        return cls(encode(image, is_tmux), rect, is_tmux)


@register(BackendType.SIXEL)
class StatefulSixel(StatefulProtocol):
    """An image which is re-encoded as sixels as its area changes."""

    backend_type = BackendType.SIXEL

    def __init__(
        self, source: ImageSource, font_size: FontSize, is_tmux: bool = False
    ) -> None:
        """Create a new stateful sixel image."""
        self.is_tmux = is_tmux
        super().__init__(source, font_size)

    def empty(self) -> Sixel:
        """Create an empty sixel image."""
        return Sixel(is_tmux=self.is_tmux)

    def encode(self, image: PilImage, rect: Rect) -> Sixel:
        """Encode a resized image."""
        return Sixel(encode(image, self.is_tmux), rect, self.is_tmux)

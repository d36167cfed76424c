"""Test the half-block character image protocol."""

from __future__ import annotations

from PIL import Image

from termpix.data_structures import FontSize, Rect
from termpix.enums import BackendType
from termpix.layout.screen import Screen
from termpix.protocol.halfblocks import Halfblocks, StatefulHalfblocks, encode
from termpix.resize import Fit
from termpix.source import ImageSource


def _image() -> Image.Image:
    image = Image.new("RGBA", (2, 2), (0, 0, 0, 0))
    image.putpixel((0, 0), (255, 0, 0, 255))
    image.putpixel((0, 1), (0, 0, 255, 255))
    image.putpixel((1, 1), (0, 255, 0, 255))
    return image


def test_encode() -> None:
    """Each cell shows the pixels above and below it."""
    assert encode(_image(), Rect(0, 0, 2, 1)) == [
        [("▀", "fg:#ff0000 bg:#0000ff"), ("▄", "fg:#00ff00")]
    ]


def test_encode_transparent() -> None:
    """Transparent cells are left blank."""
    image = Image.new("RGBA", (1, 2), (0, 0, 0, 0))
    assert encode(image, Rect(0, 0, 1, 1)) == [[(" ", "")]]


def test_encode_scales_to_cells() -> None:
    """Images are scaled to two pixels per cell."""
    rows = encode(Image.new("RGB", (40, 40), "white"), Rect(0, 0, 4, 3))
    assert len(rows) == 3
    assert all(len(row) == 4 for row in rows)
    assert rows[0][0] == ("▀", "fg:#ffffff bg:#ffffff")


def test_encode_empty() -> None:
    """Nothing is encoded for an empty area."""
    assert encode(_image(), Rect()) == []


def test_render() -> None:
    """Styled characters are written to each cell."""
    fixed = Halfblocks(encode(_image(), Rect(0, 0, 2, 1)), Rect(0, 0, 2, 1))
    assert fixed.backend_type is BackendType.HALFBLOCKS
    screen = Screen()
    fixed.render(Rect(3, 4, 5, 5), screen)
    assert screen.symbol(3, 4) == "▀"
    assert screen.style(3, 4) == "fg:#ff0000 bg:#0000ff"
    assert screen.symbol(4, 4) == "▄"
    assert not screen.is_skipped(4, 4)


def test_adapters() -> None:
    """Half-block adapters occupy the cells covered by the image."""
    font_size = FontSize(10, 20)
    source = ImageSource(Image.new("RGB", (30, 40), "white"), font_size)
    fixed = Halfblocks.from_source(source, font_size, Fit(), None, Rect(0, 0, 10, 10))
    assert fixed.area == Rect(0, 0, 3, 2)
    assert len(fixed.data) == 2

    state = StatefulHalfblocks(source, font_size)
    state.resize_encode(Fit(), "#ffffff", Rect(0, 0, 2, 1))
    assert state.current.area == Rect(0, 0, 2, 1)
    screen = Screen()
    state.render(Rect(0, 0, 2, 1), screen)
    assert screen.symbol(1, 0) == "▀"
    assert screen.style(1, 0) == "fg:#ffffff bg:#ffffff"

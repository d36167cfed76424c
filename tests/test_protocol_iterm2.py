"""Test the iTerm2 inline image protocol."""

from __future__ import annotations

import base64
from io import BytesIO

from PIL import Image

from termpix.data_structures import FontSize, Rect
from termpix.enums import BackendType
from termpix.layout.screen import Screen
from termpix.protocol.iterm2 import Iterm2, StatefulIterm2, encode
from termpix.resize import Fit
from termpix.source import ImageSource

FONT_SIZE = FontSize(10, 20)


def _decode(data: str) -> Image.Image:
    """Decode the image transmitted in an inline image escape sequence."""
    payload = data.split(":", 1)[1].split("\x07", 1)[0]
    return Image.open(BytesIO(base64.standard_b64decode(payload)))


def test_encode() -> None:
    """A single pixel image is encoded as a PNG in an OSC 1337 sequence."""
    image = Image.new("RGB", (1, 1), (0, 0, 0))
    data = encode(image)
    assert data.startswith("\x1b]1337;File=inline=1;size=")
    assert ";width=1px;height=1px;doNotMoveCursor=1:" in data
    assert data.endswith("\x07")

    decoded = _decode(data)
    assert decoded.format == "PNG"
    assert decoded.size == (1, 1)
    assert decoded.convert("RGB").getpixel((0, 0)) == (0, 0, 0)


def test_encode_size_matches_payload() -> None:
    """The declared size is the length of the decoded PNG data."""
    data = encode(Image.new("RGB", (3, 2), "white"))
    size = int(data.split("size=", 1)[1].split(";", 1)[0])
    payload = data.split(":", 1)[1].split("\x07", 1)[0]
    assert size == len(base64.standard_b64decode(payload))


def test_encode_tmux() -> None:
    """The sequence is wrapped for tmux passthrough."""
    data = encode(Image.new("RGB", (1, 1)), is_tmux=True)
    assert data.startswith("\x1bPtmux;\x1b\x1b]1337;File=inline=1;")
    assert data.endswith("\x07\x1b\\")


def test_from_source_pads_to_cells() -> None:
    """Encoded images are padded to fill whole cells."""
    source = ImageSource(Image.new("RGB", (1, 1)), FONT_SIZE)
    fixed = Iterm2.from_source(source, FONT_SIZE, Fit(), None, Rect(0, 0, 5, 5))
    assert fixed.backend_type is BackendType.ITERM2
    assert fixed.area == Rect(0, 0, 1, 1)
    assert "width=10px;height=20px" in fixed.data
    assert _decode(fixed.data).size == (10, 20)


def test_render_writes_first_cell_and_skips_the_rest() -> None:
    """The escape sequence is placed in the first cell of the area."""
    source = ImageSource(Image.new("RGB", (30, 40)), FONT_SIZE)
    fixed = Iterm2.from_source(source, FONT_SIZE, Fit(), None, Rect(0, 0, 10, 10))
    assert fixed.area == Rect(0, 0, 3, 2)

    screen = Screen()
    fixed.render(Rect(1, 1, 4, 4), screen)
    assert screen.symbol(1, 1) == fixed.data
    assert not screen.is_skipped(1, 1)
    for x, y in [(2, 1), (3, 1), (1, 2), (2, 2), (3, 2)]:
        assert screen.is_skipped(x, y)
    assert not screen.is_skipped(4, 1)
    assert not screen.is_skipped(1, 3)


def test_render_too_small() -> None:
    """Nothing is written if the image does not fit in the area."""
    source = ImageSource(Image.new("RGB", (30, 40)), FONT_SIZE)
    fixed = Iterm2.from_source(source, FONT_SIZE, Fit(), None, Rect(0, 0, 10, 10))

    screen = Screen()
    fixed.render(Rect(0, 0, 2, 2), screen)
    assert screen.width == 0
    assert screen.height == 0
    assert screen.symbol(0, 0) == " "
    assert not screen.is_skipped(1, 1)


def test_stateful_render() -> None:
    """Stateful images are encoded for their area, then rendered."""
    source = ImageSource(Image.new("RGB", (30, 40)), FONT_SIZE)
    state = StatefulIterm2(source, FONT_SIZE, is_tmux=True)
    assert not state.rendered

    area = Rect(0, 0, 10, 10)
    state.resize_encode(Fit(), None, area)
    assert state.rendered
    assert state.hash == source.hash
    assert state.current.area == Rect(0, 0, 3, 2)

    screen = Screen()
    state.render(area, screen)
    assert screen.symbol(0, 0).startswith("\x1bPtmux;")

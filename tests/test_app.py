"""Test the image viewer application."""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

import pytest
from PIL import Image
from prompt_toolkit.data_structures import Size
from prompt_toolkit.output.color_depth import ColorDepth
from prompt_toolkit.output.vt100 import Vt100_Output

from termpix import picker as picker_module
from termpix.app import ViewerApp
from termpix.config import Config
from termpix.data_structures import Rect

if TYPE_CHECKING:
    from pathlib import Path


def make_app(stream: StringIO, **kwargs: object) -> ViewerApp:
    """Create a viewer which writes to a string buffer."""
    output = Vt100_Output(
        stream,
        lambda: Size(rows=24, columns=80),
        term="xterm",
        default_color_depth=ColorDepth.DEPTH_24_BIT,
    )
    return ViewerApp(Config(**kwargs), output)


def test_area() -> None:
    """Images are displayed in the terminal, less a line for the prompt."""
    assert make_app(StringIO()).area() == Rect(0, 0, 80, 23)
    assert make_app(StringIO(), width=10, height=5).area() == Rect(0, 0, 10, 5)


def test_display_halfblocks(tmp_path: Path) -> None:
    """Images are printed to the output."""
    path = tmp_path / "red.png"
    Image.new("RGB", (20, 40), "#ff0000").save(path)
    stream = StringIO()
    app = make_app(stream, files=[path], font_size=[10, 20], graphics="halfblocks")
    assert app.run() == 0
    result = stream.getvalue()
    assert "▀" in result
    assert "38;2;255;0;0" in result


def test_display_kitty(tmp_path: Path) -> None:
    """Escape sequence images are written with the cursor saved."""
    path = tmp_path / "red.png"
    Image.new("RGB", (20, 40), "#ff0000").save(path)
    stream = StringIO()
    app = make_app(stream, files=[path], font_size=[10, 20], graphics="kitty")
    assert app.run() == 0
    assert "\x1b[s\x1b_G" in stream.getvalue()


def test_unreadable_file(tmp_path: Path) -> None:
    """Files which are not images are reported."""
    path = tmp_path / "image.png"
    path.write_bytes(b"not an image")
    app = make_app(
        StringIO(),
        files=[path, tmp_path / "missing.png"],
        font_size=[10, 20],
        graphics="halfblocks",
    )
    assert app.run() == 1


def test_no_files() -> None:
    """An error status is returned if there are no images."""
    assert make_app(StringIO(), font_size=[10, 20], graphics="halfblocks").run() == 1


def test_unknown_font_size(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """An error status is returned if the font size cannot be determined."""
    monkeypatch.setattr(picker_module, "tiocgwinsz", lambda: (0, 0, 0, 0))
    app = make_app(
        StringIO(), files=[tmp_path / "image.png"], graphics="halfblocks"
    )
    assert app.run() == 1

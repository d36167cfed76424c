"""Contains a screen buffer which can hold terminal graphics."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from prompt_toolkit.layout import screen
from prompt_toolkit.styles import Style

if TYPE_CHECKING:
    from prompt_toolkit.output import ColorDepth, Output
    from prompt_toolkit.styles import Attrs, BaseStyle

__all__ = ["Screen", "write_screen"]

log = logging.getLogger(__name__)


class Screen(screen.Screen):
    """A two dimensional buffer of cells, some of which may contain graphics.

    Escape sequences which display images are stored as zero-width escapes in the
    top-left cell of the image. The remaining cells covered by the image are marked
    as skipped, so they are not overwritten when the screen is output.
    """

    def __init__(
        self,
        width: int = 0,
        height: int = 0,
        default_char: screen.Char | None = None,
    ) -> None:
        """Create a new screen of the given size."""
        self.default_char = default_char or screen._CHAR_CACHE[" ", ""]
        super().__init__(
            default_char=self.default_char, initial_width=width, initial_height=height
        )
        self.skip_cells: defaultdict[int, set[int]] = defaultdict(set)

    def _grow(self, x: int, y: int) -> None:
        self.width = max(self.width, x + 1)
        self.height = max(self.height, y + 1)

    def set_symbol(self, x: int, y: int, symbol: str, style: str = "") -> None:
        """Set the content of a cell.

        Symbols starting with an escape character are stored as zero-width escapes.
        """
        if symbol.startswith("\x1b"):
            self.zero_width_escapes[y][x] = symbol
            symbol = " "
        elif x in (row := self.zero_width_escapes.get(y, {})):
            del row[x]
        self.data_buffer[y][x] = screen._CHAR_CACHE[symbol, style]
        self.skip_cells[y].discard(x)
        self._grow(x, y)

    def set_skip(self, x: int, y: int, skip: bool = True) -> None:
        """Mark whether a cell should be left untouched when the screen is output."""
        if skip:
            self.skip_cells[y].add(x)
        else:
            self.skip_cells[y].discard(x)
        self._grow(x, y)

    def is_skipped(self, x: int, y: int) -> bool:
        """Whether a cell is left untouched when the screen is output."""
        return x in self.skip_cells.get(y, ())

    def char(self, x: int, y: int) -> screen.Char:
        """Return the character in a cell without modifying the buffer."""
        if (row := self.data_buffer.get(y)) is not None:
            return row.get(x, self.default_char)
        return self.default_char

    def symbol(self, x: int, y: int) -> str:
        """Return the escape sequence or character stored in a cell."""
        if escape := self.zero_width_escapes.get(y, {}).get(x):
            return escape
        return self.char(x, y).char

    def style(self, x: int, y: int) -> str:
        """Return the style of a cell."""
        return self.char(x, y).style


def write_screen(
    screen: Screen,
    output: Output,
    style: BaseStyle | None = None,
    color_depth: ColorDepth | None = None,
) -> None:
    """Write the content of a screen to an output at the cursor's position.

    Space for the screen is reserved first, so the terminal does not scroll while
    graphics are being written. The cursor is left on the line below the screen.
    """
    if not screen.height:
        return
    style = style or Style([])
    color_depth = color_depth or output.get_default_color_depth()

    output.write_raw("\n" * (screen.height - 1))
    output.cursor_up(screen.height - 1)
    output.write_raw("\r")

    last_attrs: Attrs | None = None
    for y in range(screen.height):
        skip = 0
        for x in range(screen.width):
            if screen.is_skipped(x, y):
                skip += 1
                continue
            if skip:
                output.cursor_forward(skip)
                skip = 0
            if escape := screen.zero_width_escapes.get(y, {}).get(x):
                # Save and restore the cursor, as not all protocols leave it in place
                output.write_raw(f"\x1b[s{escape}\x1b[u")
                output.cursor_forward(1)
                continue
            char = screen.char(x, y)
            attrs = style.get_attrs_for_style_str(char.style)
            if attrs != last_attrs:
                output.reset_attributes()
                output.set_attributes(attrs, color_depth)
                last_attrs = attrs
            output.write(char.char)
        output.reset_attributes()
        last_attrs = None
        output.write_raw("\r\n")
    output.flush()
    log.debug("Wrote screen of %s×%s cells", screen.width, screen.height)

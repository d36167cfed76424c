"""Contains commonly used data structures."""

from __future__ import annotations

from typing import NamedTuple


class FontSize(NamedTuple):
    """The pixel dimensions of a single terminal cell."""

    width: int
    height: int


class Rect(NamedTuple):
    """A rectangle on the terminal's character grid, measured in cells."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def left(self) -> int:
        """The left-most column of the rectangle."""
        return self.x

    @property
    def right(self) -> int:
        """The column after the right-most column of the rectangle."""
        return self.x + self.width

    @property
    def top(self) -> int:
        """The top row of the rectangle."""
        return self.y

    @property
    def bottom(self) -> int:
        """The row after the bottom row of the rectangle."""
        return self.y + self.height

    @property
    def area(self) -> int:
        """The number of cells covered by the rectangle."""
        return self.width * self.height

    def is_empty(self) -> bool:
        """Determine if the rectangle covers no cells."""
        return self.width == 0 or self.height == 0

    def fits_in(self, other: Rect) -> bool:
        """Determine if this rectangle's size fits within another rectangle's size."""
        return self.width <= other.width and self.height <= other.height

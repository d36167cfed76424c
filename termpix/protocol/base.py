"""Contains the base classes for terminal graphics protocols."""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from io import BytesIO
from typing import TYPE_CHECKING

from termpix.data_structures import Rect
from termpix.errors import EncodeError

if TYPE_CHECKING:
    from typing import ClassVar

    from PIL.Image import Image as PilImage

    from termpix.data_structures import FontSize
    from termpix.enums import BackendType
    from termpix.layout.screen import Screen
    from termpix.resize import Color, Resize
    from termpix.source import ImageSource

__all__ = [
    "EscapeProtocol",
    "FixedProtocol",
    "StatefulProtocol",
    "png_bytes",
    "render_area",
    "resize_source",
]

log = logging.getLogger(__name__)


def png_bytes(image: PilImage) -> bytes:
    """Serialize an image as PNG data."""
    with BytesIO() as output:
        try:
            image.save(output, format="PNG")
        except (OSError, ValueError) as error:
            raise EncodeError(f"Could not save image as PNG: {error}") from error
        return output.getvalue()


def resize_source(
    source: ImageSource,
    font_size: FontSize,
    resize: Resize,
    background_color: Color | None,
    area: Rect,
) -> tuple[PilImage, Rect]:
    """Resize an image source once for display in an area.

    If the resize policy decides no resizing is required, the source image is used
    at its natural size.
    """
    resized = resize.resize(source, font_size, Rect(), area, background_color, False)
    if resized is None:
        return source.image, source.area
    return resized


def render_area(rect: Rect, area: Rect, overdraw: bool) -> Rect | None:
    """Calculate the cells an image occupies when rendered into an area.

    Args:
        rect: The area occupied by the encoded image
        area: The area into which the image is rendered
        overdraw: If set, the image is clipped to the area instead of refusing to
            render when it is too large

    Returns:
        The area to render into, or :py:obj:`None` if the image should not be rendered

    """
    if overdraw:
        return Rect(
            area.x,
            area.y,
            min(rect.width, area.width),
            min(rect.height, area.height),
        )
    if not rect.fits_in(area):
        return None
    return Rect(area.x, area.y, rect.width, rect.height)


class FixedProtocol(metaclass=ABCMeta):
    """An encoded image which is rendered unchanged for its lifetime."""

    backend_type: ClassVar[BackendType]

    def __init__(self, area: Rect) -> None:
        """Create a new encoded image occupying the given area."""
        self.area = area

    def render(self, area: Rect, screen: Screen) -> None:
        """Render the image into an area of the screen.

        Nothing is written if the image does not fit in the area. Otherwise the
        renderer would write other content over the image.
        """
        if (target := render_area(self.area, area, overdraw=False)) is not None:
            self.draw(target, screen)

    def render_overdraw(self, area: Rect, screen: Screen) -> None:
        """Render the image into an area of the screen, clipping it if required."""
        target = render_area(self.area, area, overdraw=True)
        if target is not None and not target.is_empty():
            self.draw(target, screen)

    @abstractmethod
    def draw(self, target: Rect, screen: Screen) -> None:
        """Write the encoded image to the cells of the screen in the target area."""

    def __repr__(self) -> str:
        """Return a string representation of the encoded image."""
        return f"<{self.__class__.__name__} area={tuple(self.area)}>"


class EscapeProtocol(FixedProtocol):
    """An image encoded as a terminal escape sequence.

    The whole escape sequence is written to the top-left cell of the image's area,
    and all other cells in the area are marked so they are not redrawn.
    """

    def __init__(
        self, data: str = "", area: Rect | None = None, is_tmux: bool = False
    ) -> None:
        """Create a new escape sequence image.

        Args:
            data: The escape sequence which displays the image
            area: The cells occupied by the image
            is_tmux: Whether the sequence is wrapped for tmux passthrough

        """
        super().__init__(area or Rect())
        self.data = data
        self.is_tmux = is_tmux

    def draw(self, target: Rect, screen: Screen) -> None:
        """Write the escape sequence to the first cell and skip the rest."""
        screen.set_symbol(target.x, target.y, self.data)
        for y in range(target.top, target.bottom):
            for x in range(target.left, target.right):
                if x == target.x and y == target.y:
                    continue
                screen.set_skip(x, y)


class StatefulProtocol(metaclass=ABCMeta):
    """An image which is re-encoded to fit the area it is rendered in.

    Encoding is expensive, so the image is only encoded again if the image data has
    changed, or if the resize policy decides the image's geometry needs to change.
    """

    backend_type: ClassVar[BackendType]

    def __init__(self, source: ImageSource, font_size: FontSize) -> None:
        """Create a new stateful image.

        Args:
            source: The image source to display
            font_size: The pixel size of a terminal cell

        """
        self.source = source
        self.font_size = font_size
        self.current: FixedProtocol = self.empty()
        self.hash = ""
        self._last_error: EncodeError | None = None

    @abstractmethod
    def empty(self) -> FixedProtocol:
        """Create the image shown before the source has been encoded."""

    @abstractmethod
    def encode(self, image: PilImage, rect: Rect) -> FixedProtocol:
        """Encode a resized image which occupies the given area."""

    @property
    def last_error(self) -> EncodeError | None:
        """The error from the last encode attempt, if it failed."""
        return self._last_error

    @property
    def rendered(self) -> bool:
        """Whether the source has been encoded successfully."""
        return bool(self.hash)

    def needs_resize(self, resize: Resize, area: Rect) -> Rect | None:
        """Determine if the image needs to be re-encoded to be shown in an area."""
        return resize.needs_resize(
            self.source, self.font_size, self.current.area, area, False
        )

    def resize_encode(
        self, resize: Resize, background_color: Color | None, area: Rect
    ) -> None:
        """Re-encode the image for an area, if required.

        If encoding fails, the previously encoded image is kept and the error is made
        available through :py:attr:`last_error`.
        """
        if area.is_empty():
            return

        force = self.source.hash != self.hash
        resized = resize.resize(
            self.source,
            self.font_size,
            self.current.area,
            area,
            background_color,
            force,
        )
        if resized is None:
            return

        image, rect = resized
        try:
            current = self.encode(image, rect)
        except EncodeError as error:
            log.warning("Could not encode %r: %s", self.source, error)
            self._last_error = error
        else:
            self.current = current
            self.hash = self.source.hash
            self._last_error = None

    def render(self, area: Rect, screen: Screen) -> None:
        """Render the last encoded image, clipped to the area."""
        self.current.render_overdraw(area, screen)

    def __repr__(self) -> str:
        """Return a string representation of the stateful image."""
        return (
            f"<{self.__class__.__name__} "
            f"source={self.source!r} current={self.current!r}>"
        )

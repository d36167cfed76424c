"""Define policies which decide how images are scaled to fit the terminal."""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from math import ceil
from typing import TYPE_CHECKING, Union

from PIL import Image

from termpix.data_structures import Rect

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage

    from termpix.data_structures import FontSize
    from termpix.source import ImageSource

__all__ = ["Color", "Crop", "Fit", "Resize", "Scale", "get_resize"]

log = logging.getLogger(__name__)

Color = Union[str, tuple[int, ...]]


def fit_pixels(size: tuple[int, int], bounds: tuple[int, int]) -> tuple[int, int]:
    """Scale a pixel size to fit within bounds, preserving its aspect ratio."""
    width, height = size
    max_width, max_height = bounds
    ratio = min(max_width / width, max_height / height)
    return (
        min(max_width, max(1, round(width * ratio))),
        min(max_height, max(1, round(height * ratio))),
    )


class Resize(metaclass=ABCMeta):
    """A policy for resizing an image to display it in an area of the terminal.

    The policy decides which area of the terminal an image will occupy, and whether
    the image needs to be re-scaled when the area it is displayed in changes.
    """

    def __init__(self, filter_: Image.Resampling = Image.Resampling.NEAREST) -> None:
        """Create a new resize policy.

        Args:
            filter_: The resampling filter used when scaling images

        """
        self.filter = filter_

    @abstractmethod
    def target_size(
        self, source: ImageSource, font_size: FontSize, area: Rect
    ) -> tuple[int, int]:
        """Calculate the pixel size of the image when displayed in an area."""

    @abstractmethod
    def transform(self, image: PilImage, size: tuple[int, int]) -> PilImage:
        """Transform an image to the given pixel size."""

    def target_area(self, source: ImageSource, font_size: FontSize, area: Rect) -> Rect:
        """Calculate the cells an image would occupy when displayed in an area."""
        width, height = self.target_size(source, font_size, area)
        return Rect(
            0, 0, ceil(width / font_size.width), ceil(height / font_size.height)
        )

    def needs_resize(
        self,
        source: ImageSource,
        font_size: FontSize,
        current: Rect,
        area: Rect,
        force: bool = False,
    ) -> Rect | None:
        """Determine if an image needs to be resized to be displayed in an area.

        Args:
            source: The image source
            font_size: The pixel size of a terminal cell
            current: The area the image currently occupies
            area: The area the image is to be displayed in
            force: If set, the image is resized even if the geometry is unchanged

        Returns:
            The area a resized image would occupy, or :py:obj:`None` if the image
            does not need resizing

        """
        if area.is_empty():
            return None
        rect = self.target_area(source, font_size, area)
        if force or (rect.width, rect.height) != (current.width, current.height):
            return rect
        return None

    def resize(
        self,
        source: ImageSource,
        font_size: FontSize,
        current: Rect,
        area: Rect,
        background_color: Color | None = None,
        force: bool = False,
    ) -> tuple[PilImage, Rect] | None:
        """Resize an image to be displayed in an area, if required.

        Args:
            source: The image source
            font_size: The pixel size of a terminal cell
            current: The area the image currently occupies
            area: The area the image is to be displayed in
            background_color: The colour used to fill transparent and padded pixels
            force: If set, the image is resized even if the geometry is unchanged

        Returns:
            The resized image and the area it occupies, or :py:obj:`None` if the
            image does not need resizing

        """
        if area.is_empty():
            return None
        size = self.target_size(source, font_size, area)
        rect = Rect(
            0, 0, ceil(size[0] / font_size.width), ceil(size[1] / font_size.height)
        )
        if not force and (rect.width, rect.height) == (current.width, current.height):
            return None
        log.debug("Resizing %r to %sx%s px (%r)", source, *size, rect)
        image = source.image
        if image.size != size:
            image = self.transform(image, size)
        return self.pad(image, rect, font_size, background_color), rect

    @staticmethod
    def pad(
        image: PilImage,
        rect: Rect,
        font_size: FontSize,
        background_color: Color | None = None,
    ) -> PilImage:
        """Pad an image so it fills whole terminal cells."""
        size = (rect.width * font_size.width, rect.height * font_size.height)
        if image.size == size and background_color is None:
            return image
        canvas = Image.new("RGBA", size, background_color or (0, 0, 0, 0))
        canvas.alpha_composite(image.convert("RGBA"))
        return canvas

    def __repr__(self) -> str:
        """Return a string representation of the policy."""
        return f"{self.__class__.__name__}()"


class Fit(Resize):
    """Shrink images to fit the available area, preserving their aspect ratio.

    Images which already fit are never enlarged.
    """

    def target_size(
        self, source: ImageSource, font_size: FontSize, area: Rect
    ) -> tuple[int, int]:
        """Calculate the pixel size of the image when displayed in an area."""
        bounds = (area.width * font_size.width, area.height * font_size.height)
        width, height = source.image.size
        if width <= bounds[0] and height <= bounds[1]:
            return width, height
        return fit_pixels((width, height), bounds)

    def transform(self, image: PilImage, size: tuple[int, int]) -> PilImage:
        """Scale the image."""
        return image.resize(size, self.filter)


class Scale(Fit):
    """Scale images up or down to fill the area, preserving their aspect ratio."""

    def target_size(
        self, source: ImageSource, font_size: FontSize, area: Rect
    ) -> tuple[int, int]:
        """Calculate the pixel size of the image when displayed in an area."""
        return fit_pixels(
            source.image.size,
            (area.width * font_size.width, area.height * font_size.height),
        )


class Crop(Resize):
    """Crop images to the available area without scaling them."""

    def target_size(
        self, source: ImageSource, font_size: FontSize, area: Rect
    ) -> tuple[int, int]:
        """Calculate the pixel size of the image when displayed in an area."""
        width, height = source.image.size
        return (
            min(width, area.width * font_size.width),
            min(height, area.height * font_size.height),
        )

    def transform(self, image: PilImage, size: tuple[int, int]) -> PilImage:
        """Keep the top-left part of the image."""
        return image.crop((0, 0, *size))


RESIZE_POLICIES: dict[str, type[Resize]] = {
    "fit": Fit,
    "scale": Scale,
    "crop": Crop,
}


def get_resize(name: str) -> Resize:
    """Create a resize policy from its name."""
    return RESIZE_POLICIES[name.lower()]()

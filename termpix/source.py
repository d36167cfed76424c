"""Define the image source, which pairs an image with a terminal cell size."""

from __future__ import annotations

from hashlib import md5
from math import ceil
from typing import TYPE_CHECKING

from termpix.data_structures import Rect

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage

    from termpix.data_structures import FontSize


class ImageSource:
    """An image, the terminal cell size it is displayed with, and a hash of its pixels.

    The hash is calculated once, when the source is created, and is used to decide
    whether an image needs to be encoded again.
    """

    def __init__(self, image: PilImage, font_size: FontSize) -> None:
        """Create a new image source.

        Args:
            image: The decoded image
            font_size: The pixel size of a terminal cell

        """
        self.image = image
        self.font_size = font_size
        self.area = Rect(
            0,
            0,
            ceil(image.width / font_size.width),
            ceil(image.height / font_size.height),
        )
        self.hash = self.get_hash(image)

    @staticmethod
    def get_hash(image: PilImage) -> str:
        """Calculate a hash of an image's raw pixel data."""
        return md5(image.tobytes(), usedforsecurity=False).hexdigest()

    def __repr__(self) -> str:
        """Return a string representation of the image source."""
        return (
            f"{self.__class__.__name__}("
            f"size={self.image.width}x{self.image.height}, "
            f"area={self.area.width}x{self.area.height}, "
            f"hash={self.hash[:8]})"
        )

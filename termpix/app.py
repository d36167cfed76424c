"""Define an application which prints images to the terminal."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from PIL import Image
from prompt_toolkit.output.defaults import create_output

from termpix.config import Config
from termpix.data_structures import Rect
from termpix.errors import ConstructionError, EncodeError
from termpix.layout.screen import Screen, write_screen
from termpix.picker import Picker
from termpix.resize import get_resize

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from prompt_toolkit.output import Output

log = logging.getLogger(__name__)


class ViewerApp:
    """Display images in the terminal using terminal graphics."""

    def __init__(self, config: Config, output: Output | None = None) -> None:
        """Create a new viewer.

        Args:
            config: The loaded configuration
            output: The output to print images to. Defaults to the standard output

        """
        self.config = config
        self.output = output or create_output()
        self.resize = get_resize(config.resize)
        self.picker: Picker | None = None

    @classmethod
    def launch(cls, args: Sequence[str] | None = None) -> int:
        """Load the configuration and display the requested images.

        Returns:
            The exit status

        """
        config = Config(_help=cls.__doc__ or "")
        config.load(args)
        return cls(config).run()

    def area(self) -> Rect:
        """Calculate the area images are displayed in."""
        size = self.output.get_size()
        width = self.config.width or size.columns
        # Leave a line for the prompt
        height = self.config.height or max(size.rows - 1, 1)
        return Rect(0, 0, width, height)

    def run(self) -> int:
        """Display each configured image file in turn."""
        if not self.config.files:
            log.error("No image files given")
            return 1
        try:
            self.picker = Picker.from_config(self.config)
        except ConstructionError as error:
            log.error("%s. Try setting the font size with `--font-size`", error)
            return 1

        status = 0
        for path in self.config.files:
            if not self.display(path):
                status = 1
        return status

    def display(self, path: Path) -> bool:
        """Print a single image file.

        Returns:
            :py:obj:`True` if the image was displayed

        """
        assert self.picker is not None
        try:
            with Image.open(path) as image:
                image.load()
        except OSError as error:
            log.error("Could not open image `%s`: %s", path, error)
            return False

        area = self.area()
        try:
            fixed = self.picker.new_static_fit(image, area, self.resize)
        except EncodeError as error:
            log.error("Could not display image `%s`: %s", path, error)
            return False
        log.debug("Displaying `%s` as %r", path, fixed)

        screen = Screen()
        fixed.render(area, screen)
        write_screen(screen, self.output)
        return True


def main() -> None:
    """Launch the image viewer."""
    sys.exit(ViewerApp.launch())


if __name__ == "__main__":
    main()

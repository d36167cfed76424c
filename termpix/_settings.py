"""Defines termpix's settings."""

import json
from pathlib import Path

from termpix import __version__
from termpix.config import add_setting
from termpix.enums import BackendType
from termpix.resize import RESIZE_POLICIES

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]

# termpix.config

add_setting(
    name="version",
    default=False,
    flags=["--version", "-V"],
    action="version",
    hidden=True,
    version=f"%(prog)s {__version__}",
    help_="Show the version number and exit",
)

# termpix.app

add_setting(
    name="files",
    default=[],
    flags=["files"],
    nargs="*",
    type_=Path,
    help_="List of image files to display",
    schema={
        "type": "array",
        "items": {"type": "string"},
    },
)

add_setting(
    name="width",
    type_=int,
    default=0,
    help_="Maximum width of displayed images in terminal cells (0 to fill)",
    schema={"minimum": 0},
)

add_setting(
    name="height",
    type_=int,
    default=0,
    help_="Maximum height of displayed images in terminal cells (0 to fill)",
    schema={"minimum": 0},
)

add_setting(
    name="resize",
    type_=str,
    default="fit",
    choices=list(RESIZE_POLICIES),
    help_="How images are resized: shrink to fit, scale to fill, or crop",
)

# termpix.picker

add_setting(
    name="graphics",
    type_=str,
    choices=["auto", *(backend_type.value for backend_type in BackendType)],
    default="auto",
    help_="The graphics protocol to use, or `auto` to detect it",
)

add_setting(
    name="font_size",
    type_=int,
    nargs=2,
    default=None,
    metavar="PX",
    help_="The width and height of a terminal cell in pixels",
    schema={
        "type": ["array", "null"],
        "items": {"type": "integer", "minimum": 1},
        "minItems": 2,
        "maxItems": 2,
    },
)

add_setting(
    name="background_color",
    flags=["--background-color", "--bg"],
    type_=str,
    default="",
    help_="Hex color used to fill transparent parts of images",
    schema={
        "pattern": r"^(#[0-9a-fA-F]{6}|#[0-9a-fA-F]{3}|)$",
    },
)

add_setting(
    name="multiplexer_passthrough",
    type_=bool,
    default=False,
    help_="Wrap graphics for passthrough when running inside tmux",
)

add_setting(
    name="query_timeout",
    type_=float,
    default=0.05,
    help_="Seconds to wait for the terminal to respond to queries",
    schema={"minimum": 0},
)

add_setting(
    name="sixel_graphics",
    type_=bool,
    default=True,
    help_="Allow sixel graphics to be used",
)

add_setting(
    name="iterm_graphics",
    type_=bool,
    default=True,
    help_="Allow iTerm2 inline images to be used",
)

# termpix.log

add_setting(
    name="log_file",
    nargs="?",
    default="",
    type_=str,
    help_="File path for logs, or `-` to log to the terminal's standard error",
)

add_setting(
    name="log_level",
    type_=str,
    default="warning",
    choices=LOG_LEVELS,
    help_="Set the log level",
)

add_setting(
    name="log_level_console",
    hidden=True,
    type_=str,
    default="error",
    choices=LOG_LEVELS,
    help_="Set the log level printed to the terminal's standard error",
)

add_setting(
    name="log_config",
    type_=json.loads,
    default={},
    schema={"type": "object"},
    help_="Additional logging configuration as a JSON string",
)

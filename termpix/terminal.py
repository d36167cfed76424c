"""Contain functions related to querying terminal features."""

from __future__ import annotations

import logging
import os
import re
import sys
import time
from typing import TYPE_CHECKING

from termpix.enums import BackendType
from termpix.io import _have_termios_tty_fcntl, passthrough

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from typing import Any

log = logging.getLogger(__name__)

ENVIRONMENT_KEYS = ("TERM", "TERM_PROGRAM", "TMUX")

SIXEL_TERMS = {"mlterm", "yaft-256color", "foot", "foot-extra", "alacritty"}
QUERY_TERMS = {"st-256color", "xterm", "xterm-256color"}
ITERM2_PROGRAMS = {"iTerm.app", "WezTerm"}


def snapshot_environment(environ: Mapping[str, str] = os.environ) -> dict[str, str]:
    """Capture the environment variables which describe the terminal."""
    return {key: environ[key] for key in ENVIRONMENT_KEYS if key in environ}


def in_tmux(env: Mapping[str, str]) -> bool:
    """Determine if the environment is running inside tmux."""
    return env.get("TMUX") is not None


class DeviceAttributesQuery:
    """A terminal query which checks the primary device attributes for sixel support.

    The terminal is placed in raw mode while the response is read, and the response
    is only waited for until a timeout elapses.
    """

    cmd = "\x1b[c"
    pattern = re.compile(r"^\x1b\[\?(?:\d+;)*(?P<sixel>4)(?:;\d+)*c")
    response_pattern = re.compile(r"\x1b\[\?[\d;]*c")

    def __init__(
        self,
        timeout: float = 0.05,
        is_tmux: bool = False,
        fd: int | None = None,
    ) -> None:
        """Create a new device attributes query.

        Args:
            timeout: The number of seconds to wait for a response
            is_tmux: If set, the query is wrapped for tmux passthrough
            fd: The file descriptor of the terminal. Defaults to standard input

        """
        self.timeout = timeout
        self.is_tmux = is_tmux
        self.fd = fd

    def verify(self, data: str) -> bool | None:
        """Verify whether the terminal's response reports sixel support."""
        if (match := self.response_pattern.search(data)) is None:
            return None
        return self.pattern.match(match.group()) is not None

    def _read(self, fd: int) -> str:
        import select

        data = ""
        deadline = time.monotonic() + self.timeout
        while (remaining := deadline - time.monotonic()) > 0:
            readable, _, _ = select.select([fd], [], [], remaining)
            if not readable:
                break
            chunk = os.read(fd, 1024)
            if not chunk:
                break
            data += chunk.decode(errors="replace")
            if self.response_pattern.search(data):
                break
        return data

    def send(self) -> bool | None:
        """Send the query to the terminal and wait for a response.

        Returns:
            :py:obj:`True` if sixel graphics are supported, :py:obj:`False` if they
            are not, or :py:obj:`None` if the terminal could not be queried

        """
        if not _have_termios_tty_fcntl():
            return None
        import termios
        import tty

        try:
            fd = sys.stdin.fileno() if self.fd is None else self.fd
        except (AttributeError, ValueError, OSError):
            return None
        if not os.isatty(fd):
            log.debug("Not querying device attributes: not a terminal")
            return None

        try:
            settings = termios.tcgetattr(fd)
        except termios.error:
            return None
        try:
            tty.setraw(fd)
            os.write(fd, passthrough(self.cmd, self.is_tmux).encode())
            data = self._read(fd)
        except (OSError, termios.error):
            log.debug("Could not query device attributes", exc_info=True)
            return None
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, settings)

        log.debug("Got device attributes response %r", data)
        return self.verify(data)

    def __call__(self) -> bool | None:
        """Send the query."""
        return self.send()


def guess_backend(
    env: Mapping[str, str],
    query: Callable[[], Any] | None = None,
) -> BackendType:
    """Guess the best graphics backend for a terminal from its environment.

    Args:
        env: A snapshot of the terminal's environment variables
        query: A callable which interrogates the terminal for sixel support. It is
            only called for terminals which may or may not support sixel graphics

    Returns:
        The guessed backend

    """
    term = env.get("TERM", "")
    term_program = env.get("TERM_PROGRAM", "")

    if term in SIXEL_TERMS:
        return BackendType.SIXEL
    # iTerm2 and WezTerm report an xterm terminal type
    if term_program in ITERM2_PROGRAMS:
        return BackendType.ITERM2
    if term in QUERY_TERMS:
        if query is not None and query() is True:
            return BackendType.SIXEL
        return BackendType.HALFBLOCKS
    if "kitty" in term:
        return BackendType.KITTY
    if term_program == "MacTerm":
        return BackendType.SIXEL
    return BackendType.HALFBLOCKS

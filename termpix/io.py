"""Define terminal input and output helpers."""

from __future__ import annotations

import logging
from functools import lru_cache

log = logging.getLogger(__name__)


@lru_cache
def _have_termios_tty_fcntl() -> bool:
    try:
        import fcntl  # noqa F401
        import termios  # noqa F401
        import tty  # noqa F401
    except ModuleNotFoundError:
        return False
    else:
        return True


def tiocgwinsz(fd: int = 1) -> tuple[int, int, int, int]:
    """Get the size and pixel dimensions of the terminal with `termios`.

    Returns:
        A tuple of the terminal's rows, columns, pixel width and pixel height. Values
        which could not be determined are returned as zero.

    """
    import array

    output = array.array("H", [0, 0, 0, 0])
    if _have_termios_tty_fcntl():
        import fcntl
        import termios

        try:
            fcntl.ioctl(fd, termios.TIOCGWINSZ, output)
        except OSError:
            log.debug("Could not query terminal size of file descriptor %s", fd)
    rows, cols, xpixels, ypixels = output
    return rows, cols, xpixels, ypixels


def passthrough(cmd: str, tmux: bool = False) -> str:
    """Wrap an escape sequence for terminal multiplexer passthrough."""
    if tmux:
        cmd = cmd.replace("\x1b", "\x1b\x1b")
        cmd = f"\x1bPtmux;{cmd}\x1b\\"
    return cmd

"""Sub-module concerned with encoding images for terminal graphics protocols."""

from termpix.protocol.base import EscapeProtocol, FixedProtocol, StatefulProtocol
from termpix.protocol.halfblocks import Halfblocks, StatefulHalfblocks
from termpix.protocol.iterm2 import Iterm2, StatefulIterm2
from termpix.protocol.kitty import Kitty, StatefulKitty
from termpix.protocol.sixel import Sixel, StatefulSixel

__all__ = [
    "EscapeProtocol",
    "FixedProtocol",
    "Halfblocks",
    "Iterm2",
    "Kitty",
    "Sixel",
    "StatefulHalfblocks",
    "StatefulIterm2",
    "StatefulKitty",
    "StatefulProtocol",
    "StatefulSixel",
]

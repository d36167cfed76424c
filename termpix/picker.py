"""Contains a facade which chooses a graphics backend and creates image adapters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from termpix.data_structures import FontSize
from termpix.enums import BackendType
from termpix.errors import ConstructionError
from termpix.io import tiocgwinsz
from termpix.protocol.registry import get_protocol, registered_backends
from termpix.source import ImageSource
from termpix.terminal import (
    DeviceAttributesQuery,
    guess_backend,
    in_tmux,
    snapshot_environment,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from typing import Any

    from PIL.Image import Image as PilImage

    from termpix.config import Config
    from termpix.data_structures import Rect
    from termpix.protocol.base import FixedProtocol, StatefulProtocol
    from termpix.resize import Color, Resize

__all__ = ["BackendType", "Picker", "font_size"]

log = logging.getLogger(__name__)


def font_size(xpixel: int, ypixel: int, cols: int, rows: int) -> FontSize:
    """Calculate the pixel size of a terminal cell.

    Raises:
        ConstructionError: If any of the terminal's dimensions are zero

    """
    if not (xpixel and ypixel and cols and rows):
        raise ConstructionError(
            "Could not determine the terminal font size: "
            f"{xpixel}×{ypixel}px over {cols}×{rows} cells"
        )
    return FontSize(xpixel // cols, ypixel // rows)


class Picker:
    """Chooses a graphics backend and creates image adapters which use it.

    The picker owns the identifier space for backends which need unique image
    identifiers, so a single picker should be used per terminal.
    """

    def __init__(
        self,
        font_size: FontSize,
        backend_type: BackendType,
        background_color: Color | None = None,
        is_tmux: bool = False,
        backends: Iterable[BackendType] | None = None,
    ) -> None:
        """Create a new picker.

        Args:
            font_size: The pixel size of a terminal cell
            backend_type: The backend to use initially
            background_color: A colour to fill transparent areas of images with
            is_tmux: Whether escape sequences should be wrapped for tmux
            backends: The backends which may be used. Defaults to all registered
                backends

        """
        self._font_size = font_size
        self.background_color = background_color
        self.is_tmux = is_tmux
        available = set(registered_backends())
        if backends is not None:
            available &= set(backends)
        # Halfblocks are always available
        available.add(BackendType.HALFBLOCKS)
        self.backends = [member for member in BackendType if member in available]
        self._backend_type = BackendType.HALFBLOCKS
        self.set(backend_type)
        self._image_id_counter = 0

    @classmethod
    def from_terminal(
        cls,
        backend_type: BackendType | None = None,
        background_color: Color | None = None,
        env: Mapping[str, str] | None = None,
        query: Callable[[], Any] | None = None,
        backends: Iterable[BackendType] | None = None,
    ) -> Picker:
        """Create a picker by querying the controlling terminal.

        Raises:
            ConstructionError: If the terminal's font size could not be determined

        """
        rows, cols, xpixel, ypixel = tiocgwinsz()
        env = snapshot_environment() if env is None else env
        picker = cls(
            font_size(xpixel, ypixel, cols, rows),
            BackendType.HALFBLOCKS,
            background_color,
            in_tmux(env),
            backends,
        )
        if backend_type is None:
            picker.guess(env, query)
        else:
            picker.set(backend_type)
        return picker

    @classmethod
    def from_config(
        cls,
        config: Config,
        env: Mapping[str, str] | None = None,
        query: Callable[[], Any] | None = None,
    ) -> Picker:
        """Create a picker using values from the configuration.

        Raises:
            ConstructionError: If no font size is configured and the terminal's font
                size could not be determined

        """
        env = snapshot_environment() if env is None else env
        backends = [
            backend_type
            for backend_type in BackendType
            if (backend_type is not BackendType.SIXEL or config.sixel_graphics)
            and (backend_type is not BackendType.ITERM2 or config.iterm_graphics)
        ]
        backend_type = (
            None if config.graphics == "auto" else BackendType(config.graphics)
        )
        if backend_type is not None and backend_type not in backends:
            log.warning(
                "Graphics backend %s is disabled, guessing instead", backend_type.value
            )
            backend_type = None
        background_color = config.background_color or None
        is_tmux = in_tmux(env) and config.multiplexer_passthrough
        if query is None:
            query = DeviceAttributesQuery(config.query_timeout, is_tmux)

        if config.font_size:
            picker = cls(
                FontSize(*config.font_size),
                BackendType.HALFBLOCKS,
                background_color,
                is_tmux,
                backends,
            )
            if backend_type is None:
                picker.guess(env, query)
            else:
                picker.set(backend_type)
        else:
            picker = cls.from_terminal(
                backend_type, background_color, env, query, backends
            )
            picker.is_tmux = is_tmux
        log.debug("Created %r", picker)
        return picker

    @property
    def font_size(self) -> FontSize:
        """The pixel size of a terminal cell."""
        return self._font_size

    @property
    def backend_type(self) -> BackendType:
        """The backend used for new image adapters."""
        return self._backend_type

    @property
    def image_id_counter(self) -> int:
        """The last image identifier which was allocated."""
        return self._image_id_counter

    def guess(
        self,
        env: Mapping[str, str] | None = None,
        query: Callable[[], Any] | None = None,
    ) -> BackendType:
        """Guess the best backend for the terminal and use it.

        If no query is given, terminals which may support sixel graphics are sent a
        device attributes query. Guessed backends which are not available fall back
        to halfblocks.
        """
        env = snapshot_environment() if env is None else env
        if query is None:
            query = DeviceAttributesQuery(is_tmux=self.is_tmux)
        backend_type = guess_backend(env, query)
        if backend_type not in self.backends:
            log.debug("Guessed backend %s is not available", backend_type.value)
            backend_type = BackendType.HALFBLOCKS
        self._backend_type = backend_type
        log.debug("Using %s graphics", backend_type.value)
        return backend_type

    def set(self, backend_type: BackendType) -> None:
        """Use a specific backend.

        Raises:
            ValueError: If the backend is not available

        """
        if backend_type not in self.backends:
            raise ValueError(f"Graphics backend {backend_type.value} is not available")
        self._backend_type = backend_type

    def cycle_backends(self) -> BackendType:
        """Switch to the next available backend."""
        self._backend_type = self._backend_type.next(self.backends)
        return self._backend_type

    def _adapter_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self._backend_type.uses_passthrough:
            kwargs["is_tmux"] = self.is_tmux
        if self._backend_type.uses_image_id:
            self._image_id_counter += 1
            kwargs["image_id"] = self._image_id_counter
        return kwargs

    def new_static_fit(
        self, image: PilImage, area: Rect, resize: Resize
    ) -> FixedProtocol:
        """Create an image which is encoded once to fit in an area.

        Raises:
            EncodeError: If the image could not be encoded

        """
        fixed = get_protocol(self._backend_type).fixed
        assert fixed is not None
        source = ImageSource(image, self._font_size)
        return fixed.from_source(  # type: ignore [attr-defined]
            source,
            self._font_size,
            resize,
            self.background_color,
            area,
            **self._adapter_kwargs(),
        )

    def new_state(self, image: PilImage) -> StatefulProtocol:
        """Create an image which is re-encoded when its display area changes."""
        stateful = get_protocol(self._backend_type).stateful
        assert stateful is not None
        source = ImageSource(image, self._font_size)
        return stateful(source, self._font_size, **self._adapter_kwargs())

    def __repr__(self) -> str:
        """Return a string representation of the picker."""
        return (
            f"<{self.__class__.__name__} backend={self._backend_type.value} "
            f"font_size={tuple(self._font_size)} is_tmux={self.is_tmux}>"
        )

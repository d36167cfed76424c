"""Contains the registry of available terminal graphics protocols."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from termpix.enums import BackendType

if TYPE_CHECKING:
    from collections.abc import Callable

    from termpix.protocol.base import FixedProtocol, StatefulProtocol


class Protocol(NamedTuple):
    """Hold the adapter classes which display images for a backend."""

    fixed: type[FixedProtocol] | None = None
    stateful: type[StatefulProtocol] | None = None


protocols: dict[BackendType, Protocol] = {}


def register(backend_type: BackendType) -> Callable:
    """Add an adapter class to the protocol registry.

    Args:
        backend_type: The backend the adapter implements

    """

    def decorator(cls: type) -> type:
        from termpix.protocol.base import StatefulProtocol

        protocol = protocols.get(backend_type, Protocol())
        if issubclass(cls, StatefulProtocol):
            protocol = protocol._replace(stateful=cls)
        else:
            protocol = protocol._replace(fixed=cls)
        protocols[backend_type] = protocol
        return cls

    return decorator


def registered_backends() -> list[BackendType]:
    """List the backends with both adapters registered, in declaration order."""
    # Ensure all protocols are imported
    from termpix import protocol  # noqa: F401

    return [
        backend_type
        for backend_type in BackendType
        if (protocol := protocols.get(backend_type))
        and protocol.fixed is not None
        and protocol.stateful is not None
    ]


def get_protocol(backend_type: BackendType) -> Protocol:
    """Return the adapter classes for a backend.

    Raises:
        KeyError: If no adapters are registered for the backend

    """
    from termpix import protocol  # noqa: F401

    return protocols[backend_type]

"""Define the exceptions raised by termpix."""


class ConstructionError(ValueError):
    """Raised when a picker cannot be created from the terminal's metrics."""


class EncodeError(Exception):
    """Raised when an image cannot be encoded for a terminal graphics protocol."""

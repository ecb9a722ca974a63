class ShapeMismatch(ValueError):
    """Raised when a raw output tensor does not match the configured grid layout."""


class ConfigInvalid(ValueError):
    """Raised when a detector configuration cannot be used."""

"""Contains exceptions raised by installation and subscription stores."""

from pathlib import Path


class StoreError(Exception):
    """Base class for errors raised by a store."""

    pass


class NotFoundError(StoreError):
    """Raised when a requested installation or subscription does not exist."""

    pass


class StoreFormatError(StoreError):
    """Raised when a store file cannot be parsed into installations and subscriptions."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initializes the exception with the offending file and the reason it was rejected."""
        super().__init__(f"Invalid store file '{path}': {reason}")
        self.path = path
        self.reason = reason

"""Exception types raised by the import/export pipeline."""

from __future__ import annotations


class InterchangeError(Exception):
    """Base class for import/export failures."""


class ValidationError(InterchangeError):
    """Caller input is structurally invalid (empty selection, missing field)."""


class FormatError(InterchangeError):
    """A parsed file does not have the expected shape."""


class StoreError(InterchangeError):
    """A data store call failed."""

    def __init__(self, message: str, collection: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.collection = collection

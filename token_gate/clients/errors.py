"""Exceptions raised by token table backends."""


class StoreError(Exception):
    """Base class for token store failures."""


class StoreUnavailableError(StoreError):
    """Raised when the store cannot be reached or does not answer in time."""


class StoreConflictError(StoreError):
    """Raised when a conditional write finds the record no longer present."""


__all__ = ["StoreConflictError", "StoreError", "StoreUnavailableError"]

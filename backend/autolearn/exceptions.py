"""Exceptions raised by autolearn."""


class AutolearnError(Exception):
    """Base class for autolearn errors."""


class StoreWriteError(AutolearnError):
    """A learned record could not be persisted."""


class BackendUnavailableError(AutolearnError):
    """The selected classification backend cannot be used."""

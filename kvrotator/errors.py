"""Exception types raised outside the rotator boundary."""

from __future__ import annotations


class RotatorError(Exception):
    """Base class for fatal kvrotator errors."""


class ConfigurationError(RotatorError):
    """The resource configuration file could not be loaded or validated."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class OperationError(RotatorError):
    """An operation precondition failed and the whole run must abort."""

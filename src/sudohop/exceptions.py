"""Exceptions raised by sudohop."""


class SudoHopError(Exception):
    """Base class for sudohop errors."""


class InvalidUserError(SudoHopError, ValueError):
    """Raised when the target user is empty or whitespace only."""

    def __init__(self, user: str):
        super().__init__(f"Invalid target user: {user!r}")
        self.user = user


class UnresolvedPathError(SudoHopError):
    """Raised when no file name was supplied."""

    def __init__(self, message: str = "No file name to elevate"):
        super().__init__(message)


class DescriptorParseError(SudoHopError, ValueError):
    """Raised when a path cannot be decomposed or a descriptor serialized."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path

# dhanji/core/errors.py


class DhanjiError(Exception):
    """Base class for errors raised by the dhanji package."""


class AuthenticationError(DhanjiError):
    """No signed-in user, or the session has expired."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class InvalidArgumentError(DhanjiError, ValueError):
    """A calculation was called outside its preconditions."""


class UnsupportedOperationError(DhanjiError, NotImplementedError):
    """The operation exists in the interface but is not supported for this entity."""

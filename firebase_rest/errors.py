"""Exceptions raised by the Firebase REST clients."""

from typing import Any


class FirebaseException(Exception):
    """
    Base class for every exception raised by this package.
    """


class InvalidArgumentException(FirebaseException, ValueError):
    """
    Local validation failure. Always raised before any request is sent.
    """


class OutOfRangeException(FirebaseException, LookupError):
    """
    Navigation outside of the tree, e.g. asking the root for its parent.
    """


class DatabaseException(FirebaseException):
    """
    Failure while talking to the Realtime Database.

    The underlying transport exception, when there is one, is chained as
    `__cause__`.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
        uri: str | None = None,
    ):
        """
        Inits the instance of this class.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.uri = uri

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.uri:
            parts.append(f"uri={self.uri}")
        return " ".join(parts)


class PermissionDenied(DatabaseException):
    """
    The database rejected the request's credentials (401/403).
    """

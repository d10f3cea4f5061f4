"""Python client for the Firebase Realtime Database and Auth REST APIs."""

from .errors import (
    DatabaseException,
    FirebaseException,
    InvalidArgumentException,
    OutOfRangeException,
    PermissionDenied,
)

__all__ = (
    "DatabaseException",
    "FirebaseException",
    "InvalidArgumentException",
    "OutOfRangeException",
    "PermissionDenied",
)

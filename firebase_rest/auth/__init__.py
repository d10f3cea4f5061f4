"""Firebase Auth REST API client."""

from .client import ApiClient
from .errors import (
    AuthException,
    CredentialsMismatch,
    EmailExists,
    EmailNotFound,
    InvalidCustomToken,
    InvalidPassword,
    OperationNotAllowed,
    TooManyAttempts,
    UserDisabled,
    UserNotFound,
    WeakPassword,
)
from .models import CreateUserRequest, UpdateUserRequest, UserRecord

__all__ = (
    "ApiClient",
    "AuthException",
    "CreateUserRequest",
    "CredentialsMismatch",
    "EmailExists",
    "EmailNotFound",
    "InvalidCustomToken",
    "InvalidPassword",
    "OperationNotAllowed",
    "TooManyAttempts",
    "UpdateUserRequest",
    "UserDisabled",
    "UserNotFound",
    "UserRecord",
    "WeakPassword",
)

"""Firebase Auth REST API errors."""

from enum import Enum

import httpx
import orjson

from firebase_rest.errors import FirebaseException


class AuthException(FirebaseException):
    """
    Exception for Firebase Auth REST API errors. Error codes without a
    dedicated subclass are raised as this class, keeping the raw message.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ):
        """
        Inits the instance of this class.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.url = url

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code}, url={self.url})"


class CredentialsMismatch(AuthException):
    """The custom token belongs to a different Firebase project."""


class InvalidCustomToken(AuthException):
    """The custom token is malformed, expired or not signed properly."""


class EmailNotFound(AuthException):
    """There is no user record for this email."""


class EmailExists(AuthException):
    """The email is already used by another account."""


class InvalidPassword(AuthException):
    """The password is wrong or the user has no password."""


class WeakPassword(AuthException):
    """The password must be 6 characters long or more."""


class UserDisabled(AuthException):
    """The account has been disabled by an administrator."""


class UserNotFound(AuthException):
    """There is no user record for this identifier."""


class OperationNotAllowed(AuthException):
    """The sign-in provider is disabled for this project."""


class TooManyAttempts(AuthException):
    """Requests are blocked because of unusual activity."""


class FirebaseAuthErrorCodes(str, Enum):
    """
    Enumerator for Firebase Auth REST API error codes.
    """

    CREDENTIALS_MISMATCH = "CREDENTIALS_MISMATCH"
    INVALID_CUSTOM_TOKEN = "INVALID_CUSTOM_TOKEN"
    EMAIL_NOT_FOUND = "EMAIL_NOT_FOUND"
    EMAIL_EXISTS = "EMAIL_EXISTS"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    MISSING_PASSWORD = "MISSING_PASSWORD"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    USER_DISABLED = "USER_DISABLED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    OPERATION_NOT_ALLOWED = "OPERATION_NOT_ALLOWED"
    TOO_MANY_ATTEMPTS_TRY_LATER = "TOO_MANY_ATTEMPTS_TRY_LATER"


def error_code(message: str) -> str:
    """
    Error code part of a message like "WEAK_PASSWORD : Password should be
    at least 6 characters".
    """
    return message.split(":", 1)[0].strip().split(" ", 1)[0]


def get_error(response: httpx.Response, url: str) -> AuthException:
    """
    Maps an error response to the matching exception.

    Error bodies look like `{"error": {"code": 400, "message": "CODE"}}`.
    """
    try:
        body = orjson.loads(response.content)
        message = str(body["error"]["message"])
    except (orjson.JSONDecodeError, KeyError, TypeError):
        message = response.text or response.reason_phrase

    kwargs = {
        "message": message,
        "status_code": response.status_code,
        "url": url,
    }
    match error_code(message):
        case FirebaseAuthErrorCodes.CREDENTIALS_MISMATCH:
            return CredentialsMismatch(**kwargs)
        case FirebaseAuthErrorCodes.INVALID_CUSTOM_TOKEN:
            return InvalidCustomToken(**kwargs)
        case FirebaseAuthErrorCodes.EMAIL_NOT_FOUND:
            return EmailNotFound(**kwargs)
        case FirebaseAuthErrorCodes.EMAIL_EXISTS:
            return EmailExists(**kwargs)
        case (
            FirebaseAuthErrorCodes.INVALID_PASSWORD
            | FirebaseAuthErrorCodes.MISSING_PASSWORD
        ):
            return InvalidPassword(**kwargs)
        case FirebaseAuthErrorCodes.WEAK_PASSWORD:
            return WeakPassword(**kwargs)
        case FirebaseAuthErrorCodes.USER_DISABLED:
            return UserDisabled(**kwargs)
        case FirebaseAuthErrorCodes.USER_NOT_FOUND:
            return UserNotFound(**kwargs)
        case FirebaseAuthErrorCodes.OPERATION_NOT_ALLOWED:
            return OperationNotAllowed(**kwargs)
        case _ if FirebaseAuthErrorCodes.TOO_MANY_ATTEMPTS_TRY_LATER in message:
            # the message for this error is not always prefixed by the code
            return TooManyAttempts(**kwargs)
        case _:
            return AuthException(**kwargs)

"""
Python wrapper client for the Firebase Auth REST API.

The client is able to switch from requests to Firebase's servers to an
eventual local Firebase emulator, depending on whether the
FIREBASE_AUTH_EMULATOR_HOST variable is set.
"""

import time
from collections.abc import Iterator, Mapping
from typing import Any

import httpx
import orjson
import structlog

from firebase_rest import settings

from .errors import AuthException, get_error
from .models import (
    AccountInfoResponse,
    AccountResponse,
    CreateUserRequest,
    DownloadAccountResponse,
    IdTokenResponse,
    OobCodeResponse,
    UpdateUserRequest,
    UserRecord,
    normalize_request,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

DEFAULT_BATCH_SIZE = 1000
LOCALE_HEADER = "X-Firebase-Locale"


def check_response(response: httpx.Response, url: str) -> dict:
    """
    Examines a response to raise an error or return its body.

    Raises:
        AuthException: Typed subclass for known error codes, the base
            class otherwise.

    Returns:
        dict: The response as JSON.
    """
    if response.is_error:
        error = get_error(response, url)
        logger.warning(
            "auth request failed",
            url=url,
            status_code=response.status_code,
            error=error.message,
        )
        raise error
    try:
        return orjson.loads(response.content) if response.content else {}
    except orjson.JSONDecodeError as exc:
        raise AuthException(
            f"Malformed JSON body: {exc}",
            status_code=response.status_code,
            url=url,
        ) from exc


class ApiClient:
    """
    Simple client to wrap the Firebase Auth REST API calls. Every action
    is a JSON `POST` to `<api_url>/<action>`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        http_client: httpx.Client | None = None,
        base_url: str | None = None,
        timeout: float = settings.DEFAULT_TIMEOUT,
    ):
        """
        Creates an instance of this class.

        Args:
            api_key (str | None, optional): Web API key of the project.
                Defaults to `settings.auth.api_key`.
            http_client (httpx.Client | None, optional): Client used to
                send requests. A new one is created when omitted.
            base_url (str | None, optional): Defaults to
                `settings.auth.api_url`.
            timeout (float, optional): Request timeout in seconds, used
                only when the client is created here.
        """
        self.api_key = api_key or settings.auth.api_key
        self.base_url = (base_url or settings.auth.api_url).rstrip("/")
        self.http_client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    def close(self) -> None:
        if self._owns_client:
            self.http_client.close()

    def request(
        self,
        action: str,
        data: Any = None,
        headers: dict[str, str] | None = None,
    ) -> dict:
        """
        Sends an action request.

        Args:
            action (str): e.g. "getAccountInfo".
            data (Any, optional): A request variant or a mapping.
            headers (dict[str, str] | None, optional): Extra headers,
                left out of the request entirely when None.

        Raises:
            AuthException: If the request fails.

        Returns:
            dict: The response body.
        """
        url = f"{self.base_url}/{action}"
        options: dict[str, Any] = {"json": normalize_request(data)}
        if headers:
            options["headers"] = headers
        if self.api_key:
            options["params"] = {"key": self.api_key}

        logger.debug("auth request", action=action)
        try:
            response = self.http_client.post(url, **options)
        except httpx.HTTPError as exc:
            raise AuthException(f"{action} request failed: {exc}", url=url) from exc
        return check_response(response, url)

    def exchange_custom_token_for_id_and_refresh_token(
        self, token: str
    ) -> IdTokenResponse:
        """
        Wraps https://firebase.google.com/docs/reference/rest/auth#section-verify-custom-token

        Raises:
            InvalidCustomToken: If the token is invalid.
            CredentialsMismatch: If the token belongs to another project.
        """
        return IdTokenResponse(
            **self.request(
                "verifyCustomToken",
                {"token": str(token), "returnSecureToken": True},
            )
        )

    def create_user(
        self, request: CreateUserRequest | Mapping[str, Any] | None = None
    ) -> AccountResponse:
        return AccountResponse(**self.request("signupNewUser", request))

    def update_user(
        self, request: UpdateUserRequest | Mapping[str, Any]
    ) -> AccountResponse:
        return AccountResponse(**self.request("setAccountInfo", request))

    def get_user_by_email(self, email: str) -> AccountInfoResponse:
        """
        Raises:
            EmailNotFound: If there is no user with this email.
        """
        return AccountInfoResponse(
            **self.request("getAccountInfo", {"email": [email]})
        )

    def get_user_by_phone_number(self, phone_number: str) -> AccountInfoResponse:
        return AccountInfoResponse(
            **self.request("getAccountInfo", {"phoneNumber": [phone_number]})
        )

    def get_account_info(self, uid: str) -> AccountInfoResponse:
        return AccountInfoResponse(
            **self.request("getAccountInfo", {"localId": [uid]})
        )

    def download_account(
        self,
        batch_size: int | None = None,
        next_page_token: str | None = None,
    ) -> DownloadAccountResponse:
        """
        One page of all users of the project.

        Args:
            batch_size (int | None, optional): Page size. Defaults to
                1000.
            next_page_token (str | None, optional): Token of the page to
                fetch, from the previous response.
        """
        data: dict[str, Any] = {"maxResults": batch_size or DEFAULT_BATCH_SIZE}
        if next_page_token:
            data["nextPageToken"] = next_page_token
        return DownloadAccountResponse(**self.request("downloadAccount", data))

    def iter_users(self, batch_size: int | None = None) -> Iterator[UserRecord]:
        """
        Yields every user, fetching pages as needed.
        """
        page_token = None
        while True:
            page = self.download_account(batch_size, page_token)
            yield from page.users
            page_token = page.next_page_token
            if not page_token:
                return

    def delete_user(self, uid: str) -> None:
        self.request("deleteAccount", {"localId": uid})

    def verify_password(self, email: str, password: str) -> IdTokenResponse:
        """
        Raises:
            EmailNotFound: If there is no user with this email.
            InvalidPassword: If the password is wrong.
        """
        return IdTokenResponse(
            **self.request(
                "verifyPassword",
                {
                    "email": email,
                    "password": password,
                    "returnSecureToken": True,
                },
            )
        )

    def send_email_verification(
        self,
        id_token: str,
        continue_url: str | None = None,
        locale: str | None = None,
    ) -> OobCodeResponse:
        data = {"requestType": "VERIFY_EMAIL", "idToken": id_token}
        if continue_url:
            data["continueUrl"] = continue_url
        headers = {LOCALE_HEADER: locale} if locale else None
        return OobCodeResponse(
            **self.request("getOobConfirmationCode", data, headers)
        )

    def send_password_reset_email(
        self,
        email: str,
        continue_url: str | None = None,
        locale: str | None = None,
    ) -> OobCodeResponse:
        data = {"requestType": "PASSWORD_RESET", "email": email}
        if continue_url:
            data["continueUrl"] = continue_url
        headers = {LOCALE_HEADER: locale} if locale else None
        return OobCodeResponse(
            **self.request("getOobConfirmationCode", data, headers)
        )

    def revoke_refresh_tokens(self, uid: str) -> AccountResponse:
        """
        Invalidates every refresh token issued to the user until now.
        """
        return self.update_user(
            UpdateUserRequest(uid=uid, valid_since=int(time.time()))
        )

    def unlink_provider(
        self, uid: str, providers: list[str]
    ) -> AccountResponse:
        return self.update_user(
            UpdateUserRequest(uid=uid, delete_provider=tuple(providers))
        )

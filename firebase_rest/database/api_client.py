"""
HTTP adapter for the Realtime Database REST API.

The client is able to switch from requests to Firebase's servers to a
local Realtime Database emulator: the emulator is addressed by host and
selects the database through the `ns` query parameter.
"""

from typing import Any

import httpx
import orjson
import structlog

from firebase_rest.errors import (
    DatabaseException,
    InvalidArgumentException,
    PermissionDenied,
)
from firebase_rest.settings import DEFAULT_TIMEOUT

from .serializer import decode

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def get_error(response: httpx.Response, uri: str) -> DatabaseException:
    """
    Builds the exception matching an error response.

    Error bodies look like `{"error": "Permission denied"}`; anything else
    is kept as raw text.
    """
    try:
        body = orjson.loads(response.content) if response.content else None
    except orjson.JSONDecodeError:
        body = response.text
    message = body.get("error") if isinstance(body, dict) else None
    message = str(message or body or response.reason_phrase)

    if response.status_code in (
        httpx.codes.UNAUTHORIZED,
        httpx.codes.FORBIDDEN,
    ):
        return PermissionDenied(
            message, status_code=response.status_code, body=body, uri=uri
        )
    return DatabaseException(
        message, status_code=response.status_code, body=body, uri=uri
    )


class ApiClient:
    """
    Sends JSON requests to a single database and translates every
    transport failure into a `DatabaseException`.
    """

    def __init__(
        self,
        base_url: str,
        http_client: httpx.Client | None = None,
        auth_token: str | None = None,
        params: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Creates an instance of this class.

        Args:
            base_url (str): Database URL, e.g.
                "https://my-project.firebaseio.com".
            http_client (httpx.Client | None, optional): Client used to
                send requests. A new one is created when omitted.
            auth_token (str | None, optional): Sent as the `auth` query
                parameter of every request.
            params (dict[str, str] | None, optional): Extra query
                parameters added to every request, e.g. the emulator's
                `ns`.
            timeout (float, optional): Request timeout in seconds, used
                only when the client is created here.
        """
        if not base_url:
            raise InvalidArgumentException("A database URL is required")
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None
        self.default_params = dict(params or {})
        if auth_token:
            self.default_params["auth"] = auth_token

    def close(self) -> None:
        if self._owns_client:
            self.http_client.close()

    def request(
        self,
        method: str,
        uri: httpx.URL,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Sends a request and checks its status.

        Args:
            method (str): HTTP method.
            uri (httpx.URL): Absolute request URI, without credentials.
            json (Any, optional): Already normalized JSON payload.
            headers (dict[str, str] | None, optional): Extra headers;
                omitted from the request when None.

        Raises:
            DatabaseException: On connection errors, timeouts and non-2xx
                responses.

        Returns:
            httpx.Response: The successful response.
        """
        options: dict[str, Any] = {}
        if json is not None or method in ("PUT", "PATCH", "POST"):
            options["content"] = orjson.dumps(json)
            headers = {**JSON_HEADERS, **(headers or {})}
        if headers:
            options["headers"] = headers

        url = uri.copy_merge_params(self.default_params)
        logger.debug("database request", method=method, uri=str(uri))
        try:
            response = self.http_client.request(method, url, **options)
        except httpx.HTTPError as exc:
            logger.warning(
                "database request failed",
                method=method,
                uri=str(uri),
                error=repr(exc),
            )
            raise DatabaseException(
                f"{method} request failed: {exc}", uri=str(uri)
            ) from exc
        # errors must not embed `url`, it holds the auth token
        if not response.is_success:
            logger.warning(
                "database request failed",
                method=method,
                uri=str(uri),
                status_code=response.status_code,
            )
            raise get_error(response, str(uri))
        return response

    def _decode(self, response: httpx.Response, uri: httpx.URL) -> Any:
        try:
            return decode(response.content)
        except InvalidArgumentException as exc:
            raise DatabaseException(
                str(exc),
                status_code=response.status_code,
                body=response.text,
                uri=str(uri),
            ) from exc

    def get(self, uri: httpx.URL) -> Any:
        return self._decode(self.request("GET", uri), uri)

    def set(self, uri: httpx.URL, value: Any) -> Any:
        return self._decode(self.request("PUT", uri, json=value), uri)

    def update(self, uri: httpx.URL, values: dict[str, Any]) -> Any:
        return self._decode(self.request("PATCH", uri, json=values), uri)

    def push(self, uri: httpx.URL, value: Any) -> str:
        """
        Appends `value` under a server generated key.

        Returns:
            str: The new key.
        """
        body = self._decode(self.request("POST", uri, json=value), uri)
        if not isinstance(body, dict) or not isinstance(body.get("name"), str):
            raise DatabaseException(
                "Push response does not contain a key", body=body, uri=str(uri)
            )
        return body["name"]

    def remove(self, uri: httpx.URL) -> None:
        self.request("DELETE", uri)

"""Client factories"""

import httpx

import firebase_rest.settings as settings
from firebase_rest.auth import ApiClient as AuthApiClient
from firebase_rest.database import ApiClient as DatabaseApiClient
from firebase_rest.database import Database
from firebase_rest.errors import InvalidArgumentException

from .loggers import get_firebase_logger

logger = get_firebase_logger()


def initialize_database(
    url: str | None = None,
    auth_token: str | None = None,
    http_client: httpx.Client | None = None,
    emulator_host: str | None = None,
) -> Database:
    """
    Initialize a Realtime Database client. Arguments left out are read
    from `settings.db`.

    When an emulator host is configured, requests go to the emulator and
    the database is selected with the `ns` parameter, taken from the
    first label of the database URL's host.

    Raises:
        InvalidArgumentException: If no database URL is configured.
    """
    url = url or settings.db.url
    if not url:
        raise InvalidArgumentException(
            "No database URL given and FIREBASE_DATABASE_URL is not set"
        )
    if auth_token is None and settings.db.auth_token is not None:
        auth_token = settings.db.auth_token.get_secret_value()
    emulator_host = emulator_host or settings.db.emulator_host

    params = {}
    base_url = url
    if emulator_host:
        namespace = httpx.URL(url).host.split(".")[0]
        base_url = f"http://{emulator_host}"
        params["ns"] = namespace
        logger.info(
            "Using Realtime Database emulator",
            host=emulator_host,
            namespace=namespace,
        )

    return Database(
        DatabaseApiClient(
            base_url,
            http_client=http_client,
            auth_token=auth_token,
            params=params,
            timeout=settings.db.timeout,
        )
    )


def initialize_auth_api_client(
    api_key: str | None = None,
    http_client: httpx.Client | None = None,
) -> AuthApiClient:
    """
    Initialize Firebase Auth REST API client.
    """
    return AuthApiClient(
        api_key=api_key or settings.auth.api_key,
        http_client=http_client,
        base_url=settings.auth.api_url,
        timeout=settings.auth.timeout,
    )

"""
Entry point to a Realtime Database.
"""

import httpx

from firebase_rest.errors import InvalidArgumentException

from .api_client import ApiClient
from .path import Path
from .reference import Reference


class Database:
    """
    Gives out references to the nodes of one database. All references
    share the database's `ApiClient`.
    """

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    def get_reference(self, path: str = "") -> Reference:
        """
        Args:
            path (str, optional): Slash-delimited path from the root.
                Defaults to the root.

        Raises:
            InvalidArgumentException: If `path` is malformed.
        """
        return Reference(Path.parse(path), self.api_client)

    def get_reference_from_url(self, url: str | httpx.URL) -> Reference:
        """
        Reference for an absolute URL of this database, e.g.
        "https://my-project.firebaseio.com/users/alice".

        Raises:
            InvalidArgumentException: If the URL points to another
                database.
        """
        url = httpx.URL(str(url))
        base = httpx.URL(self.api_client.base_url)
        if (url.scheme, url.host, url.port) != (base.scheme, base.host, base.port):
            raise InvalidArgumentException(
                f"{url} does not belong to the database at {base}"
            )
        path = url.path
        base_path = base.path.rstrip("/")
        if base_path and path.startswith(base_path):
            path = path[len(base_path):]
        if path.endswith(".json"):
            path = path[: -len(".json")]
        return self.get_reference(path)

    def close(self) -> None:
        self.api_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

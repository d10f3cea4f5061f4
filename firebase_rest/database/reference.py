"""
References to single nodes of the database tree.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx
import structlog
from pydantic import BaseModel

from firebase_rest.errors import InvalidArgumentException, OutOfRangeException

from .path import Path
from .query import Query
from .serializer import normalize

if TYPE_CHECKING:
    from .api_client import ApiClient

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class Reference(Query):
    """
    Handle to the node at `path`.

    A reference is an unfiltered query of its own node, extended with
    navigation and writes. Navigation returns new references, the
    receiver never changes.
    """

    def __init__(self, path: Path, api_client: ApiClient):
        super().__init__(self, api_client)
        self._path = path

    # navigation

    def get_path(self) -> Path:
        return self._path

    def get_key(self) -> str | None:
        return self._path.key

    def get_uri(self) -> httpx.URL:
        return httpx.URL(
            f"{self._api_client.base_url}/{self._path.uri_path()}.json"
        )

    def get_child(self, path: str) -> Reference:
        """
        Args:
            path (str): Path relative to this node, may contain slashes.

        Raises:
            InvalidArgumentException: If `path` is malformed.
        """
        return Reference(self._path.join(path), self._api_client)

    def get_parent(self) -> Reference:
        """
        Raises:
            OutOfRangeException: If this is the root reference.
        """
        parent = self._path.parent
        if parent is None:
            raise OutOfRangeException("The root reference has no parent")
        return Reference(parent, self._api_client)

    def get_root(self) -> Reference:
        return Reference(Path(), self._api_client)

    def get_child_keys(self) -> list[str]:
        """
        Keys of the direct children, fetched with a shallow read.

        Raises:
            OutOfRangeException: If the node holds a scalar value.
        """
        value = self.shallow().get_value()
        if value is None:
            return []
        if isinstance(value, dict):
            return list(value.keys())
        if isinstance(value, list):
            return [str(i) for i, item in enumerate(value) if item is not None]
        raise OutOfRangeException(
            f"{self._path} holds a value of type {type(value).__name__},"
            " which has no children"
        )

    # writes

    def set(self, value: Any) -> None:
        """
        Replaces the node's value. Setting None removes the node.

        Raises:
            InvalidArgumentException: If the value can't be serialized;
                nothing is sent in that case.
            DatabaseException: If the request fails.
        """
        if value is None:
            self.remove()
            return
        payload = normalize(value, self._path)
        logger.debug("set", path=str(self._path))
        self._api_client.set(self.get_uri(), payload)

    def update(self, values: Mapping[str, Any] | BaseModel) -> None:
        """
        Merges `values` into the node: keys with a value overwrite,
        keys with None are removed, other keys stay as they are. Keys may
        be relative paths ("a/b") to update deeper nodes at once.

        Raises:
            InvalidArgumentException: If `values` is not a mapping, a key
                is not a valid path, or a value can't be serialized.
            DatabaseException: If the request fails.
        """
        if isinstance(values, BaseModel):
            values = values.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not isinstance(values, Mapping):
            raise InvalidArgumentException(
                f"Update payloads must be mappings, got {type(values).__name__}"
            )
        payload = {}
        for key, item in values.items():
            if not isinstance(key, str):
                raise InvalidArgumentException(
                    f"Update keys must be strings, got {key!r}"
                )
            child = Path.parse(key)
            if child.is_root:
                raise InvalidArgumentException(
                    f"Update key {key!r} does not name a child"
                )
            relative = "/".join(child.segments)
            if relative in payload:
                raise InvalidArgumentException(
                    f"Update key {key!r} names the same child as another key"
                )
            payload[relative] = normalize(item, self._path.join(child))
        if not payload:
            return
        logger.debug("update", path=str(self._path), keys=list(payload))
        self._api_client.update(self.get_uri(), payload)

    def push(self, value: Any = None) -> Reference:
        """
        Creates a child with a unique, chronologically ordered key.

        Args:
            value (Any, optional): Value of the new child. When omitted
                only the key is generated, no value is stored.

        Returns:
            Reference: Reference to the new child.
        """
        payload = normalize(value, self._path) if value is not None else {}
        key = self._api_client.push(self.get_uri(), payload)
        logger.debug("push", path=str(self._path), key=key)
        return self.get_child(key)

    def remove(self) -> None:
        logger.debug("remove", path=str(self._path))
        self._api_client.remove(self.get_uri())

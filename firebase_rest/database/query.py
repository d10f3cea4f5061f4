"""
Filtered reads of a node's children.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import httpx

from .filters import (
    EndAt,
    EndBefore,
    EqualTo,
    Filter,
    FilterKind,
    LimitToFirst,
    LimitToLast,
    OrderByChild,
    OrderByKey,
    OrderByValue,
    Shallow,
    StartAfter,
    StartAt,
)
from .serializer import JSONScalar
from .snapshot import Snapshot

if TYPE_CHECKING:
    from .api_client import ApiClient
    from .reference import Reference


class Query:
    """
    A reference plus a set of filters, at most one per `FilterKind`.

    Queries are immutable: every `order_by_*`, `start_at`, `limit_to_*`,
    ... call returns a new query and adding a filter of a kind that is
    already present replaces it.
    """

    def __init__(
        self,
        reference: Reference,
        api_client: ApiClient,
        filters: Mapping[FilterKind, Filter] | None = None,
    ):
        self._reference = reference
        self._api_client = api_client
        self._filters = MappingProxyType(dict(filters or {}))

    @property
    def filters(self) -> Mapping[FilterKind, Filter]:
        return self._filters

    def get_reference(self) -> Reference:
        return self._reference

    def with_filter(self, filter_: Filter) -> Query:
        filters = dict(self._filters)
        filters[filter_.kind] = filter_
        return Query(self._reference, self._api_client, filters)

    def order_by_child(self, path: str) -> Query:
        return self.with_filter(OrderByChild(path))

    def order_by_key(self) -> Query:
        return self.with_filter(OrderByKey())

    def order_by_value(self) -> Query:
        return self.with_filter(OrderByValue())

    def start_at(self, value: JSONScalar) -> Query:
        return self.with_filter(StartAt(value))

    def start_after(self, value: JSONScalar) -> Query:
        return self.with_filter(StartAfter(value))

    def end_at(self, value: JSONScalar) -> Query:
        return self.with_filter(EndAt(value))

    def end_before(self, value: JSONScalar) -> Query:
        return self.with_filter(EndBefore(value))

    def equal_to(self, value: JSONScalar) -> Query:
        return self.with_filter(EqualTo(value))

    def limit_to_first(self, limit: int) -> Query:
        return self.with_filter(LimitToFirst(limit))

    def limit_to_last(self, limit: int) -> Query:
        return self.with_filter(LimitToLast(limit))

    def shallow(self) -> Query:
        return self.with_filter(Shallow())

    def build(self) -> httpx.URL:
        """
        Final request URI: the reference's URI with each filter's
        parameter applied in `FilterKind` order, so equal filter sets
        always produce identical URIs.
        """
        uri = self._reference.get_uri()
        for kind in FilterKind:
            if kind in self._filters:
                uri = self._filters[kind].modify_uri(uri)
        return uri

    def get_uri(self) -> httpx.URL:
        return self.build()

    def get(self) -> Snapshot:
        """
        Reads the filtered node.

        Raises:
            DatabaseException: If the request fails.

        Returns:
            Snapshot: The result, ordered as requested.
        """
        uri = self.build()
        value = self._api_client.get(uri)
        order_by = self._filters.get(FilterKind.ORDER_BY)
        if order_by is not None:
            value = order_by.modify_value(value)
        return Snapshot(self._reference, value)

    def get_snapshot(self) -> Snapshot:
        return self.get()

    def get_value(self) -> Any:
        return self.get().get_value()

    def __str__(self) -> str:
        return str(self.build())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.build())!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return type(self) is type(other) and self.build() == other.build()

    def __hash__(self) -> int:
        return hash(str(self.build()))

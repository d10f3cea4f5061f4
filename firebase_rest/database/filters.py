"""
Query filters.

Every filter validates its argument when it is created and knows how to
add its query parameter to a request URI. A query holds at most one
filter per `FilterKind`; the kinds are declared in the order their
parameters are written to the URI.
"""

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

import httpx

from firebase_rest.errors import InvalidArgumentException

from .path import Path
from .serializer import JSONScalar, encode_scalar


class FilterKind(str, Enum):
    """
    Query axes, valued with their wire parameter names.
    """

    ORDER_BY = "orderBy"
    START_AT = "startAt"
    START_AFTER = "startAfter"
    END_AT = "endAt"
    END_BEFORE = "endBefore"
    EQUAL_TO = "equalTo"
    LIMIT_TO_FIRST = "limitToFirst"
    LIMIT_TO_LAST = "limitToLast"
    SHALLOW = "shallow"


def _check_scalar(value: Any, filter_name: str, allow_null: bool) -> None:
    if value is None:
        if allow_null:
            return
        raise InvalidArgumentException(f"{filter_name} does not accept null")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidArgumentException(
            f"{filter_name} does not accept non-finite numbers"
        )
    if not isinstance(value, (str, bool, int, float)):
        raise InvalidArgumentException(
            f"{filter_name} accepts strings, numbers or booleans,"
            f" got {type(value).__name__}"
        )


def _check_limit(limit: Any, filter_name: str) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentException(
            f"{filter_name} requires an integer, got {type(limit).__name__}"
        )
    if limit <= 0:
        raise InvalidArgumentException(
            f"{filter_name} requires a positive integer, got {limit}"
        )


class Filter(ABC):
    """
    Base class of all filters.
    """

    kind: ClassVar[FilterKind]

    @abstractmethod
    def query_value(self) -> str:
        """Raw (unescaped) value of the query parameter."""

    def modify_uri(self, uri: httpx.URL) -> httpx.URL:
        """
        Returns `uri` with this filter's parameter set, replacing any
        previous value of the same parameter.
        """
        return uri.copy_set_param(self.kind.value, self.query_value())

    def modify_value(self, value: Any) -> Any:
        """
        Post-processes a decoded response. Only ordering filters reorder
        results; every other filter returns the value untouched.
        """
        return value


@dataclass(frozen=True)
class _ScalarFilter(Filter):
    value: JSONScalar
    allow_null: ClassVar[bool] = False

    def __post_init__(self):
        _check_scalar(self.value, type(self).__name__, self.allow_null)

    def query_value(self) -> str:
        return encode_scalar(self.value)


@dataclass(frozen=True)
class StartAt(_ScalarFilter):
    kind = FilterKind.START_AT


@dataclass(frozen=True)
class StartAfter(_ScalarFilter):
    kind = FilterKind.START_AFTER


@dataclass(frozen=True)
class EndAt(_ScalarFilter):
    kind = FilterKind.END_AT


@dataclass(frozen=True)
class EndBefore(_ScalarFilter):
    kind = FilterKind.END_BEFORE


@dataclass(frozen=True)
class EqualTo(_ScalarFilter):
    """
    Matches children whose ordered value equals `value`. `None` selects
    children that lack the ordered value.
    """

    kind = FilterKind.EQUAL_TO
    allow_null = True


@dataclass(frozen=True)
class LimitToFirst(Filter):
    limit: int
    kind: ClassVar[FilterKind] = FilterKind.LIMIT_TO_FIRST

    def __post_init__(self):
        _check_limit(self.limit, "LimitToFirst")

    def query_value(self) -> str:
        return str(self.limit)


@dataclass(frozen=True)
class LimitToLast(Filter):
    limit: int
    kind: ClassVar[FilterKind] = FilterKind.LIMIT_TO_LAST

    def __post_init__(self):
        _check_limit(self.limit, "LimitToLast")

    def query_value(self) -> str:
        return str(self.limit)


@dataclass(frozen=True)
class Shallow(Filter):
    """
    Truncates every child to `true`, so only the keys are transferred.
    """

    kind: ClassVar[FilterKind] = FilterKind.SHALLOW

    def query_value(self) -> str:
        return "true"


# Ordering


INT_KEY = re.compile(r"^-?(0|[1-9]\d{0,9})$")
INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1


def key_sort_key(key: str) -> tuple:
    """
    Keys that look like 32-bit integers come first, in numeric order,
    followed by all other keys in lexicographic order.
    """
    if INT_KEY.match(key) and INT32_MIN <= int(key) <= INT32_MAX:
        return (0, int(key), "")
    return (1, 0, key)


def value_sort_key(value: Any) -> tuple:
    """
    null < false < true < numbers < strings < objects.
    """
    if value is None:
        return (0, 0)
    if value is False:
        return (1, 0)
    if value is True:
        return (2, 0)
    if isinstance(value, (int, float)):
        return (3, value)
    if isinstance(value, str):
        return (4, value)
    return (5, 0)


class _OrderBy(Filter):
    kind: ClassVar[FilterKind] = FilterKind.ORDER_BY

    def sort_key(self, key: str, child: Any) -> tuple:
        return key_sort_key(key)

    def modify_value(self, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return dict(
            sorted(
                value.items(),
                key=lambda item: self.sort_key(item[0], item[1]),
            )
        )


@dataclass(frozen=True)
class OrderByKey(_OrderBy):
    def query_value(self) -> str:
        return encode_scalar("$key")


@dataclass(frozen=True)
class OrderByValue(_OrderBy):
    def query_value(self) -> str:
        return encode_scalar("$value")

    def sort_key(self, key: str, child: Any) -> tuple:
        return (value_sort_key(child), key_sort_key(key))


@dataclass(frozen=True)
class OrderByChild(_OrderBy):
    """
    Orders children by the value found at `path` below each child.
    """

    path: str

    def __post_init__(self):
        child_path = Path.parse(self.path)
        if child_path.is_root:
            raise InvalidArgumentException(
                "OrderByChild requires a non-empty child path"
            )
        # keep the canonical form, without leading/trailing slashes
        object.__setattr__(self, "path", "/".join(child_path.segments))

    def query_value(self) -> str:
        return encode_scalar(self.path)

    def sort_key(self, key: str, child: Any) -> tuple:
        nested = child
        for segment in self.path.split("/"):
            nested = nested.get(segment) if isinstance(nested, dict) else None
        return (value_sort_key(nested), key_sort_key(key))

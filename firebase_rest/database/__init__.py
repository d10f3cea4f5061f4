"""Firebase Realtime Database REST client."""

from .api_client import ApiClient
from .database import Database
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
from .path import Path
from .query import Query
from .reference import Reference
from .snapshot import Snapshot

__all__ = (
    "ApiClient",
    "Database",
    "EndAt",
    "EndBefore",
    "EqualTo",
    "Filter",
    "FilterKind",
    "LimitToFirst",
    "LimitToLast",
    "OrderByChild",
    "OrderByKey",
    "OrderByValue",
    "Path",
    "Query",
    "Reference",
    "Shallow",
    "Snapshot",
    "StartAfter",
    "StartAt",
)

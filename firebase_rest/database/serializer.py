"""
Conversion between application values and the JSON wire format.

`None` is the delete marker of the protocol: writing it to a node removes
the node, so it never comes back as a stored value.
"""

import math
from collections.abc import Mapping
from typing import Any

import orjson
from pydantic import BaseModel

from firebase_rest.errors import InvalidArgumentException

from .path import Path, validate_segment

JSONScalar = str | int | float | bool | None

# keys the server interprets itself, e.g. {".sv": "timestamp"}
RESERVED_KEYS = frozenset({".priority", ".value", ".sv"})


def _sub(location: str, key: Any) -> str:
    return f"{location.rstrip('/')}/{key}"


def _check_key(key: Any, location: str) -> str:
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise InvalidArgumentException(
            f"Mapping keys must be str or int, got {key!r} at {location}"
        )
    key = str(key)
    if key in RESERVED_KEYS:
        return key
    try:
        return validate_segment(key)
    except InvalidArgumentException as exc:
        raise InvalidArgumentException(f"{exc} at {location}") from exc


def _normalize_mapping(value: Mapping, location: str) -> dict | list:
    keys = list(value.keys())
    names = [_check_key(key, location) for key in keys]
    if len(set(names)) != len(names):
        duplicates = sorted({name for name in names if names.count(name) > 1})
        raise InvalidArgumentException(
            f"Mapping keys {duplicates} collide once converted to strings"
            f" at {location}"
        )
    # contiguous 0-based integer keys become an array
    if keys and all(isinstance(k, int) for k in keys):
        if sorted(keys) == list(range(len(keys))):
            return [
                _normalize(value[i], _sub(location, i))
                for i in range(len(keys))
            ]
    return {
        name: _normalize(value[key], _sub(location, name))
        for key, name in zip(keys, names)
    }


def _normalize(value: Any, location: str) -> Any:
    if value is None or isinstance(value, (str, bool)):
        return value
    if isinstance(value, int):
        if not -(2**63) <= value < 2**64:
            raise InvalidArgumentException(
                f"Integer {value} is out of the 64-bit range at {location}"
            )
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidArgumentException(
                f"Cannot serialize non-finite number {value!r} at {location}"
            )
        return value
    if isinstance(value, BaseModel):
        dumped = value.model_dump(mode="json", by_alias=True, exclude_none=True)
        return _normalize_mapping(dumped, location) if dumped else {}
    if isinstance(value, Mapping):
        return _normalize_mapping(value, location)
    if isinstance(value, (list, tuple)):
        return [
            _normalize(item, _sub(location, i)) for i, item in enumerate(value)
        ]
    raise InvalidArgumentException(
        f"Cannot serialize value of type {type(value).__name__} at {location}"
    )


def normalize(value: Any, path: Path | None = None) -> Any:
    """
    Maps an application value onto plain JSON-compatible Python values.

    Args:
        value (Any): Scalars, mappings, lists/tuples, pydantic models or
            None.
        path (Path | None, optional): Node the value is written to, used
            in error messages only.

    Raises:
        InvalidArgumentException: If the value (or anything nested in it)
            has no JSON representation.

    Returns:
        Any: `None`, a scalar, a `dict` with string keys or a `list`.
    """
    return _normalize(value, str(path) if path is not None else "/")


def encode(value: Any, path: Path | None = None) -> bytes:
    """
    Serializes a value to the JSON request body.
    """
    return orjson.dumps(normalize(value, path))


def encode_scalar(value: JSONScalar) -> str:
    """
    JSON literal of a scalar, as used in query parameters: `"a"`, `1`,
    `true`, `null`.
    """
    return orjson.dumps(value).decode()


def decode(raw: bytes | str) -> Any:
    """
    Parses a JSON response body. An empty object stays an empty `dict`,
    which is not the same as an absent node (`None`).

    Raises:
        InvalidArgumentException: If the body is not valid JSON.
    """
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise InvalidArgumentException(f"Malformed JSON body: {exc}") from exc

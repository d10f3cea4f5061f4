"""
Immutable view of a node's value at the time of a read.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from .path import Path

if TYPE_CHECKING:
    from .reference import Reference


def _children(value: Any) -> list[tuple[str, Any]]:
    if isinstance(value, dict):
        return list(value.items())
    if isinstance(value, list):
        return [(str(i), item) for i, item in enumerate(value)]
    return []


class Snapshot:
    """
    Decoded value of a node plus the reference it was read from.

    Iterating yields `(key, Snapshot)` pairs in the order the value was
    decoded in, which is the requested order when the query was ordered.
    """

    __slots__ = ("_reference", "_value")

    def __init__(self, reference: Reference, value: Any):
        self._reference = reference
        self._value = value

    @property
    def value(self) -> Any:
        """Copy of the decoded value. Changes to it do not reach the snapshot."""
        return copy.deepcopy(self._value)

    @property
    def reference(self) -> Reference:
        return self._reference

    def get_value(self) -> Any:
        return self.value

    def get_reference(self) -> Reference:
        return self._reference

    def get_key(self) -> str | None:
        return self._reference.get_key()

    def exists(self) -> bool:
        return self._value is not None

    def num_children(self) -> int:
        if isinstance(self._value, (dict, list)):
            return len(self._value)
        return 0

    def has_children(self) -> bool:
        return self.num_children() > 0

    def get_child(self, path: str) -> Snapshot:
        """
        Snapshot of a descendant. The value is None when there is nothing
        at `path`.

        Args:
            path (str): Relative path, may contain slashes.
        """
        relative = Path.parse(path)
        value = self._value
        for segment in relative.segments:
            value = dict(_children(value)).get(segment)
            if value is None:
                break
        return Snapshot(self._reference.get_child(path), value)

    def has_child(self, path: str) -> bool:
        return self.get_child(path).exists()

    def __iter__(self) -> Iterator[tuple[str, Snapshot]]:
        for key, value in _children(self._value):
            yield key, Snapshot(self._reference.get_child(key), value)

    def __repr__(self) -> str:
        return f"Snapshot(path={str(self._reference.get_path())!r}, value={self._value!r})"

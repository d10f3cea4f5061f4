"""
Slash-delimited node paths of the Realtime Database tree.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from firebase_rest.errors import InvalidArgumentException

MAX_DEPTH = 32
MAX_KEY_SIZE = 768  # bytes, UTF-8 encoded
INVALID_KEY_CHARS = re.compile(r"[.$#\[\]\x00-\x1f\x7f]")


def validate_segment(segment: str) -> str:
    """
    Checks a single key against the Realtime Database key rules.

    Args:
        segment (str): The key to check.

    Raises:
        InvalidArgumentException: If the key is empty, contains `/` or
            one of `.$#[]`, a control character, or is too long.

    Returns:
        str: The key, unchanged.
    """
    if not isinstance(segment, str):
        raise InvalidArgumentException(
            f"Path segments must be strings, got {type(segment).__name__}"
        )
    if not segment:
        raise InvalidArgumentException("Path segments must not be empty")
    if "/" in segment:
        raise InvalidArgumentException(
            f"Path segment {segment!r} must not contain '/'"
        )
    if INVALID_KEY_CHARS.search(segment):
        raise InvalidArgumentException(
            f"Path segment {segment!r} must not contain '.', '$', '#', '[',"
            " ']' or control characters"
        )
    if len(segment.encode("utf-8")) > MAX_KEY_SIZE:
        raise InvalidArgumentException(
            f"Path segment {segment[:32]!r}... exceeds {MAX_KEY_SIZE} bytes"
        )
    return segment


class Path:
    """
    Immutable sequence of keys leading from the root to a node.

    The root path has no segments and renders as "/".
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: tuple[str, ...] | list[str] = ()):
        segments = tuple(validate_segment(s) for s in segments)
        if len(segments) > MAX_DEPTH:
            raise InvalidArgumentException(
                f"Path depth {len(segments)} exceeds the maximum of {MAX_DEPTH}"
            )
        self._segments = segments

    @classmethod
    def parse(cls, raw: str) -> Path:
        """
        Parses a slash-delimited string. Leading and trailing slashes are
        ignored, empty segments in between are not.

        Args:
            raw (str): e.g. "users/alice/score" or "/users/".

        Raises:
            InvalidArgumentException: On empty inner segments or keys that
                break the key rules.
        """
        if not isinstance(raw, str):
            raise InvalidArgumentException(
                f"Paths must be strings, got {type(raw).__name__}"
            )
        stripped = raw.strip("/")
        if not stripped:
            return cls()
        segments = stripped.split("/")
        if "" in segments:
            raise InvalidArgumentException(
                f"Path {raw!r} contains an empty segment"
            )
        return cls(segments)

    @property
    def segments(self) -> tuple[str, ...]:
        return self._segments

    @property
    def is_root(self) -> bool:
        return not self._segments

    @property
    def key(self) -> str | None:
        return self._segments[-1] if self._segments else None

    @property
    def parent(self) -> Path | None:
        if not self._segments:
            return None
        return Path(self._segments[:-1])

    def child(self, segment: str) -> Path:
        return Path((*self._segments, validate_segment(segment)))

    def join(self, relative: str | Path) -> Path:
        """
        Appends a relative path, which may itself contain slashes.
        """
        if not isinstance(relative, Path):
            relative = Path.parse(relative)
        return Path(self._segments + relative.segments)

    def uri_path(self) -> str:
        """
        URL-quoted form used when building request URIs, without leading
        slash.
        """
        return "/".join(quote(s, safe="") for s in self._segments)

    def __str__(self) -> str:
        return "/" + "/".join(self._segments)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

"""
Normalization of the many timestamp shapes returned by Firebase.
"""

import re
import time
from datetime import datetime, timezone
from typing import Any, Literal

from dateutil import parser

from firebase_rest.errors import InvalidArgumentException

MICROTIME = re.compile(r"^(?P<msec>0?\.\d+) (?P<sec>\d+)$")
SIGNED_DIGITS = re.compile(r"^\s*[+-]?\d+\s*$")
EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

TimeUnit = Literal["s", "ms"]


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _from_timestamp(seconds: float) -> datetime:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidArgumentException(
            f"Timestamp {seconds} is out of range"
        ) from exc


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _from_unit(value: Any, unit: TimeUnit) -> datetime:
    if unit not in ("s", "ms"):
        raise InvalidArgumentException(f"Unknown time unit {unit!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentException(
            f"{value!r} is not a number of {unit}"
        ) from exc
    return _from_timestamp(number / 1000 if unit == "ms" else number)


def _from_digits(value: Any) -> datetime | None:
    if not _is_scalar(value):
        return None
    digits = str(value)
    if not digits.isdigit():
        return None
    now = time.time()
    if len(digits) == len(str(int(now))):
        return _from_timestamp(int(digits))
    if len(digits) == len(str(int(now * 1000))):
        return _from_timestamp(int(digits) / 1000)
    return None


def _from_microtime(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    match = MICROTIME.match(value)
    if not match:
        return None
    return _from_timestamp(float(match["sec"]) + float(match["msec"]))


def to_utc_datetime(value: Any, unit: TimeUnit | None = None) -> datetime:
    """
    Converts a timestamp of unknown shape to an aware UTC datetime.

    Without `unit`, plain digit strings/integers are told apart by
    length: as many digits as the current unix time in seconds means
    seconds, as many as the current time in milliseconds means
    milliseconds. Values close to a digit-length boundary are ambiguous,
    pass `unit` whenever the unit is known.

    Args:
        value (Any): A datetime, unix seconds or milliseconds (int or
            digit string), a "msec sec" microtime string, a falsy value
            (epoch) or any string dateutil can parse.
        unit (TimeUnit | None, optional): "s" or "ms" to skip guessing.

    Raises:
        InvalidArgumentException: If the value can't be interpreted.

    Returns:
        datetime: Timezone-aware datetime in UTC.
    """
    if unit is not None:
        return _from_unit(value, unit)
    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, float) and value.is_integer():
        value = int(value)
    dt = _from_digits(value) or _from_microtime(value)
    if dt is not None:
        return dt
    if isinstance(value, bool) or not value or value == "0":
        return EPOCH

    if isinstance(value, (int, float)) or (
        isinstance(value, str) and SIGNED_DIGITS.match(value)
    ):
        raise InvalidArgumentException(
            f"{value!r} is neither unix seconds nor milliseconds"
        )

    try:
        return _as_utc(parser.parse(str(value)))
    except (ValueError, OverflowError) as exc:
        raise InvalidArgumentException(
            f"Unable to parse {value!r} as a timestamp: {exc}"
        ) from exc

"""Ordering and equality of JSON values, as used by filters and sorting."""

import json
import re
from datetime import datetime
from datetime import timezone
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError

from .utils import _is_number

_DATETIME_ADAPTER = TypeAdapter(datetime)
_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _type_rank(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1
    if _is_number(value):
        return 2
    if isinstance(value, str):
        return 3
    if isinstance(value, bytes):
        return 4
    if isinstance(value, list):
        return 5
    return 6


def _as_datetime(value: str) -> datetime | None:
    """Parse an xsd:dateTime string, or return :data:`None`."""
    if not _DATE_PREFIX.match(value):
        return None
    try:
        parsed = _DATETIME_ADAPTER.validate_python(value)
    except ValidationError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _sign(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


def compare_values(left: Any, right: Any, case_exact: bool = False) -> int:
    """Compare two JSON values.

    Numbers are compared numerically, strings holding dates chronologically
    and other strings lexicographically, ignoring case unless ``case_exact``
    is set. Values of different types are never equal, and are ordered by
    type so the result is still consistent.

    :return: -1, 0 or 1 when ``left`` is lesser, equal or greater than ``right``.
    """
    if _is_number(left) and _is_number(right):
        return _sign(left, right)

    if isinstance(left, str) and isinstance(right, str):
        left_date, right_date = _as_datetime(left), _as_datetime(right)
        if left_date is not None and right_date is not None:
            return _sign(left_date, right_date)
        if not case_exact:
            left, right = left.lower(), right.lower()
        return _sign(left, right)

    left_rank, right_rank = _type_rank(left), _type_rank(right)
    if left_rank != right_rank:
        return _sign(left_rank, right_rank)

    if left is None or left == right:
        return 0

    if isinstance(left, bool | bytes):
        return _sign(left, right)

    return _sign(
        json.dumps(left, sort_keys=True, default=str),
        json.dumps(right, sort_keys=True, default=str),
    )


def values_equal(left: Any, right: Any, case_exact: bool = False) -> bool:
    """Tell whether two JSON values are equal, with the :func:`compare_values` rules."""
    if _type_rank(left) != _type_rank(right):
        return False
    if isinstance(left, str):
        return compare_values(left, right, case_exact) == 0
    return bool(left == right)


def is_comparable(left: Any, right: Any) -> bool:
    """Tell whether two values can be ordered meaningfully."""
    return (_is_number(left) and _is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )


def json_equal(left: Any, right: Any) -> bool:
    """Tell whether two JSON nodes are identical.

    Unlike ``==``, booleans never equal numbers, at any depth. Strings are
    compared case-sensitively.
    """
    if _type_rank(left) != _type_rank(right):
        return False
    if isinstance(left, dict):
        if not isinstance(right, dict) or left.keys() != right.keys():
            return False
        return all(json_equal(value, right[key]) for key, value in left.items())
    if isinstance(left, list):
        return len(left) == len(right) and all(
            json_equal(item, other) for item, other in zip(left, right)
        )
    return bool(left == right)


def json_key(value: Any) -> tuple[int, Any]:
    """Return a hashable key of a JSON scalar, consistent with :func:`json_equal`."""
    return _type_rank(value), value

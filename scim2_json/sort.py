import functools
import logging
from collections.abc import Callable
from collections.abc import Iterable
from enum import Enum
from typing import Any

from .comparison import compare_values
from .exceptions import SCIMException
from .nodes import get_values
from .path import Path

logger = logging.getLogger(__name__)


class SortOrder(str, Enum):
    ascending = "ascending"
    descending = "descending"


class ResourceComparator:
    """Compare JSON resources by the value of one of their attributes.

    The sort value is the first value found at ``sort_by``. For multi-valued
    attributes this is the value marked as ``primary``, or else the first
    one. Resources without a sort value come last in ascending order, and
    first in descending order.
    """

    def __init__(
        self,
        sort_by: Path | str,
        sort_order: SortOrder = SortOrder.ascending,
    ):
        self.sort_by = sort_by if isinstance(sort_by, Path) else Path.from_string(sort_by)
        self.sort_order = SortOrder(sort_order)

    def _sort_value(self, resource: dict[str, Any]) -> Any:
        try:
            values = get_values(self.sort_by, resource)
        except SCIMException as exc:
            logger.debug("Unable to read sort value %r: %s", str(self.sort_by), exc)
            return None

        if not values:
            return None

        value = values[0]
        if isinstance(value, list):
            if not value:
                return None
            primary = next(
                (
                    item
                    for item in value
                    if isinstance(item, dict) and item.get("primary") is True
                ),
                value[0],
            )
            value = primary

        # complex values sort by their "value" sub-attribute
        if isinstance(value, dict):
            return value.get("value")
        return value

    def compare(self, first: dict[str, Any], second: dict[str, Any]) -> int:
        first_value = self._sort_value(first)
        second_value = self._sort_value(second)

        if first_value is None and second_value is None:
            return 0
        if first_value is None:
            return 1 if self.sort_order == SortOrder.ascending else -1
        if second_value is None:
            return -1 if self.sort_order == SortOrder.ascending else 1

        result = compare_values(first_value, second_value)
        return result if self.sort_order == SortOrder.ascending else -result

    def key(self) -> Callable[[dict[str, Any]], Any]:
        """Return a key function for :func:`sorted`."""
        return functools.cmp_to_key(self.compare)


def sort_resources(
    resources: Iterable[dict[str, Any]],
    sort_by: Path | str,
    sort_order: SortOrder = SortOrder.ascending,
) -> list[dict[str, Any]]:
    """Return the resources sorted by the value of one of their attributes."""
    return sorted(resources, key=ResourceComparator(sort_by, sort_order).key())

"""Evaluation of filters against JSON documents.

Documents are plain Python JSON values: :class:`dict`, :class:`list`,
:class:`str`, numbers, :class:`bool`, :data:`None`, and :class:`bytes` for
binary values.
"""

from typing import Any

from . import nodes
from .comparison import compare_values
from .comparison import is_comparable
from .comparison import values_equal
from .exceptions import InvalidFilterException
from .filters import AndFilter
from .filters import ComparisonFilter
from .filters import ComplexValueFilter
from .filters import ContainsFilter
from .filters import EndsWithFilter
from .filters import EqualFilter
from .filters import Filter
from .filters import FilterType
from .filters import GreaterThanFilter
from .filters import GreaterThanOrEqualFilter
from .filters import LessThanFilter
from .filters import LessThanOrEqualFilter
from .filters import NotEqualFilter
from .filters import NotFilter
from .filters import OrFilter
from .filters import PresentFilter
from .filters import StartsWithFilter
from .path import Path

VALUE_PATH = Path.root().attribute("value")
"""Path matching scalar values of multi-valued attributes, as in ``emails[value ew ".org"]``."""


def _is_empty(node: Any) -> bool:
    if node is None:
        return True
    if isinstance(node, list):
        return all(_is_empty(item) for item in node)
    return False


def _candidate_nodes(path: Path, node: Any) -> list[Any]:
    """Return the values a filter attribute path designates in a node.

    Arrays are flattened so each of their elements is a candidate.
    """
    if isinstance(node, list):
        return list(node)

    if isinstance(node, dict):
        candidates: list[Any] = []
        for value in nodes.get_values(path, node):
            if isinstance(value, list):
                candidates.extend(value)
            else:
                candidates.append(value)
        return candidates

    if path == VALUE_PATH:
        return [node]

    return []


def _equal(filter: ComparisonFilter, node: Any) -> bool:
    candidates = _candidate_nodes(filter.path, node)
    if filter.value is None and _is_empty(candidates):
        return True
    return any(values_equal(candidate, filter.value) for candidate in candidates)


def _substring(filter: ComparisonFilter, node: Any) -> bool:
    for candidate in _candidate_nodes(filter.path, node):
        if isinstance(candidate, str) and isinstance(filter.value, str):
            candidate, expected = candidate.lower(), filter.value.lower()
            if filter.filter_type == FilterType.contains and expected in candidate:
                return True
            if filter.filter_type == FilterType.starts_with and candidate.startswith(
                expected
            ):
                return True
            if filter.filter_type == FilterType.ends_with and candidate.endswith(
                expected
            ):
                return True
        elif values_equal(candidate, filter.value):
            return True
    return False


def _ordering(filter: ComparisonFilter, node: Any) -> bool:
    if isinstance(filter.value, bool | bytes):
        raise InvalidFilterException(
            detail=(
                f"Cannot use the {filter.filter_type.value} operator "
                "with boolean or binary values"
            ),
            filter=str(filter),
        )

    for candidate in _candidate_nodes(filter.path, node):
        if isinstance(candidate, bool | bytes):
            raise InvalidFilterException(
                detail=(
                    f"Cannot use the {filter.filter_type.value} operator on "
                    f"boolean or binary attribute '{filter.path}'"
                ),
                filter=str(filter),
            )
        if not is_comparable(candidate, filter.value):
            continue

        comparison = compare_values(candidate, filter.value)
        match filter:
            case GreaterThanFilter() if comparison > 0:
                return True
            case GreaterThanOrEqualFilter() if comparison >= 0:
                return True
            case LessThanFilter() if comparison < 0:
                return True
            case LessThanOrEqualFilter() if comparison <= 0:
                return True
    return False


def _complex_value(filter: ComplexValueFilter, node: Any) -> bool:
    for candidate in _candidate_nodes(filter.path, node):
        if isinstance(candidate, list):
            if any(evaluate(filter.value_filter, item) for item in candidate):
                return True
        elif evaluate(filter.value_filter, candidate):
            return True
    return False


def evaluate(filter: Filter, node: Any) -> bool:
    """Tell whether a JSON node matches a filter.

    An attribute that is missing, :data:`None`, or an array of empty values
    is equivalent to :data:`None`: ``title eq null`` matches a document
    without a title, and ``title pr`` does not.

    :raises InvalidFilterException: If an ordering operator is applied to
        boolean or binary values.
    """
    match filter:
        case EqualFilter():
            return _equal(filter, node)
        case NotEqualFilter():
            return not _equal(filter, node)
        case ContainsFilter() | StartsWithFilter() | EndsWithFilter():
            return _substring(filter, node)
        case (
            GreaterThanFilter()
            | GreaterThanOrEqualFilter()
            | LessThanFilter()
            | LessThanOrEqualFilter()
        ):
            return _ordering(filter, node)
        case PresentFilter():
            return any(
                not _is_empty(candidate)
                for candidate in _candidate_nodes(filter.path, node)
            )
        case AndFilter(filters=filters):
            return all(evaluate(component, node) for component in filters)
        case OrFilter(filters=filters):
            return any(evaluate(component, node) for component in filters)
        case NotFilter(filter=inner):
            return not evaluate(inner, node)
        case ComplexValueFilter():
            return _complex_value(filter, node)
    raise TypeError(f"Unsupported filter type {type(filter).__name__}")

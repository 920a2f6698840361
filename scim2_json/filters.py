"""SCIM filter expressions.

Filters are immutable trees built either by :func:`~scim2_json.parse_filter`
or with the :class:`Filter` factories::

    Filter.and_(Filter.eq("userName", "bjensen"), Filter.pr("title"))

Their string representation is the canonical SCIM filter syntax, and can be
parsed back into an equal filter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar

from pydantic import GetCoreSchemaHandler
from pydantic import GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema

from .comparison import json_key
from .exceptions import InvalidFilterException
from .path import Path
from .utils import _is_scalar
from .utils import _json_literal

if TYPE_CHECKING:
    from .parser import ParserOptions


class FilterType(str, Enum):
    equal = "eq"
    not_equal = "ne"
    contains = "co"
    starts_with = "sw"
    ends_with = "ew"
    present = "pr"
    greater_than = "gt"
    greater_or_equal = "ge"
    less_than = "lt"
    less_or_equal = "le"
    and_ = "and"
    or_ = "or"
    not_ = "not"
    complex_value = "complex"


def _to_path(path: "Path | str") -> Path:
    return path if isinstance(path, Path) else Path.from_string(path)


class Filter:
    """Base class of every filter expression."""

    __slots__ = ()

    filter_type: ClassVar[FilterType]

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        _source_type: type[Any],
        _handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        def validate_filter(value: Any) -> "Filter":
            if isinstance(value, Filter):
                return value
            if isinstance(value, str):
                try:
                    return Filter.from_string(value)
                except InvalidFilterException as exc:
                    raise exc.as_pydantic_error() from exc
            raise ValueError(f"Expected str or Filter, got {type(value).__name__}")

        return core_schema.no_info_plain_validator_function(
            validate_filter,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls,
        _core_schema: core_schema.CoreSchema,
        _handler: GetJsonSchemaHandler,
    ) -> JsonSchemaValue:
        return {"type": "string"}

    @staticmethod
    def from_string(text: str, options: "ParserOptions | None" = None) -> "Filter":
        """Parse a filter string.

        :raises InvalidFilterException: If the string is not a valid filter.
        """
        from .parser import parse_filter

        return parse_filter(text, options)

    @staticmethod
    def eq(path: "Path | str", value: Any) -> "EqualFilter":
        return EqualFilter(_to_path(path), value)

    @staticmethod
    def ne(path: "Path | str", value: Any) -> "NotEqualFilter":
        return NotEqualFilter(_to_path(path), value)

    @staticmethod
    def co(path: "Path | str", value: Any) -> "ContainsFilter":
        return ContainsFilter(_to_path(path), value)

    @staticmethod
    def sw(path: "Path | str", value: Any) -> "StartsWithFilter":
        return StartsWithFilter(_to_path(path), value)

    @staticmethod
    def ew(path: "Path | str", value: Any) -> "EndsWithFilter":
        return EndsWithFilter(_to_path(path), value)

    @staticmethod
    def gt(path: "Path | str", value: Any) -> "GreaterThanFilter":
        return GreaterThanFilter(_to_path(path), value)

    @staticmethod
    def ge(path: "Path | str", value: Any) -> "GreaterThanOrEqualFilter":
        return GreaterThanOrEqualFilter(_to_path(path), value)

    @staticmethod
    def lt(path: "Path | str", value: Any) -> "LessThanFilter":
        return LessThanFilter(_to_path(path), value)

    @staticmethod
    def le(path: "Path | str", value: Any) -> "LessThanOrEqualFilter":
        return LessThanOrEqualFilter(_to_path(path), value)

    @staticmethod
    def pr(path: "Path | str") -> "PresentFilter":
        return PresentFilter(_to_path(path))

    @staticmethod
    def and_(*filters: "Filter") -> "AndFilter":
        """Combine filters with a logical AND.

        Nested AND filters are flattened into the new one.
        """
        return AndFilter(_flatten(AndFilter, filters))

    @staticmethod
    def or_(*filters: "Filter") -> "OrFilter":
        """Combine filters with a logical OR.

        Nested OR filters are flattened into the new one.
        """
        return OrFilter(_flatten(OrFilter, filters))

    @staticmethod
    def not_(filter: "Filter") -> "NotFilter":
        return NotFilter(filter)

    @staticmethod
    def has_complex_value(
        path: "Path | str", value_filter: "Filter | str"
    ) -> "ComplexValueFilter":
        if isinstance(value_filter, str):
            value_filter = Filter.from_string(value_filter)
        return ComplexValueFilter(_to_path(path), value_filter)

    def matches(self, node: Any) -> bool:
        """Evaluate the filter against a JSON node."""
        from .evaluator import evaluate

        return evaluate(self, node)


def _flatten(
    combining_type: type["CombiningFilter"], filters: tuple[Filter, ...]
) -> tuple[Filter, ...]:
    flattened: list[Filter] = []
    for item in filters:
        if isinstance(item, combining_type):
            flattened.extend(item.filters)
        else:
            flattened.append(item)
    return tuple(flattened)


@dataclass(frozen=True, eq=False)
class ComparisonFilter(Filter):
    """Compare the values found at ``path`` with a JSON scalar.

    Filters compare equal when their values are identical JSON scalars, so
    ``x eq true`` and ``x eq 1`` are distinct filters.
    """

    path: Path
    value: Any

    def __post_init__(self) -> None:
        if isinstance(self.path, str):
            object.__setattr__(self, "path", Path.from_string(self.path))
        if not _is_scalar(self.value):
            raise ValueError(
                f"Comparison values must be JSON scalars, got {type(self.value).__name__}"
            )

    def _key(self) -> tuple[Any, ...]:
        return type(self), self.path, json_key(self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComparisonFilter):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"{self.path} {self.filter_type.value} {_json_literal(self.value)}"


class EqualFilter(ComparisonFilter):
    filter_type = FilterType.equal


class NotEqualFilter(ComparisonFilter):
    filter_type = FilterType.not_equal


class ContainsFilter(ComparisonFilter):
    filter_type = FilterType.contains


class StartsWithFilter(ComparisonFilter):
    filter_type = FilterType.starts_with


class EndsWithFilter(ComparisonFilter):
    filter_type = FilterType.ends_with


class GreaterThanFilter(ComparisonFilter):
    filter_type = FilterType.greater_than


class GreaterThanOrEqualFilter(ComparisonFilter):
    filter_type = FilterType.greater_or_equal


class LessThanFilter(ComparisonFilter):
    filter_type = FilterType.less_than


class LessThanOrEqualFilter(ComparisonFilter):
    filter_type = FilterType.less_or_equal


@dataclass(frozen=True)
class PresentFilter(Filter):
    """Match nodes having a non-empty value at ``path``."""

    filter_type = FilterType.present

    path: Path

    def __post_init__(self) -> None:
        if isinstance(self.path, str):
            object.__setattr__(self, "path", Path.from_string(self.path))

    def __str__(self) -> str:
        return f"{self.path} pr"


@dataclass(frozen=True)
class CombiningFilter(Filter):
    filters: tuple[Filter, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", tuple(self.filters))
        if not self.filters:
            raise ValueError(
                f"{type(self).__name__} needs at least one component filter"
            )
        for component in self.filters:
            if not isinstance(component, Filter):
                raise ValueError(
                    f"Expected Filter components, got {type(component).__name__}"
                )

    def __str__(self) -> str:
        separator = f" {self.filter_type.value} "
        return f"({separator.join(str(component) for component in self.filters)})"


class AndFilter(CombiningFilter):
    filter_type = FilterType.and_


class OrFilter(CombiningFilter):
    filter_type = FilterType.or_


@dataclass(frozen=True)
class NotFilter(Filter):
    filter_type = FilterType.not_

    filter: Filter

    def __str__(self) -> str:
        return f"not ({self.filter})"


@dataclass(frozen=True)
class ComplexValueFilter(Filter):
    """Match nodes where a value at ``path`` satisfies ``value_filter``.

    This is the ``emails[type eq "work" and value co "@example.com"]``
    syntax.
    """

    filter_type = FilterType.complex_value

    path: Path
    value_filter: Filter

    def __post_init__(self) -> None:
        if isinstance(self.path, str):
            object.__setattr__(self, "path", Path.from_string(self.path))

    def __str__(self) -> str:
        return f"{self.path}[{self.value_filter}]"

"""Parsing of SCIM attribute paths and filter expressions.

Paths follow the ``attrPath`` and ``valuePath`` rules of :rfc:`RFC7644 §3.5.2
<7644#section-3.5.2>`, filters follow :rfc:`RFC7644 §3.4.2.2
<7644#section-3.4.2.2>`. Parse errors report the 0-based position of the
offending character in the parsed string.
"""

import json
import logging
from typing import Any

from pydantic import ConfigDict
from pydantic import field_validator

from .base import BaseModel
from .exceptions import InvalidFilterException
from .exceptions import InvalidPathException
from .filters import AndFilter
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
from .urn import URN
from .urn import is_urn
from .utils import _is_scalar

logger = logging.getLogger(__name__)

_RESERVED_CHARACTERS = frozenset(' .[]()":')

_COMPARISON_FILTERS: dict[str, type[Filter]] = {
    FilterType.equal.value: EqualFilter,
    FilterType.not_equal.value: NotEqualFilter,
    FilterType.contains.value: ContainsFilter,
    FilterType.starts_with.value: StartsWithFilter,
    FilterType.ends_with.value: EndsWithFilter,
    FilterType.greater_than.value: GreaterThanFilter,
    FilterType.greater_or_equal.value: GreaterThanOrEqualFilter,
    FilterType.less_than.value: LessThanFilter,
    FilterType.less_or_equal.value: LessThanOrEqualFilter,
}


class ParserOptions(BaseModel):
    """Settings altering how paths and filters are tokenized.

    Instances are immutable, the builder methods return new instances::

        options = ParserOptions().add_extended_attribute_name_characters(";")
        parse_path("attr;lang", options)
    """

    model_config = ConfigDict(frozen=True)

    extended_attribute_name_characters: frozenset[str] = frozenset()
    """Characters accepted in attribute names in addition to the
    alphanumerical characters, hyphens, underscores and dollar signs."""

    @field_validator("extended_attribute_name_characters")
    @classmethod
    def check_characters(cls, value: frozenset[str]) -> frozenset[str]:
        for character in value:
            if len(character) != 1:
                raise ValueError(f"'{character}' is not a single character")
            if character in _RESERVED_CHARACTERS:
                raise ValueError(
                    f"'{character}' has a meaning in paths and filters "
                    "and cannot be used in attribute names"
                )
        return value

    def add_extended_attribute_name_characters(
        self, *characters: str
    ) -> "ParserOptions":
        return type(self)(
            extended_attribute_name_characters=self.extended_attribute_name_characters
            | frozenset(characters)
        )

    def clear_extended_attribute_name_characters(self) -> "ParserOptions":
        return type(self)()


_DEFAULT_OPTIONS = ParserOptions()


class _Reader:
    """Character reader with a single mark.

    ``offset`` is the position of the first character of ``text`` in the
    string given to the public functions, so errors report absolute
    positions.
    """

    def __init__(self, text: str, offset: int = 0):
        self.text = text
        self.offset = offset
        self.pos = 0
        self.marked = 0

    def read(self) -> str | None:
        if self.pos >= len(self.text):
            return None
        character = self.text[self.pos]
        self.pos += 1
        return character

    def unread(self) -> None:
        self.pos = max(0, self.pos - 1)

    def mark(self) -> None:
        self.marked = self.pos

    def reset(self) -> None:
        self.pos = self.marked

    def skip(self, count: int) -> int:
        count = min(count, len(self.text) - self.pos)
        self.pos += count
        return count

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    @property
    def position(self) -> int:
        return self.offset + self.pos

    @property
    def mark_position(self) -> int:
        return self.offset + self.marked


def _is_attribute_character(character: str, options: ParserOptions) -> bool:
    return (
        (character.isascii() and character.isalnum())
        or character in "-_$"
        or character in options.extended_attribute_name_characters
    )


def _is_filter_character(character: str, options: ParserOptions) -> bool:
    return character in ".:" or _is_attribute_character(character, options)


def parse_path(text: str | None, options: ParserOptions | None = None) -> Path:
    """Parse a SCIM attribute path.

    :data:`None`, empty and blank strings designate the resource root.

    :raises InvalidPathException: If the string is not a valid path.
    """
    if text is None or not text.strip():
        return Path.root()

    offset = len(text) - len(text.lstrip())
    try:
        return _parse_path(text.strip(), offset, options or _DEFAULT_OPTIONS)
    except InvalidPathException as exc:
        logger.debug("Invalid path %r: %s", text, exc)
        raise


def parse_filter(text: str | None, options: ParserOptions | None = None) -> Filter:
    """Parse a SCIM filter expression.

    ``and`` binds tighter than ``or``, parenthesis and ``not (...)`` group
    expressions. Consecutive ``and`` (or ``or``) are combined into a
    single :class:`~scim2_json.AndFilter` (or :class:`~scim2_json.OrFilter`).

    :raises InvalidFilterException: If the string is not a valid filter.
    """
    if text is None or not text.strip():
        raise InvalidFilterException(
            detail="Unexpected end of filter string", filter=text, position=0
        )

    offset = len(text) - len(text.lstrip())
    reader = _Reader(text.strip(), offset)
    try:
        return _read_filter(reader, False, options or _DEFAULT_OPTIONS)
    except InvalidFilterException as exc:
        logger.debug("Invalid filter %r: %s", text, exc)
        raise


def _parse_path(text: str, offset: int, options: ParserOptions) -> Path:
    schema_urn = None
    attributes = text
    attributes_offset = offset
    if is_urn(text):
        bracket = text.find("[")
        colon = (text if bracket < 0 else text[:bracket]).rfind(":")
        schema_urn = text[:colon]
        attributes = text[colon + 1 :]
        attributes_offset = offset + colon + 1
        try:
            URN.check_syntax(schema_urn)
        except ValueError as exc:
            raise InvalidPathException(
                detail=f"Invalid schema URN '{schema_urn}' at position {offset}: {exc}",
                path=text,
                position=offset,
            ) from exc

    path = Path.root(schema_urn)
    reader = _Reader(attributes, attributes_offset)
    while (token := _read_path_token(reader, options)) is not None:
        if not token.endswith("["):
            path = path.attribute(token)
            continue

        name = token[:-1]
        if not name:
            raise InvalidPathException(
                detail=f"Attribute name expected at position {reader.mark_position}",
                path=text,
                position=reader.mark_position,
            )

        try:
            value_filter = _read_filter(reader, True, options)
        except InvalidFilterException as exc:
            raise InvalidPathException(
                detail=f"Invalid value filter: {exc.detail}",
                path=text,
                position=exc.position,
            ) from exc
        path = path.attribute(name, value_filter)

        character = reader.read()
        if character is None:
            break
        if character != ".":
            raise InvalidPathException(
                detail=(
                    f"Unexpected character '{character}' at position "
                    f"{reader.position - 1}, expected '.' or the end of the path"
                ),
                path=text,
                position=reader.position - 1,
            )
        if reader.at_end():
            raise InvalidPathException(
                detail="Unexpected end of path string",
                path=text,
                position=reader.position,
            )
    return path


def _read_path_token(reader: _Reader, options: ParserOptions) -> str | None:
    """Read an attribute name, terminated by ``.``, ``[`` or the end of the string.

    The ``[`` is kept at the end of the token so the caller knows a value
    filter follows.
    """
    reader.mark()
    characters: list[str] = []
    while (character := reader.read()) is not None:
        if character == ".":
            if not characters:
                raise InvalidPathException(
                    detail=f"Attribute name expected at position {reader.mark_position}",
                    path=reader.text,
                    position=reader.mark_position,
                )
            if reader.at_end():
                raise InvalidPathException(
                    detail="Unexpected end of path string",
                    path=reader.text,
                    position=reader.position,
                )
            return "".join(characters)

        if character == "[":
            characters.append(character)
            return "".join(characters)

        if not _is_attribute_character(character, options):
            raise InvalidPathException(
                detail=(
                    f"Unexpected character '{character}' at position "
                    f"{reader.position - 1} for token starting at {reader.mark_position}"
                ),
                path=reader.text,
                position=reader.position - 1,
            )
        characters.append(character)

    return "".join(characters) if characters else None


def _read_filter_token(
    reader: _Reader, is_value_filter: bool, options: ParserOptions
) -> str | None:
    """Read the next filter token.

    Tokens are terminated by spaces and parenthesis, which are tokens by
    themselves. In a value filter, ``]`` is a token too. Outside of value
    filters, ``attr[`` is a token opening a complex value filter.
    """
    while True:
        reader.mark()
        character = reader.read()
        if character is None or not character.isspace():
            break

    characters: list[str] = []
    while character is not None:
        if character.isspace():
            break

        if character in "()" or (is_value_filter and character == "]"):
            if characters:
                reader.unread()
            else:
                characters.append(character)
            break

        if not is_value_filter and character == "[":
            characters.append(character)
            break

        if not _is_filter_character(character, options):
            raise InvalidFilterException(
                detail=(
                    f"Unexpected character '{character}' at position "
                    f"{reader.position - 1} for token starting at {reader.mark_position}"
                ),
                filter=reader.text,
                position=reader.position - 1,
            )
        characters.append(character)
        character = reader.read()

    return "".join(characters) if characters else None


def _unexpected_end(reader: _Reader) -> InvalidFilterException:
    return InvalidFilterException(
        detail="Unexpected end of filter string",
        filter=reader.text,
        position=reader.position,
    )


def _read_filter(
    reader: _Reader, is_value_filter: bool, options: ParserOptions
) -> Filter:
    """Build a filter with two stacks, one for operands and one for operators.

    The operator stack holds ``(``, ``not``, ``and`` and ``or``. Pushing an
    ``or`` first collapses the pending ``and`` run, so between two groupings
    the stack is a run of ``or`` followed by a run of ``and``.

    In value filter mode, reading stops after the closing ``]``.
    """
    output: list[Filter] = []
    operators: list[str] = []
    expecting_filter = True
    closed = False

    while (token := _read_filter_token(reader, is_value_filter, options)) is not None:
        token_position = reader.mark_position
        keyword = token.lower()

        if expecting_filter and token == "(":
            operators.append("(")

        elif expecting_filter and keyword == "not":
            if _read_filter_token(reader, is_value_filter, options) != "(":
                if reader.at_end():
                    raise _unexpected_end(reader)
                raise InvalidFilterException(
                    detail=f"Expected '(' at position {reader.mark_position}",
                    filter=reader.text,
                    position=reader.mark_position,
                )
            operators.append("not")

        elif expecting_filter and token.endswith("["):
            path = _parse_filter_attribute(token[:-1], token_position, reader, options)
            value_filter = _read_filter(reader, True, options)
            output.append(ComplexValueFilter(path, value_filter))
            expecting_filter = False

        elif expecting_filter and token not in ("(", ")", "]"):
            output.append(
                _read_attribute_filter(
                    token, token_position, reader, is_value_filter, options
                )
            )
            expecting_filter = False

        elif not expecting_filter and token == ")":
            operator = _close_grouping(operators, output, reader)
            if operator is None:
                raise InvalidFilterException(
                    detail=(
                        "No opening parenthesis matching closing parenthesis "
                        f"at position {token_position}"
                    ),
                    filter=reader.text,
                    position=token_position,
                )
            if operator == "not":
                output.append(NotFilter(output.pop()))

        elif not expecting_filter and keyword == FilterType.and_.value:
            operators.append(FilterType.and_.value)
            expecting_filter = True

        elif not expecting_filter and keyword == FilterType.or_.value:
            _collapse(operators, output, FilterType.and_.value, reader)
            operators.append(FilterType.or_.value)
            expecting_filter = True

        elif not expecting_filter and token == "]":
            closed = True
            break

        else:
            raise InvalidFilterException(
                detail=f"Unexpected token '{token}' at position {token_position}",
                filter=reader.text,
                position=token_position,
            )

    if expecting_filter or (is_value_filter and not closed):
        raise _unexpected_end(reader)

    if _close_grouping(operators, output, reader) is not None:
        raise _unexpected_end(reader)

    return output[0]


def _read_attribute_filter(
    token: str,
    token_position: int,
    reader: _Reader,
    is_value_filter: bool,
    options: ParserOptions,
) -> Filter:
    path = _parse_filter_attribute(token, token_position, reader, options)

    operator = _read_filter_token(reader, is_value_filter, options)
    if operator is None:
        raise _unexpected_end(reader)

    keyword = operator.lower()
    if keyword == FilterType.present.value:
        return PresentFilter(path)

    filter_class = _COMPARISON_FILTERS.get(keyword)
    if filter_class is None:
        raise InvalidFilterException(
            detail=(
                f"Unrecognized attribute operator '{operator}' at position "
                f"{reader.mark_position}. Expected: eq,ne,co,sw,ew,pr,gt,ge,lt,le"
            ),
            filter=reader.text,
            position=reader.mark_position,
        )
    return filter_class(path, _read_comparison_value(reader))


def _parse_filter_attribute(
    token: str, token_position: int, reader: _Reader, options: ParserOptions
) -> Path:
    try:
        path = _parse_path(token, token_position, options)
    except InvalidPathException as exc:
        raise InvalidFilterException(
            detail=f"Invalid attribute path at position {token_position}: {exc.detail}",
            filter=reader.text,
            position=exc.position,
        ) from exc

    if path.is_root:
        raise InvalidFilterException(
            detail=f"Attribute path expected at position {token_position}",
            filter=reader.text,
            position=token_position,
        )
    return path


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid comparison value")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


def _read_comparison_value(reader: _Reader) -> Any:
    """Read a JSON scalar and move the reader right after it."""
    reader.mark()
    start = reader.pos
    while start < len(reader.text) and reader.text[start].isspace():
        start += 1
    if start >= len(reader.text):
        raise _unexpected_end(reader)

    try:
        value, end = _DECODER.raw_decode(reader.text, start)
    except ValueError as exc:
        raise InvalidFilterException(
            detail=f"Invalid comparison value at position {reader.offset + start}: {exc}",
            filter=reader.text,
            position=reader.offset + start,
        ) from exc

    if not _is_scalar(value):
        raise InvalidFilterException(
            detail=(
                f"Invalid comparison value at position {reader.offset + start}: "
                "arrays and objects cannot be compared"
            ),
            filter=reader.text,
            position=reader.offset + start,
        )

    reader.reset()
    reader.skip(end - reader.marked)
    return value


def _collapse(
    operators: list[str], output: list[Filter], operator: str, reader: _Reader
) -> None:
    """Replace a run of one operator at the top of the stack by one N-ary filter."""
    count = 0
    while operators and operators[-1] == operator:
        operators.pop()
        count += 1
    if not count:
        return

    if len(output) < count + 1:
        raise _unexpected_end(reader)

    components = tuple(output[-(count + 1) :])
    del output[-(count + 1) :]
    combining = AndFilter if operator == FilterType.and_.value else OrFilter
    output.append(combining(components))


def _close_grouping(
    operators: list[str], output: list[Filter], reader: _Reader
) -> str | None:
    """Collapse the pending operators of the innermost group.

    :return: The operator that opened the group, ``(`` or ``not``, or
        :data:`None` if there is no open group.
    """
    _collapse(operators, output, FilterType.and_.value, reader)
    _collapse(operators, output, FilterType.or_.value, reader)
    if not operators:
        return None
    return operators.pop()

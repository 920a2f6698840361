import base64
import json
import re
from typing import Any

from pydantic.alias_generators import to_snake

_UNDERSCORE_ALPHANUMERIC = re.compile(r"_+([0-9A-Za-z]+)")
_NON_WORD_UNDERSCORE = re.compile(r"[\W_]+")


def _int_to_str(status: int | None) -> str | None:
    return None if status is None else str(status)


def _to_camel(string: str) -> str:
    """Transform strings to camelCase.

    This method is used for attribute name serialization. This is more
    or less the pydantic implementation, but it does not add uppercase
    on alphanumerical characters after specials characters. For instance
    '$ref' stays '$ref'.
    """
    snake = to_snake(string)
    camel = _UNDERSCORE_ALPHANUMERIC.sub(lambda m: m.group(1).title(), snake)
    return camel


def _normalize_attribute_name(attribute_name: str) -> str:
    """Remove all non-alphabetical characters and lowerise a string.

    This method is used for attribute name validation.
    """
    is_extension_attribute = ":" in attribute_name
    if not is_extension_attribute:
        attribute_name = _NON_WORD_UNDERSCORE.sub("", attribute_name)

    return attribute_name.lower()


def _is_number(value: Any) -> bool:
    """Tell whether a JSON node is a number. Booleans are not numbers."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_scalar(value: Any) -> bool:
    """Tell whether a JSON node is a scalar (text, number, boolean, binary or null)."""
    return value is None or isinstance(value, str | int | float | bool | bytes)


def _json_literal(value: Any) -> str:
    """Render a JSON scalar the way it is written in a filter string.

    Binary values are rendered as base64 encoded JSON strings.
    """
    if isinstance(value, bytes):
        value = base64.b64encode(value).decode("ascii")
    return json.dumps(value, ensure_ascii=False)

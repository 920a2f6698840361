from collections.abc import Iterable
from collections.abc import Iterator
from typing import TYPE_CHECKING
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic import GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema

from .exceptions import InvalidPathException
from .urn import URN

if TYPE_CHECKING:
    from .filters import Filter
    from .parser import ParserOptions


class Element:
    """One step of a :class:`Path`: an attribute name and an optional value filter.

    Attribute names are compared case-insensitively, but their original
    spelling is kept for display.
    """

    __slots__ = ("_attribute", "_value_filter")

    def __init__(self, attribute: str, value_filter: "Filter | None" = None):
        if not attribute:
            raise ValueError("Attribute names cannot be empty")
        self._attribute = attribute
        self._value_filter = value_filter

    @property
    def attribute(self) -> str:
        return self._attribute

    @property
    def value_filter(self) -> "Filter | None":
        return self._value_filter

    def _key(self) -> tuple[str, "Filter | None"]:
        return self._attribute.lower(), self._value_filter

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        if self._value_filter is None:
            return self._attribute
        return f"{self._attribute}[{self._value_filter}]"

    def __repr__(self) -> str:
        return f"Element({self._attribute!r}, {self._value_filter!r})"


class Path:
    """An immutable SCIM attribute path.

    A path is a sequence of :class:`Element`, optionally prefixed by a
    schema URN. A path without any element is a root path: it designates
    the whole resource, or a whole extension object when it carries a
    schema URN.

    Paths are usually built from their string representation::

        Path.from_string('emails[type eq "work"].value')

    or step by step::

        Path.root().attribute("name").attribute("givenName")
    """

    __slots__ = ("_elements", "_schema_urn")

    def __init__(self, elements: Iterable[Element] = (), schema_urn: str | None = None):
        if schema_urn is not None:
            URN.check_syntax(schema_urn)
        self._elements = tuple(elements)
        self._schema_urn = schema_urn

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        _source_type: type[Any],
        _handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        def validate_path(value: Any) -> "Path":
            if isinstance(value, Path):
                return value
            if isinstance(value, str):
                try:
                    return cls.from_string(value)
                except InvalidPathException as exc:
                    raise exc.as_pydantic_error() from exc
            raise ValueError(f"Expected str or Path, got {type(value).__name__}")

        return core_schema.no_info_plain_validator_function(
            validate_path,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls,
        _core_schema: core_schema.CoreSchema,
        _handler: GetJsonSchemaHandler,
    ) -> JsonSchemaValue:
        return {"type": "string"}

    @classmethod
    def root(cls, schema_urn: str | None = None) -> "Path":
        """Build a path targeting a resource, or one of its extensions.

        :raises ValueError: If the schema URN is malformed.
        """
        return cls((), schema_urn)

    @classmethod
    def from_string(
        cls, text: str | None, options: "ParserOptions | None" = None
    ) -> "Path":
        """Parse a path string.

        :raises InvalidPathException: If the string is not a valid path.
        """
        from .parser import parse_path

        return parse_path(text, options)

    @property
    def elements(self) -> tuple[Element, ...]:
        return self._elements

    @property
    def schema_urn(self) -> str | None:
        return self._schema_urn

    @property
    def is_root(self) -> bool:
        """Whether the path has no element."""
        return not self._elements

    def attribute(self, name: str, value_filter: "Filter | None" = None) -> "Path":
        """Return a new path with an element appended."""
        return Path((*self._elements, Element(name, value_filter)), self._schema_urn)

    def sub_path(self, end: int) -> "Path":
        """Return a new path made of the first ``end`` elements."""
        return Path(self._elements[:end], self._schema_urn)

    def parent(self) -> "Path | None":
        """Return the path without its last element, or :data:`None` for root paths."""
        if self.is_root:
            return None
        return self.sub_path(len(self._elements) - 1)

    def replace(
        self, index: int, attribute: str, value_filter: "Filter | None" = None
    ) -> "Path":
        """Return a new path where the element at ``index`` is replaced."""
        elements = list(self._elements)
        elements[index] = Element(attribute, value_filter)
        return Path(elements, self._schema_urn)

    def without_filters(self) -> "Path":
        """Return a new path where every value filter has been dropped."""
        return Path(
            (Element(element.attribute) for element in self._elements),
            self._schema_urn,
        )

    def is_prefix_of(self, other: "str | Path") -> bool:
        """Check if this path is a prefix of another path.

        Value filters of this path must match the ones of the other path,
        but the other path may carry filters this one does not have.

        Examples::

            Path.from_string("emails").is_prefix_of("emails.value")  # True
            Path.from_string("emails").is_prefix_of("emails")  # False (equal, not prefix)
            Path.from_string("urn:...:User:").is_prefix_of("urn:...:User:name")  # True
        """
        other_path = other if isinstance(other, Path) else Path.from_string(other)
        if self._schema_key() != other_path._schema_key():
            return False

        if len(self._elements) >= len(other_path._elements):
            return False

        for mine, theirs in zip(self._elements, other_path._elements):
            if mine.attribute.lower() != theirs.attribute.lower():
                return False
            if mine.value_filter is not None and mine.value_filter != theirs.value_filter:
                return False
        return True

    def has_prefix(self, prefix: "str | Path") -> bool:
        """Check if this path has the given prefix.

        Examples::

            Path.from_string("emails.value").has_prefix("emails")  # True
            Path.from_string("emails").has_prefix("emails")  # False (equal, not prefix)
        """
        prefix_path = prefix if isinstance(prefix, Path) else Path.from_string(prefix)
        return prefix_path.is_prefix_of(self)

    def _schema_key(self) -> str | None:
        return None if self._schema_urn is None else self._schema_urn.lower()

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self._elements)

    def __getitem__(self, index: int) -> Element:
        return self._elements[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return (
            self._schema_key() == other._schema_key()
            and self._elements == other._elements
        )

    def __hash__(self) -> int:
        return hash((self._schema_key(), self._elements))

    def __str__(self) -> str:
        attributes = ".".join(str(element) for element in self._elements)
        if self._schema_urn is None:
            return attributes
        return f"{self._schema_urn}:{attributes}"

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"


SCHEMAS = Path.root().attribute("schemas")
ID = Path.root().attribute("id")
EXTERNAL_ID = Path.root().attribute("externalId")
META = Path.root().attribute("meta")

from typing import Any

from pydantic import AliasGenerator
from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict
from pydantic import ValidatorFunctionWrapHandler
from pydantic import model_validator
from typing_extensions import Self

from scim2_json.utils import _normalize_attribute_name
from scim2_json.utils import _to_camel


class BaseModel(PydanticBaseModel):
    """Base Model for everything."""

    model_config = ConfigDict(
        alias_generator=AliasGenerator(
            validation_alias=_normalize_attribute_name,
            serialization_alias=_to_camel,
        ),
        validate_assignment=True,
        populate_by_name=True,
        use_attribute_docstrings=True,
        extra="forbid",
    )

    @model_validator(mode="wrap")
    @classmethod
    def normalize_attribute_names(
        cls, value: Any, handler: ValidatorFunctionWrapHandler
    ) -> Self:
        """Normalize payload attribute names.

        :rfc:`RFC7643 §2.1 <7643#section-2.1>` indicate that attribute
        names should be case-insensitive. Top level payload keys are
        transformed in lowercase so any case is handled the same way.
        Nested values are left untouched, as they may hold arbitrary
        JSON documents such as PATCH operation values.
        """
        if isinstance(value, dict):
            value = {
                _normalize_attribute_name(key) if isinstance(key, str) else key: val
                for key, val in value.items()
            }
        return handler(value)

    def model_dump(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        """Create a representation that can be included in SCIM messages.

        Unless told otherwise, attributes are dumped with their camelCase
        names, :data:`None` values are excluded, and values are JSON
        compatible.
        """
        kwargs.setdefault("by_alias", True)
        kwargs.setdefault("exclude_none", True)
        kwargs.setdefault("mode", "json")
        return super().model_dump(*args, **kwargs)

    def model_dump_json(self, *args: Any, **kwargs: Any) -> str:
        """Create a JSON representation that can be included in SCIM messages."""
        kwargs.setdefault("by_alias", True)
        kwargs.setdefault("exclude_none", True)
        return super().model_dump_json(*args, **kwargs)

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import model_validator

from ..base import BaseModel
from ..exceptions import InvalidSyntaxException


def _check_object_body(cls: type, value: Any) -> Any:
    if not isinstance(value, Mapping | PydanticBaseModel):
        raise InvalidSyntaxException(
            detail=f"{cls.__name__} must be a JSON object, got {type(value).__name__}"
        ).as_pydantic_error()
    return value


class Message(BaseModel):
    """SCIM protocol messages as defined by :rfc:`RFC7644 §3.1 <7644#section-3.1>`."""

    schemas: list[str]
    """The "schemas" attribute is a REQUIRED attribute and is an array of
    Strings containing URIs that are used to indicate the namespaces of the
    SCIM schemas that define the attributes present in the current JSON
    structure."""

    @model_validator(mode="before")
    @classmethod
    def check_body(cls, value: Any) -> Any:
        """Reject message bodies that are not JSON objects."""
        return _check_object_body(cls, value)

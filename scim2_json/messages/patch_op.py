import copy
import logging
from enum import Enum
from typing import Any
from typing import Optional

from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator
from typing_extensions import Self

from ..base import BaseModel
from ..comparison import json_equal
from ..exceptions import InvalidPathException
from ..exceptions import InvalidValueException
from ..exceptions import SCIMException
from ..nodes import add_value
from ..nodes import remove_values
from ..nodes import replace_value
from ..path import Path
from .message import Message
from .message import _check_object_body

logger = logging.getLogger(__name__)


class PatchOperation(BaseModel):
    class Op(str, Enum):
        replace_ = "replace"
        remove = "remove"
        add = "add"

    op: Op
    """Each PATCH operation object MUST have exactly one "op" member, whose
    value indicates the operation to perform and MAY be one of "add", "remove",
    or "replace".

    .. note::

        For the sake of compatibility with Microsoft Entra,
        despite :rfc:`RFC7644 §3.5.2 <7644#section-3.5.2>`, op is case-insensitive.
    """

    path: Optional[Path] = None
    """The "path" attribute value is a String containing an attribute path
    describing the target of the operation."""

    value: Optional[Any] = None

    @model_validator(mode="before")
    @classmethod
    def check_body(cls, value: Any) -> Any:
        """Reject operations that are not JSON objects."""
        return _check_object_body(cls, value)

    @field_validator("op", mode="before")
    @classmethod
    def normalize_op(cls, v: Any) -> Any:
        """Ignore case for op.

        Microsoft Entra ID emits the values of op as Add, Replace, and Remove.
        """
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def validate_operation_requirements(self) -> Self:
        """Validate operation requirements according to RFC 7644."""
        # RFC 7644 Section 3.5.2.2: "If "path" is unspecified, the operation fails"
        if self.op == PatchOperation.Op.remove and (
            self.path is None or self.path == Path.root()
        ):
            raise InvalidPathException(
                detail="A path is required for remove operations"
            ).as_pydantic_error()

        # RFC 7644 Section 3.5.2.1: "Value is required for add operations"
        if self.op == PatchOperation.Op.add and self.value is None:
            raise InvalidValueException(
                detail="A value is required for add operations"
            ).as_pydantic_error()

        return self

    def apply(self, document: dict[str, Any]) -> None:
        """Apply the operation to a JSON document, in place.

        Operations without a path target the document itself.
        """
        path = self.path if self.path is not None else Path.root()
        match self.op:
            case PatchOperation.Op.add:
                add_value(path, document, self.value)
            case PatchOperation.Op.replace_:
                replace_value(path, document, self.value)
            case PatchOperation.Op.remove:
                remove_values(path, document)


class PatchOp(Message):
    """Patch Operation as defined in :rfc:`RFC7644 §3.5.2 <7644#section-3.5.2>`."""

    schemas: list[str] = ["urn:ietf:params:scim:api:messages:2.0:PatchOp"]

    operations: list[PatchOperation] = Field(
        ..., serialization_alias="Operations", min_length=1
    )
    """The body of an HTTP PATCH request MUST contain the attribute
    "Operations", whose value is an array of one or more PATCH operations."""

    def patch(self, document: dict[str, Any]) -> bool:
        """Apply all the operations to a JSON document, in place.

        Operations are applied in order. If one of them fails, the document
        is left untouched and the error is raised.

        :return: :data:`True` if the document was modified.
        :raises SCIMException: If an operation cannot be applied.
        """
        working = copy.deepcopy(document)
        for index, operation in enumerate(self.operations):
            try:
                operation.apply(working)
            except SCIMException as exc:
                logger.debug(
                    "PATCH operation %d (%s %s) failed: %s",
                    index,
                    operation.op.value,
                    operation.path,
                    exc,
                )
                raise

        if json_equal(working, document):
            return False

        document.clear()
        document.update(working)
        return True

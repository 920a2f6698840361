"""SCIM exceptions corresponding to RFC 7644 error types.

This module provides a hierarchy of exceptions raised while parsing paths and
filters, evaluating filters and mutating JSON documents. Each exception maps
to a SCIM protocol error and can be converted to a
:class:`~scim2_json.Error` response object or to a
:class:`~pydantic_core.PydanticCustomError` for use in Pydantic validators.
"""

from typing import TYPE_CHECKING
from typing import Any

from pydantic_core import PydanticCustomError

if TYPE_CHECKING:
    from .messages.error import Error


class SCIMException(Exception):
    """Base exception for SCIM protocol errors.

    Each subclass corresponds to a scimType defined in :rfc:`RFC 7644 Table 9 <7644#section-3.12>`.
    """

    status: int = 400
    scim_type: str = ""
    _default_detail: str = "A SCIM error occurred"

    def __init__(self, *, detail: str | None = None, **context: Any):
        self.context = context
        self._detail = detail
        super().__init__(detail or self._default_detail)

    @property
    def detail(self) -> str:
        """The error detail message."""
        return self._detail or self._default_detail

    def to_error(self) -> "Error":
        """Convert this exception to a SCIM Error response object."""
        from .messages.error import Error

        return Error(
            status=self.status,
            scim_type=self.scim_type or None,
            detail=str(self),
        )

    def as_pydantic_error(self) -> PydanticCustomError:
        """Convert to PydanticCustomError for use in Pydantic validators."""
        return PydanticCustomError(
            f"scim_{self.scim_type}" if self.scim_type else "scim_error",
            str(self),
            {"scim_type": self.scim_type, "status": self.status, **self.context},
        )


class InvalidFilterException(SCIMException):
    """The specified filter syntax was invalid.

    Also raised during evaluation when an ordering comparison is applied to
    boolean or binary values.

    Corresponds to scimType ``invalidFilter`` with HTTP status 400.

    :rfc:`RFC 7644 Section 3.4.2.2 <7644#section-3.4.2.2>`
    """

    status = 400
    scim_type = "invalidFilter"
    _default_detail = (
        "The specified filter syntax was invalid, "
        "or the specified attribute and filter comparison combination is not supported"
    )

    def __init__(
        self, *, filter: str | None = None, position: int | None = None, **kw: Any
    ):
        self.filter = filter
        self.position = position
        super().__init__(**kw)


class InvalidSyntaxException(SCIMException):
    """The request body message structure was invalid.

    Corresponds to scimType ``invalidSyntax`` with HTTP status 400.

    :rfc:`RFC 7644 Section 3.12 <7644#section-3.12>`
    """

    status = 400
    scim_type = "invalidSyntax"
    _default_detail = (
        "The request body message structure was invalid "
        "or did not conform to the request schema"
    )


class InvalidPathException(SCIMException):
    """The path attribute was invalid or malformed.

    Corresponds to scimType ``invalidPath`` with HTTP status 400.

    :rfc:`RFC 7644 Section 3.5.2 <7644#section-3.5.2>`
    """

    status = 400
    scim_type = "invalidPath"
    _default_detail = "The path attribute was invalid or malformed"

    def __init__(
        self, *, path: str | None = None, position: int | None = None, **kw: Any
    ):
        self.path = path
        self.position = position
        super().__init__(**kw)


class NoTargetException(SCIMException):
    """The specified path did not yield a target that could be operated on.

    Corresponds to scimType ``noTarget`` with HTTP status 400.

    :rfc:`RFC 7644 Section 3.5.2 <7644#section-3.5.2>`
    """

    status = 400
    scim_type = "noTarget"
    _default_detail = (
        "The specified path did not yield an attribute or attribute value "
        "that could be operated on"
    )

    def __init__(self, *, path: str | None = None, **kw: Any):
        self.path = path
        super().__init__(**kw)


class InvalidValueException(SCIMException):
    """A required value was missing or the value was not compatible.

    Corresponds to scimType ``invalidValue`` with HTTP status 400.

    :rfc:`RFC 7644 Section 3.12 <7644#section-3.12>`
    """

    status = 400
    scim_type = "invalidValue"
    _default_detail = (
        "A required value was missing, or the value specified was not compatible "
        "with the operation or attribute type, or resource schema"
    )

    def __init__(
        self, *, attribute: str | None = None, reason: str | None = None, **kw: Any
    ):
        self.attribute = attribute
        self.reason = reason
        super().__init__(**kw)


class AmbiguousPathException(SCIMException, ValueError):
    """The path references several values where a single one was expected.

    This is an application error rather than a syntax error, hence it is
    also a :class:`ValueError` and carries no scimType.
    """

    status = 400
    _default_detail = "The path references multiple values"

    def __init__(self, *, path: str | None = None, count: int | None = None, **kw: Any):
        self.path = path
        self.count = count
        super().__init__(**kw)


from typing import Any
from typing import Optional

from pydantic import Field

from .message import Message


class ListResponse(Message):
    schemas: list[str] = ["urn:ietf:params:scim:api:messages:2.0:ListResponse"]

    total_results: Optional[int] = None
    """The total number of results returned by the list or query operation."""

    start_index: Optional[int] = None
    """The 1-based index of the first result in the current set of list
    results."""

    items_per_page: Optional[int] = None
    """The number of resources returned in a list response page."""

    resources: Optional[list[dict[str, Any]]] = Field(
        None, serialization_alias="Resources"
    )
    """A multi-valued list of complex objects containing the requested
    resources."""

from typing import Optional

from pydantic import field_validator
from pydantic import model_validator
from typing_extensions import Self

from ..filters import Filter
from ..path import Path
from ..sort import SortOrder
from .message import Message


class SearchRequest(Message):
    """SearchRequest object defined at :rfc:`RFC7644 §3.4.3 <7644#section-3.4.3>`."""

    schemas: list[str] = ["urn:ietf:params:scim:api:messages:2.0:SearchRequest"]

    attributes: Optional[list[Path]] = None
    """A multi-valued list of strings indicating the names of resource
    attributes to return in the response, overriding the set of attributes
    that would be returned by default."""

    excluded_attributes: Optional[list[Path]] = None
    """A multi-valued list of strings indicating the names of resource
    attributes to be removed from the default set of attributes to return."""

    filter: Optional[Filter] = None
    """The filter string used to request a subset of resources."""

    sort_by: Optional[Path] = None
    """A string indicating the attribute whose value SHALL be used to order
    the returned responses."""

    sort_order: Optional[SortOrder] = None
    """A string indicating the order in which the "sortBy" parameter is
    applied."""

    start_index: Optional[int] = None
    """An integer indicating the 1-based index of the first query result."""

    count: Optional[int] = None
    """An integer indicating the desired maximum number of query results per
    page."""

    @field_validator("start_index")
    @classmethod
    def start_index_floor(cls, value: Optional[int]) -> Optional[int]:
        """A value less than 1 SHALL be interpreted as 1.

        :rfc:`RFC7644 §3.4.2.4 <7644#section-3.4.2.4>`
        """
        return None if value is None else max(1, value)

    @field_validator("count")
    @classmethod
    def count_floor(cls, value: Optional[int]) -> Optional[int]:
        """A negative value SHALL be interpreted as 0.

        :rfc:`RFC7644 §3.4.2.4 <7644#section-3.4.2.4>`
        """
        return None if value is None else max(0, value)

    @model_validator(mode="after")
    def attributes_validator(self) -> Self:
        if self.attributes and self.excluded_attributes:
            raise ValueError(
                "'attributes' and 'excluded_attributes' are mutually exclusive"
            )

        return self


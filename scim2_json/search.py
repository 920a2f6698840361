from collections.abc import Iterable
from typing import Any

from .evaluator import evaluate
from .messages.list_response import ListResponse
from .messages.search_request import SearchRequest
from .projection import exclude_attributes
from .projection import include_attributes
from .sort import SortOrder
from .sort import sort_resources


def search(
    resources: Iterable[dict[str, Any]], request: SearchRequest
) -> ListResponse:
    """Filter, sort and paginate JSON resources as a SCIM query would.

    ``totalResults`` counts every resource matching the filter, while
    ``Resources`` only holds the requested page. ``startIndex`` and
    ``itemsPerPage`` are only set when the request asks for pagination.
    Returned resources are copies trimmed to the ``attributes`` or
    ``excludedAttributes`` of the request, or the resources themselves when
    it has neither.

    :raises InvalidFilterException: If the filter cannot be evaluated on
        one of the resources.
    """
    matched = [
        resource
        for resource in resources
        if request.filter is None or evaluate(request.filter, resource)
    ]

    if request.sort_by is not None:
        matched = sort_resources(
            matched, request.sort_by, request.sort_order or SortOrder.ascending
        )

    start = (request.start_index or 1) - 1
    stop = None if request.count is None else start + request.count
    page = matched[start:stop]
    if request.attributes:
        page = [include_attributes(resource, request.attributes) for resource in page]
    elif request.excluded_attributes:
        page = [
            exclude_attributes(resource, request.excluded_attributes)
            for resource in page
        ]

    paginated = request.start_index is not None or request.count is not None
    return ListResponse(
        total_results=len(matched),
        start_index=(request.start_index or 1) if paginated else None,
        items_per_page=len(page) if paginated else None,
        resources=page,
    )

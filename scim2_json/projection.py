"""Selection of the attributes returned with resources.

See :rfc:`RFC7644 §3.4.2.5 <7644#section-3.4.2.5>` about the ``attributes``
and ``excludedAttributes`` parameters. Value filters in the given paths are
ignored: a path always selects every value of its attribute.
"""

import copy
from collections.abc import Iterable
from typing import Any

from .nodes import _elements
from .nodes import _to_path
from .nodes import remove_values
from .path import ID
from .path import SCHEMAS
from .path import Path

ALWAYS_RETURNED = (SCHEMAS, ID)
"""Attributes kept in every projection."""


def include_attributes(
    resource: dict[str, Any], attributes: Iterable[Path | str]
) -> dict[str, Any]:
    """Return a copy of a resource holding only some of its attributes.

    Selecting a complex attribute keeps all of its sub-attributes, selecting
    a sub-attribute of a multi-valued attribute keeps it in every value.
    """
    tree: dict[str, Any] = {}
    for path in (*ALWAYS_RETURNED, *attributes):
        elements = _elements(_to_path(path).without_filters(), resource)
        if not elements:
            return copy.deepcopy(resource)

        node = tree
        for element in elements[:-1]:
            node = node.setdefault(element.attribute.lower(), {})
            if node is None:
                break
        else:
            node[elements[-1].attribute.lower()] = None

    return _project(resource, tree)


def _project(node: dict[str, Any], tree: dict[str, Any]) -> dict[str, Any]:
    # None in the tree selects the whole value
    result: dict[str, Any] = {}
    for key, value in node.items():
        name = key.lower()
        if name not in tree:
            continue

        selection = tree[name]
        if selection is None:
            result[key] = copy.deepcopy(value)
        elif isinstance(value, dict):
            projected = _project(value, selection)
            if projected:
                result[key] = projected
        elif isinstance(value, list):
            items = [
                _project(item, selection) for item in value if isinstance(item, dict)
            ]
            items = [item for item in items if item]
            if items:
                result[key] = items
    return result


def exclude_attributes(
    resource: dict[str, Any], attributes: Iterable[Path | str]
) -> dict[str, Any]:
    """Return a copy of a resource without some of its attributes.

    ``schemas`` and ``id`` are never excluded.
    """
    document = copy.deepcopy(resource)
    for path in attributes:
        path = _to_path(path).without_filters()
        if path in ALWAYS_RETURNED or not _elements(path, document):
            continue
        remove_values(path, document)
    return document

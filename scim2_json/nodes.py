"""Reading and modifying JSON documents with SCIM paths.

Documents are plain :class:`dict` objects, as returned by :func:`json.loads`.
Attribute lookups are case-insensitive, and modifications reuse the
spelling of existing keys.

Attributes of schema extensions are stored in an object whose key is the
extension URN, as in::

    {
        "schemas": [
            "urn:ietf:params:scim:schemas:core:2.0:User",
            "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User",
        ],
        "userName": "bjensen",
        "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User": {
            "employeeNumber": "701984",
        },
    }

so ``urn:ietf:params:scim:schemas:extension:enterprise:2.0:User:employeeNumber``
is looked up in the extension object. A path qualified with the URN of the
main schema, that is the first item of ``schemas``, is looked up at the top
level of the document.
"""

import copy
import logging
from typing import Any

from . import evaluator
from .comparison import json_equal
from .exceptions import AmbiguousPathException
from .exceptions import InvalidPathException
from .exceptions import InvalidValueException
from .exceptions import NoTargetException
from .filters import Filter
from .path import Element
from .path import Path

logger = logging.getLogger(__name__)


def _to_path(path: Path | str) -> Path:
    return path if isinstance(path, Path) else Path.from_string(path)


def _find_key(node: dict[str, Any], attribute: str) -> str | None:
    if attribute in node:
        return attribute
    lowered = attribute.lower()
    for key in node:
        if isinstance(key, str) and key.lower() == lowered:
            return key
    return None


def _is_main_schema(root: dict[str, Any], schema_urn: str) -> bool:
    schemas = root.get(_find_key(root, "schemas") or "schemas")
    return (
        isinstance(schemas, list)
        and bool(schemas)
        and isinstance(schemas[0], str)
        and schemas[0].lower() == schema_urn.lower()
    )


def _elements(path: Path, root: dict[str, Any]) -> tuple[Element, ...]:
    """Return the elements to walk in a document.

    Extension URNs become the first element, so the extension object is
    traversed like any other complex attribute.
    """
    if path.schema_urn is None:
        return path.elements
    if _find_key(root, path.schema_urn) is None and _is_main_schema(
        root, path.schema_urn
    ):
        return path.elements
    return (Element(path.schema_urn), *path.elements)


def _matching(items: list[Any], value_filter: Filter) -> list[Any]:
    return [item for item in items if evaluator.evaluate(value_filter, item)]


def _is_empty_value(value: Any) -> bool:
    return value is None or (isinstance(value, list) and not value)


def _containers(
    root: dict[str, Any], elements: tuple[Element, ...]
) -> list[dict[str, Any]]:
    """Walk the elements and return the objects reached, without modifying anything."""
    parents = [root]
    for element in elements:
        children: list[dict[str, Any]] = []
        for parent in parents:
            key = _find_key(parent, element.attribute)
            if key is None:
                continue
            child = parent[key]
            if isinstance(child, list):
                if element.value_filter is not None:
                    child = _matching(child, element.value_filter)
                children.extend(item for item in child if isinstance(item, dict))
            elif isinstance(child, dict):
                if element.value_filter is None or evaluator.evaluate(
                    element.value_filter, child
                ):
                    children.append(child)
        parents = children
    return parents


def _containers_for_update(
    root: dict[str, Any], elements: tuple[Element, ...], path: Path
) -> list[dict[str, Any]]:
    """Walk the elements and return the objects reached.

    Missing complex attributes are created on the way.

    :raises NoTargetException: If an element designates a single value, or
        if a value filter matches nothing.
    """
    parents = [root]
    for element in elements:
        children: list[dict[str, Any]] = []
        for parent in parents:
            key = _find_key(parent, element.attribute)
            child = parent[key] if key is not None else None

            if child is None:
                if element.value_filter is not None:
                    raise NoTargetException(
                        detail=(
                            f"Attribute '{element.attribute}' does not have a "
                            f"value matching the filter '{element.value_filter}'"
                        ),
                        path=str(path),
                    )
                child = {}
                parent[key or element.attribute] = child

            if isinstance(child, list):
                if element.value_filter is not None:
                    child = _matching(child, element.value_filter)
                matched = [item for item in child if isinstance(item, dict)]
                if not matched:
                    raise NoTargetException(
                        detail=(
                            f"Attribute '{element.attribute}' does not have a "
                            "value matching the filter "
                            f"'{element.value_filter}'"
                            if element.value_filter is not None
                            else f"Attribute '{element.attribute}' does not "
                            "have any complex value"
                        ),
                        path=str(path),
                    )
                children.extend(matched)

            elif isinstance(child, dict):
                if element.value_filter is not None and not evaluator.evaluate(
                    element.value_filter, child
                ):
                    raise NoTargetException(
                        detail=(
                            f"Attribute '{element.attribute}' does not have a "
                            f"value matching the filter '{element.value_filter}'"
                        ),
                        path=str(path),
                    )
                children.append(child)

            else:
                raise NoTargetException(
                    detail=(
                        f"Attribute '{element.attribute}' does not have a "
                        "multi-valued or complex value"
                    ),
                    path=str(path),
                )
        parents = children
    return parents


def _gather(parent: dict[str, Any], element: Element, remove: bool) -> list[Any]:
    """Collect, and possibly remove, the values an element designates in an object."""
    key = _find_key(parent, element.attribute)
    if key is None:
        return []

    node = parent[key]
    if isinstance(node, list):
        if element.value_filter is None:
            if remove:
                del parent[key]
            return [node] if node else []

        matched, kept = [], []
        for item in node:
            if evaluator.evaluate(element.value_filter, item):
                matched.append(item)
            else:
                kept.append(item)
        if remove and matched:
            if kept:
                node[:] = kept
            else:
                del parent[key]
        return [matched] if matched else []

    if node is None:
        if remove:
            del parent[key]
        return []

    if element.value_filter is not None and not evaluator.evaluate(
        element.value_filter, node
    ):
        return []

    if remove:
        del parent[key]
    return [node]


def get_values(path: Path | str, root: dict[str, Any]) -> list[Any]:
    """Return the values a path designates in a document.

    Values are not copied. A multi-valued attribute is returned as one
    list, holding only the values matching the path value filter if any::

        >>> get_values('emails[type eq "work"]', user)
        [[{'type': 'work', 'value': 'bjensen@example.com'}]]

    When the path goes through a multi-valued complex attribute, there is
    one result per complex value::

        >>> get_values("emails.value", user)
        ['bjensen@example.com', 'babs@jensen.org']

    Missing attributes and :data:`None` values are ignored.
    """
    path = _to_path(path)
    elements = _elements(path, root)
    if not elements:
        return [root]

    values: list[Any] = []
    for parent in _containers(root, elements[:-1]):
        values.extend(_gather(parent, elements[-1], remove=False))
    return values


def get_value(path: Path | str, root: dict[str, Any]) -> Any:
    """Return the single value a path designates in a document.

    :return: The value, or :data:`None` if the path designates nothing.
    :raises AmbiguousPathException: If the path designates several values.
    """
    values = get_values(path, root)
    if not values:
        return None
    if len(values) > 1:
        raise AmbiguousPathException(
            detail=f"Path '{path}' references {len(values)} values",
            path=str(path),
            count=len(values),
        )
    return values[0]


def path_exists(path: Path | str, root: dict[str, Any]) -> bool:
    """Tell whether a path designates an attribute of a document.

    Attributes holding :data:`None` exist. When the last element has a
    value filter, at least one value must match it.
    """
    path = _to_path(path)
    elements = _elements(path, root)
    if not elements:
        return True

    leaf = elements[-1]
    for parent in _containers(root, elements[:-1]):
        if leaf.value_filter is not None:
            if _gather(parent, leaf, remove=False):
                return True
        elif _find_key(parent, leaf.attribute) is not None:
            return True
    return False


def _set(parent: dict[str, Any], attribute: str, value: Any) -> None:
    key = _find_key(parent, attribute)
    if _is_empty_value(value):
        if key is not None:
            del parent[key]
        return
    parent[key or attribute] = copy.deepcopy(value)


def _replace_matching(
    parent: dict[str, Any], element: Element, value: Any, path: Path
) -> None:
    key = _find_key(parent, element.attribute)
    node = parent[key] if key is not None else None
    matched = False
    if isinstance(node, list):
        for index, item in enumerate(node):
            if not evaluator.evaluate(element.value_filter, item):
                continue
            matched = True
            if isinstance(item, dict):
                if not isinstance(value, dict):
                    raise InvalidValueException(
                        detail=(
                            f"Values of attribute '{element.attribute}' are "
                            "complex and can only be replaced by an object"
                        ),
                        attribute=element.attribute,
                    )
                for attribute, sub_value in value.items():
                    _set(item, attribute, sub_value)
            else:
                node[index] = copy.deepcopy(value)

    if not matched:
        raise NoTargetException(
            detail=(
                f"Attribute '{element.attribute}' does not have a value "
                f"matching the filter '{element.value_filter}'"
            ),
            path=str(path),
        )


def replace_value(path: Path | str, root: dict[str, Any], value: Any) -> None:
    """Replace the values a path designates in a document.

    Replacing with :data:`None` or an empty list removes the attribute.
    With a root path, ``value`` must be an object whose attributes replace
    the ones of the document. Missing complex attributes on the way are
    created.

    :raises NoTargetException: If the path goes through a single value, or
        if one of its value filters matches nothing.
    :raises InvalidValueException: If the value does not fit the target.
    """
    path = _to_path(path)
    elements = _elements(path, root)
    try:
        if not elements:
            if not isinstance(value, dict):
                raise InvalidValueException(
                    detail="Replacing without a path requires an object value",
                    reason="value must be an object",
                )
            for attribute, sub_value in value.items():
                _set(root, attribute, sub_value)
            return

        leaf = elements[-1]
        for parent in _containers_for_update(root, elements[:-1], path):
            if leaf.value_filter is None:
                _set(parent, leaf.attribute, value)
            else:
                _replace_matching(parent, leaf, value, path)
    except (NoTargetException, InvalidValueException) as exc:
        logger.debug("Unable to replace %r: %s", str(path), exc)
        raise


def _append_distinct(target: list[Any], values: list[Any]) -> None:
    for value in values:
        if not any(json_equal(value, item) for item in target):
            target.append(copy.deepcopy(value))


def _merge(target: dict[str, Any], value: dict[str, Any]) -> None:
    """Add the attributes of an object to another one, recursively."""
    for attribute, sub_value in value.items():
        if _is_empty_value(sub_value):
            continue
        key = _find_key(target, attribute)
        current = target[key] if key is not None else None
        if isinstance(current, list):
            _append_distinct(
                current, sub_value if isinstance(sub_value, list) else [sub_value]
            )
        elif isinstance(current, dict) and isinstance(sub_value, dict):
            _merge(current, sub_value)
        else:
            target[key or attribute] = copy.deepcopy(sub_value)


def _add(parent: dict[str, Any], attribute: str, value: Any) -> None:
    key = _find_key(parent, attribute)
    current = parent[key] if key is not None else None

    if current is None:
        if _is_empty_value(value):
            return
        if isinstance(value, dict | list):
            parent[key or attribute] = copy.deepcopy(value)
        else:
            parent[key or attribute] = [copy.deepcopy(value)]

    elif isinstance(current, list):
        _append_distinct(current, value if isinstance(value, list) else [value])

    elif isinstance(current, dict) and isinstance(value, dict):
        _merge(current, value)

    else:
        raise InvalidValueException(
            detail=(
                f"Attribute '{attribute}' already has a value that "
                "cannot receive new values"
            ),
            attribute=attribute,
        )


def add_value(path: Path | str, root: dict[str, Any], value: Any) -> None:
    """Add values to the attribute a path designates in a document.

    ``value`` can be a single value or a list of values. They are appended
    to multi-valued attributes, skipping values already present. Objects
    are merged into complex attributes. A missing attribute is created, as
    a list unless ``value`` is an object. With a root path, ``value`` must
    be an object whose attributes are merged into the document.

    :raises InvalidPathException: If the last element of the path has a
        value filter.
    :raises InvalidValueException: If the attribute holds a single value.
    :raises NoTargetException: If the path goes through a single value, or
        if one of its value filters matches nothing.
    """
    path = _to_path(path)
    elements = _elements(path, root)
    try:
        if not elements:
            if not isinstance(value, dict):
                raise InvalidValueException(
                    detail="Adding without a path requires an object value",
                    reason="value must be an object",
                )
            _merge(root, value)
            return

        leaf = elements[-1]
        if leaf.value_filter is not None:
            raise InvalidPathException(
                detail=f"Cannot add values to a filtered attribute '{leaf}'",
                path=str(path),
            )

        for parent in _containers_for_update(root, elements[:-1], path):
            _add(parent, leaf.attribute, value)
    except (InvalidPathException, InvalidValueException, NoTargetException) as exc:
        logger.debug("Unable to add to %r: %s", str(path), exc)
        raise


def remove_values(path: Path | str, root: dict[str, Any]) -> list[Any]:
    """Remove the values a path designates from a document.

    With a value filter, only the matching values are removed from the
    multi-valued attribute, and the attribute itself is removed when no
    value remains.

    :return: The removed values, with the same shape as :func:`get_values`.
    :raises InvalidPathException: If the path is a root path.
    """
    path = _to_path(path)
    elements = _elements(path, root)
    if not elements:
        logger.debug("Unable to remove %r: root path", str(path))
        raise InvalidPathException(
            detail="The resource root cannot be removed", path=str(path)
        )

    values: list[Any] = []
    for parent in _containers(root, elements[:-1]):
        values.extend(_gather(parent, elements[-1], remove=True))
    return values

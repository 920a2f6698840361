"""Computation of the PATCH operations turning a JSON document into another.

Attributes are compared one by one. Changed values are replaced with path
operations, attributes that are new in the target are gathered in a single
path-less ``add`` operation at the end. Values of multi-valued attributes are
patched individually when a value filter identifies each of them, otherwise
the whole array is replaced.
"""

import copy
import logging
from typing import Any

from .comparison import _type_rank
from .comparison import json_equal
from .evaluator import VALUE_PATH
from .evaluator import evaluate
from .filters import Filter
from .messages.patch_op import PatchOperation
from .nodes import _find_key
from .path import Path
from .urn import is_urn
from .utils import _is_scalar

logger = logging.getLogger(__name__)

# sub-attributes of multi-valued attributes, weighted by how likely they
# identify a value
_MATCH_WEIGHTS = {"value": 3, "$ref": 3, "type": 2, "display": 2, "primary": 0}


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, list) and not value)


def _same_type(left: Any, right: Any) -> bool:
    if isinstance(left, str | bytes) and isinstance(right, str | bytes):
        return True
    return _type_rank(left) == _type_rank(right)


def _child_path(parent: Path, key: str) -> Path:
    if parent == Path.root() and is_urn(key):
        try:
            return Path.root(key)
        except ValueError:
            logger.debug("Key %r is not a valid schema URN", key)
    return parent.attribute(key)


def _replace(path: Path, value: Any) -> PatchOperation:
    return PatchOperation(
        op=PatchOperation.Op.replace_, path=path, value=copy.deepcopy(value)
    )


def _remove(path: Path) -> PatchOperation:
    return PatchOperation(op=PatchOperation.Op.remove, path=path)


def diff(
    source: dict[str, Any], target: dict[str, Any], remove_missing: bool = False
) -> list[PatchOperation]:
    """Return the PATCH operations that turn ``source`` into ``target``.

    :param source: The document to patch.
    :param target: What the document should look like once patched.
    :param remove_missing: Whether attributes of ``source`` that are missing
        from ``target`` should be removed. Attributes set to :data:`None` or
        to an empty list in ``target`` are always removed.
    :return: Operations to apply in order, for instance with
        :meth:`PatchOp.patch <scim2_json.PatchOp.patch>`.
    """
    operations: list[PatchOperation] = []
    additions = _diff_object(Path.root(), source, target, operations, remove_missing)
    if additions:
        operations.append(PatchOperation(op=PatchOperation.Op.add, value=additions))

    logger.debug("Computed %d PATCH operations", len(operations))
    return operations


def _diff_object(
    path: Path,
    source: dict[str, Any],
    target: dict[str, Any],
    operations: list[PatchOperation],
    remove_missing: bool,
) -> dict[str, Any]:
    """Append the operations updating the attributes ``source`` and ``target`` share.

    :return: The attributes to add to ``source``.
    """
    additions: dict[str, Any] = {}
    for key, source_value in source.items():
        child = _child_path(path, key)
        target_key = _find_key(target, key)
        if target_key is None:
            if remove_missing and not _is_empty(source_value):
                operations.append(_remove(child))
            continue

        target_value = target[target_key]
        if _is_empty(target_value):
            if not _is_empty(source_value):
                operations.append(_remove(child))

        elif _is_empty(source_value):
            additions[key] = copy.deepcopy(target_value)

        elif not _same_type(source_value, target_value):
            operations.append(_replace(child, target_value))

        elif isinstance(source_value, dict):
            nested = _diff_object(
                child, source_value, target_value, operations, remove_missing
            )
            if nested:
                additions[key] = nested

        elif isinstance(source_value, list):
            added = _diff_array(
                child, source_value, target_value, operations, remove_missing
            )
            if added:
                additions[key] = added

        elif not json_equal(source_value, target_value):
            operations.append(_replace(child, target_value))

    for key, target_value in target.items():
        if _find_key(source, key) is None and not _is_empty(target_value):
            additions[key] = copy.deepcopy(target_value)
    return additions


def _value_filter(value: Any) -> Filter | None:
    """Build a filter selecting a value of a multi-valued attribute."""
    if value is not None and _is_scalar(value):
        return Filter.eq(VALUE_PATH, value)

    if not isinstance(value, dict):
        return None

    components: list[Filter] = []
    for key, sub_value in value.items():
        if not _is_scalar(sub_value):
            return None
        components.append(Filter.eq(Path.root().attribute(key), sub_value))

    if not components:
        return None
    if len(components) == 1:
        return components[0]
    return Filter.and_(*components)


def _matching_index(value: Any, candidates: list[Any]) -> int | None:
    """Find the candidate ``value`` most likely became."""
    if not isinstance(value, dict):
        for index, candidate in enumerate(candidates):
            if json_equal(value, candidate):
                return index
        return None

    best_score, best_index = 0, None
    for index, candidate in enumerate(candidates):
        if not isinstance(candidate, dict):
            continue
        score = sum(
            _MATCH_WEIGHTS.get(key, 1)
            for key, sub_value in value.items()
            if key in candidate and json_equal(sub_value, candidate[key])
        )
        if score > best_score:
            best_score, best_index = score, index
    return best_index


def _item_changes(
    source: dict[str, Any], target: dict[str, Any], remove_missing: bool
) -> dict[str, Any]:
    """Return the sub-attributes to replace in a complex value.

    :data:`None` marks the sub-attributes to remove.
    """
    changes: dict[str, Any] = {}
    for key, target_value in target.items():
        source_key = _find_key(source, key)
        if source_key is None:
            if not _is_empty(target_value):
                changes[key] = copy.deepcopy(target_value)
        elif not json_equal(source[source_key], target_value):
            changes[source_key] = copy.deepcopy(target_value)

    if remove_missing:
        for key, source_value in source.items():
            if _find_key(target, key) is None and not _is_empty(source_value):
                changes[key] = None
    return changes


def _diff_array(
    path: Path,
    source: list[Any],
    target: list[Any],
    operations: list[PatchOperation],
    remove_missing: bool,
) -> list[Any]:
    """Append the operations updating the values of a multi-valued attribute.

    :return: The values to add to the attribute.
    """
    remaining = list(target)
    removals: list[PatchOperation] = []
    replacements: list[PatchOperation] = []

    for value in source:
        value_filter = _value_filter(value)
        if (
            path.is_root
            or value_filter is None
            or sum(1 for item in source if evaluate(value_filter, item)) != 1
        ):
            logger.debug("Replacing all the values of %r", str(path))
            operations.append(_replace(path, target))
            return []

        value_path = path.replace(len(path) - 1, path[-1].attribute, value_filter)
        index = _matching_index(value, remaining)
        if index is None:
            removals.append(_remove(value_path))
            continue

        matched = remaining.pop(index)
        if isinstance(value, dict) and isinstance(matched, dict):
            changes = _item_changes(value, matched, remove_missing)
            if changes:
                replacements.append(_replace(value_path, changes))

    if len(target) <= len(remaining) + len(removals) + len(replacements):
        logger.debug("Replacing all the values of %r", str(path))
        operations.append(_replace(path, target))
        return []

    operations.extend(removals)
    operations.extend(replacements)
    return remaining

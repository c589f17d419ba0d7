"""
Merge primitives for parsed compliance document values.

Document content is plain decoded YAML/JSON: ``None``, booleans, numbers,
strings, lists and dicts. Merging dispatches on those shapes.
"""

from __future__ import annotations

import copy
from typing import Any

KNOCKOUT_PREFIX = "--"


def is_mapping(value: Any) -> bool:
    return isinstance(value, dict)


def is_sequence(value: Any) -> bool:
    return isinstance(value, list)


def clone(value: Any) -> Any:
    """Deep copy a document value so later merges never alias catalog data."""
    return copy.deepcopy(value)


def deep_merge(
    dest: Any,
    source: Any,
    knockout_prefix: str | None = None,
) -> Any:
    """Merge ``source`` into ``dest`` and return the result.

    Mappings are merged key by key. Any other incoming value replaces the
    existing one. When ``knockout_prefix`` is set, an incoming key such as
    ``--name`` removes ``name`` from the result instead of being merged.

    ``dest`` is updated in place when it is a mapping; ``source`` is never
    aliased into the result.

    Args:
        dest: Existing value
        source: Incoming value
        knockout_prefix: Prefix marking keys to delete, or None to disable

    Returns:
        The merged value
    """
    if not (is_mapping(dest) and is_mapping(source)):
        return clone(source)

    for key, incoming in source.items():
        if knockout_prefix and isinstance(key, str) and key.startswith(knockout_prefix):
            dest.pop(key[len(knockout_prefix):], None)
            continue

        if key in dest and is_mapping(dest[key]) and is_mapping(incoming):
            dest[key] = deep_merge(dest[key], incoming, knockout_prefix)
        elif knockout_prefix and is_mapping(incoming):
            # Knockout keys are consumed even when there is nothing to remove
            dest[key] = deep_merge({}, incoming, knockout_prefix)
        else:
            dest[key] = clone(incoming)

    return dest


def unique_concat(existing: list, incoming: list) -> list:
    """Concatenate two lists, keeping the first occurrence of each item."""
    result: list = []
    for item in existing + incoming:
        # Items may be unhashable (dicts, lists)
        if item not in result:
            result.append(item)
    return result


def merge_values(existing: Any, incoming: Any) -> Any:
    """Type-directed merge used when several specifications share a parameter.

    - list + list: concatenate and de-duplicate, first occurrence wins
    - dict + dict: deep merge, incoming wins on leaves, no knockout
    - scalar existing: replaced by the incoming value

    Raises:
        TypeError: existing is a list or dict and incoming is not the same shape
    """
    if is_sequence(existing):
        if not is_sequence(incoming):
            raise TypeError(
                f"cannot merge {type(incoming).__name__} into {type(existing).__name__}"
            )
        return unique_concat(existing, clone(incoming))

    if is_mapping(existing):
        if not is_mapping(incoming):
            raise TypeError(
                f"cannot merge {type(incoming).__name__} into {type(existing).__name__}"
            )
        return deep_merge(existing, incoming)

    return clone(incoming)

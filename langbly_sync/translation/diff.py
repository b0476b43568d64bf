"""
Incremental diff and merge for keyed locale documents.

compute_diff picks the source entries the target does not have yet;
merge_translations combines new translations, the existing target and the
source into the final document, always in source order.
"""

import copy
from typing import Any, Dict, List, Mapping, Optional

from langbly_sync.formats.structured import (
    FlatEntry,
    StringLeaf,
    flat_map,
    from_tree,
    to_tree,
    unflatten,
    walk_leaves,
)


def compute_diff(
    source_entries: List[FlatEntry],
    existing_target: Optional[Dict[str, Any]],
) -> List[FlatEntry]:
    """
    Compute which entries need translation.

    Without an existing target everything is returned. Otherwise only entries
    whose key is missing from the target are returned. A changed source value
    under a key the target already has is not detected: no previous source
    snapshot is stored, and keeping the existing value is what preserves
    manual edits in the target.
    """
    if existing_target is None:
        return list(source_entries)

    existing_keys = flat_map(existing_target)
    return [entry for entry in source_entries if entry.key not in existing_keys]


def merge_translations(
    source_entries: List[FlatEntry],
    translated: Mapping[str, str],
    existing_target: Optional[Dict[str, Any]],
    source_doc: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Merge new translations with the existing target.

    For each source key the value is the new translation, else the existing
    target value, else the source value. Key order follows the source.

    When ``source_doc`` is given its non-string leaves (numbers, booleans,
    null, arrays, empty maps) are carried over at their source position.
    """
    existing = flat_map(existing_target)

    def resolve(key: str, source_value: str) -> str:
        if key in translated:
            return translated[key]
        if key in existing:
            return existing[key]
        return source_value

    if source_doc is None:
        return unflatten([(entry.key, resolve(entry.key, entry.value)) for entry in source_entries])

    source_keys = {entry.key for entry in source_entries}
    merged = []
    for path, leaf in walk_leaves(to_tree(source_doc)):
        if isinstance(leaf, StringLeaf):
            if path in source_keys:
                merged.append((path, resolve(path, leaf.value)))
        else:
            merged.append((path, copy.deepcopy(from_tree(leaf))))
    return unflatten(merged)

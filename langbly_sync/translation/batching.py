"""
Batch scheduling for translation requests.
"""

from typing import List, Sequence

from langbly_sync.config import DEFAULT_MAX_BATCH_CHARS, DEFAULT_MAX_BATCH_ITEMS


def batch_strings(
    strings: Sequence[str],
    max_items: int = DEFAULT_MAX_BATCH_ITEMS,
    max_chars: int = DEFAULT_MAX_BATCH_CHARS,
) -> List[List[str]]:
    """
    Split strings into batches that respect both a maximum item count and a
    maximum total character count.

    Greedy, single pass, order preserving. A string longer than ``max_chars``
    always goes in a batch of its own.

    Example:
        >>> batch_strings(["hello", "world", "foo"], max_items=50, max_chars=8)
        [['hello'], ['world', 'foo']]
    """
    if max_items < 1:
        raise ValueError(f"max_items must be at least 1, got {max_items}")
    if max_chars < 1:
        raise ValueError(f"max_chars must be at least 1, got {max_chars}")

    batches: List[List[str]] = []
    current_batch: List[str] = []
    current_chars = 0

    for text in strings:
        size = len(text)

        if size > max_chars:
            if current_batch:
                batches.append(current_batch)
                current_batch = []
                current_chars = 0
            batches.append([text])
            continue

        if current_batch and (len(current_batch) >= max_items or current_chars + size > max_chars):
            batches.append(current_batch)
            current_batch = []
            current_chars = 0

        current_batch.append(text)
        current_chars += size

    if current_batch:
        batches.append(current_batch)

    return batches


def count_characters(strings: Sequence[str]) -> int:
    """Count total characters across strings."""
    return sum(len(text) for text in strings)

"""
Translation Processing Module

Contains the keyed-entry translation step:
- Placeholder protection of every pending value
- Batching by item count and character budget
- Sequential batch translation with cancellation and progress updates
- Placeholder restoration keyed back to the entry paths
"""

from typing import Callable, Dict, List, Optional

from langbly_sync.config import DEFAULT_MAX_BATCH_CHARS, DEFAULT_MAX_BATCH_ITEMS
from langbly_sync.exceptions import PipelineCancelled
from langbly_sync.formats.structured import FlatEntry
from langbly_sync.logger import get_logger
from langbly_sync.translation.batching import batch_strings
from langbly_sync.translation.placeholders import protect_placeholders, restore_placeholders

logger = get_logger(__name__)


def translate_entries_with_placeholders(
    client,
    entries: List[FlatEntry],
    source_lang: str,
    target_lang: str,
    max_items: int = DEFAULT_MAX_BATCH_ITEMS,
    max_chars: int = DEFAULT_MAX_BATCH_CHARS,
    cancel_check: Optional[Callable[[], bool]] = None,
    on_batch_done: Optional[Callable[[int, int, int], None]] = None,
) -> Dict[str, str]:
    """
    Translate entries in batches with placeholder protection.

    Protects placeholders ({name}, %s, ...) before sending to the API, then
    restores them in the translated output. Batches are sent strictly in
    order; results are matched back to entries by position.

    Args:
        client: TranslationClient (anything with translate_batch)
        entries: Entries to translate
        source_lang: Source language code
        target_lang: Target language code
        max_items: Maximum strings per request
        max_chars: Maximum characters per request
        cancel_check: Polled before each batch; True aborts the pair
        on_batch_done: Called with (batch_number, total_batches, batch_size)

    Returns:
        Mapping of entry key to restored translation

    Raises:
        PipelineCancelled: If cancel_check returned True between batches
    """
    protected = [protect_placeholders(entry.value) for entry in entries]
    batches = batch_strings([p.text for p in protected], max_items, max_chars)
    translated: Dict[str, str] = {}
    entry_index = 0

    for batch_idx, batch in enumerate(batches):
        if cancel_check and cancel_check():
            logger.info(f"  {target_lang}: cancelled before batch {batch_idx + 1}/{len(batches)}")
            raise PipelineCancelled()

        logger.debug(f"  Batch {batch_idx + 1}/{len(batches)}: {len(batch)} strings")
        results = client.translate_batch(batch, target_lang, source=source_lang)

        for result in results:
            entry = entries[entry_index]
            translated[entry.key] = restore_placeholders(result.text, protected[entry_index].placeholders)
            entry_index += 1

        if on_batch_done:
            on_batch_done(batch_idx + 1, len(batches), len(batch))

    return translated

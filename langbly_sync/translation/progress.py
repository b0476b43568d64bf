"""
Translation Progress Data Class

Contains the TranslationProgress dataclass passed to progress callbacks.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class TranslationProgress:
    """Progress information for an ongoing (file, language) pair."""
    source_file: str
    language: str
    language_name: str
    total_pairs: int
    completed_pairs: int
    phase: str = "translating"       # "checking", "translating", "batch_done", "skipped", "written", "dry_run"
    # Batch progress fields
    current_batch: int = 0           # Current batch number (1-indexed)
    total_batches: int = 0           # Total batches for current pair
    batch_items_count: int = 0       # Number of strings in current batch
    # Diff statistics
    total_keys: int = 0              # Translatable units in the source
    pending_keys: int = 0            # Units the target is missing
    characters: int = 0              # Source characters submitted for this pair

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

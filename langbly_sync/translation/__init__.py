"""
Translation module - Incremental translation pipeline

This module provides:
- manager: TranslationManager orchestrating (file, language) pairs
- processor: batched keyed-entry translation
- placeholders: placeholder protection and restoration
- batching: request partitioning
- diff: missing-key detection and merging
- progress: progress dataclass for callbacks
"""

from langbly_sync.translation.manager import (
    TranslationManager,
    TranslateResult,
    PairResult,
)
from langbly_sync.translation.progress import TranslationProgress
from langbly_sync.translation.placeholders import (
    ProtectedText,
    protect_placeholders,
    restore_placeholders,
)
from langbly_sync.translation.batching import batch_strings
from langbly_sync.translation.diff import compute_diff, merge_translations

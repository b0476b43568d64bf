"""
Placeholder protection for i18n strings.

Replaces interpolation tokens with unique markers before translation, then
restores them after, so the translation engine cannot mangle variables,
format strings or nested references.
"""

import re
from typing import Dict, List, NamedTuple, Tuple

from langbly_sync.logger import get_logger

logger = get_logger(__name__)

# Order matters: double braces must be consumed before single braces.
PLACEHOLDER_PATTERNS = [
    re.compile(r"\{\{[a-zA-Z_]\w*\}\}"),    # {{name}} - Angular, Handlebars
    re.compile(r"\{[a-zA-Z_]\w*\}"),        # {name} - i18next, React Intl, FormatJS
    re.compile(r"%\d+\$[sdfu@]"),           # %1$s, %2$d - Android, Java positional
    re.compile(r"%[sdfu@]"),                # %s, %d - printf, Android
    re.compile(r"\$\{[a-zA-Z_]\w*\}"),      # ${variable} - template literals
    re.compile(r"\$t\([^)]+\)"),            # $t(key) - i18next nested
]


class ProtectedText(NamedTuple):
    text: str
    placeholders: Dict[str, str]


def _make_token(index: int) -> str:
    return f"__PH{index}__"


class _TokenAllocator:
    """Per-call token counter that skips tokens already present in the input."""

    def __init__(self, original: str):
        self.original = original
        self.index = 0

    def next_token(self) -> str:
        token = _make_token(self.index)
        while token in self.original:
            self.index += 1
            token = _make_token(self.index)
        self.index += 1
        return token


def protect_placeholders(text: str) -> ProtectedText:
    """
    Replace all recognized placeholders with unique tokens (__PH0__, __PH1__, ...).

    Patterns are applied in PLACEHOLDER_PATTERNS order, each left to right.

    Example:
        >>> protect_placeholders("Hello {name}, you have %d messages")
        ProtectedText(text='Hello __PH0__, you have __PH1__ messages', placeholders={'__PH0__': '{name}', '__PH1__': '%d'})
    """
    allocator = _TokenAllocator(text)
    placeholders: Dict[str, str] = {}
    result = text

    for pattern in PLACEHOLDER_PATTERNS:
        def _replace(match: "re.Match") -> str:
            token = allocator.next_token()
            placeholders[token] = match.group(0)
            return token

        result = pattern.sub(_replace, result)

    if placeholders:
        logger.debug(f"Protected {len(placeholders)} placeholders: {text[:50]!r} -> {result[:50]!r}")

    return ProtectedText(result, placeholders)


def _expand(text: str, placeholders: Dict[str, str]) -> Tuple[str, List[str]]:
    """Expand tokens newest first; returns the restored text and the tokens not found."""
    restored = text
    missing: List[str] = []
    for token, original in reversed(list(placeholders.items())):
        if token not in restored:
            missing.append(token)
            continue
        restored = restored.replace(token, original)
    missing.reverse()
    return restored, missing


def restore_placeholders(text: str, placeholders: Dict[str, str]) -> str:
    """
    Restore placeholder tokens back to their original values.

    Every occurrence of every token is restored, so reordered or duplicated
    tokens are handled. Tokens are expanded newest first: a later pattern can
    swallow an earlier token (``$t({name})``), never the other way round.
    Tokens the translation dropped cannot be restored; they are reported as
    a warning.
    """
    if not placeholders:
        return text

    restored, missing = _expand(text, placeholders)
    if missing:
        logger.warning(
            "Placeholders lost in translation, not restored: %s",
            ", ".join(f"{token}={placeholders[token]!r}" for token in missing),
        )
    return restored

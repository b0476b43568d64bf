"""
Language code helpers for target-language resolution.

Codes follow ISO 639-1 (``fr``) or BCP 47 language-region form (``pt-BR``).
Unknown codes are accepted as-is; the names here are only used for logging.
"""

from typing import Iterable, List, Optional

LANGUAGE_NAMES = {
    'ar': 'Arabic',
    'bg': 'Bulgarian',
    'cs': 'Czech',
    'da': 'Danish',
    'de': 'German',
    'el': 'Greek',
    'en': 'English',
    'es': 'Spanish',
    'et': 'Estonian',
    'fi': 'Finnish',
    'fr': 'French',
    'he': 'Hebrew',
    'hi': 'Hindi',
    'hu': 'Hungarian',
    'id': 'Indonesian',
    'it': 'Italian',
    'ja': 'Japanese',
    'ko': 'Korean',
    'lt': 'Lithuanian',
    'lv': 'Latvian',
    'nb': 'Norwegian Bokmal',
    'nl': 'Dutch',
    'pl': 'Polish',
    'pt': 'Portuguese',
    'ro': 'Romanian',
    'ru': 'Russian',
    'sk': 'Slovak',
    'sl': 'Slovenian',
    'sv': 'Swedish',
    'th': 'Thai',
    'tr': 'Turkish',
    'uk': 'Ukrainian',
    'vi': 'Vietnamese',
    'zh': 'Chinese',
    'en-GB': 'English (United Kingdom)',
    'en-US': 'English (United States)',
    'es-MX': 'Spanish (Mexico)',
    'fr-CA': 'French (Canada)',
    'pt-BR': 'Portuguese (Brazil)',
    'pt-PT': 'Portuguese (Portugal)',
    'zh-CN': 'Chinese (Simplified, China)',
    'zh-TW': 'Chinese (Traditional, Taiwan)',
}


def get_language_name(code: str) -> Optional[str]:
    """
    Get the full language name from code.

    Examples:
        >>> get_language_name('fr')
        'French'
        >>> get_language_name('xx') is None
        True
    """
    return LANGUAGE_NAMES.get(code)


def display_name(code: str) -> str:
    """Name for log lines, e.g. 'French (fr)'."""
    name = get_language_name(code)
    return f"{name} ({code})" if name else code


def extract_base_language(code: str) -> str:
    """
    Extract base language from code (remove region).

    Examples:
        >>> extract_base_language('zh-CN')
        'zh'
        >>> extract_base_language('pt_BR')
        'pt'
    """
    return code.replace('_', '-').split('-')[0].lower()


def languages_match(code1: str, code2: str, strict: bool = False) -> bool:
    """
    Check if two language codes match.

    With ``strict`` the codes must be identical (case-insensitive); otherwise
    matching base languages is enough ('en' matches 'en-US').
    """
    if not code1 or not code2:
        return False
    if strict:
        return code1.replace('_', '-').lower() == code2.replace('_', '-').lower()
    return extract_base_language(code1) == extract_base_language(code2)


def resolve_target_languages(requested: Iterable[str], source_language: str) -> List[str]:
    """
    Trim and deduplicate requested target languages.

    Codes identical to the source language are dropped. Regional variants of
    the source language ('en-GB' for source 'en') are kept.
    """
    resolved: List[str] = []
    for code in requested:
        if not isinstance(code, str):
            continue
        trimmed = code.strip()
        if not trimmed:
            continue
        if languages_match(trimmed, source_language, strict=True):
            continue
        if trimmed not in resolved:
            resolved.append(trimmed)
    return resolved

"""
JSON locale file handling: parse, indentation detection and serialization.
"""

import json
import re
from typing import Any, Dict, Union

from langbly_sync.exceptions import DocumentError

DEFAULT_INDENT = 2

_INDENT_PATTERN = re.compile(r'^([ \t]+)\S', re.MULTILINE)


def parse_json(content: str, path: str = None) -> Dict[str, Any]:
    """
    Parse a JSON locale document.

    Raises:
        DocumentError: If the content is not valid JSON or the root is not an object.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DocumentError(f"Invalid JSON in {path or 'document'}: {e}", path=path) from e

    if not isinstance(data, dict):
        raise DocumentError(
            f"JSON root of {path or 'document'} must be an object, got {type(data).__name__}",
            path=path,
        )
    return data


def detect_indent(content: str) -> Union[int, str]:
    """
    Detect the indentation style of a JSON file (spaces count or tab).

    Examples:
        >>> detect_indent('{\\n    "a": "b"\\n}')
        4
        >>> detect_indent('{\\n\\t"a": "b"\\n}')
        '\\t'
        >>> detect_indent('{"a": "b"}')
        2
    """
    match = _INDENT_PATTERN.search(content)
    if not match:
        return DEFAULT_INDENT
    indent = match.group(1)
    if '\t' in indent:
        return '\t'
    return len(indent)


def dump_json(data: Dict[str, Any], indent: Union[int, str] = DEFAULT_INDENT) -> str:
    """Serialize a document keeping unicode as-is, with a trailing newline."""
    return json.dumps(data, ensure_ascii=False, indent=indent) + '\n'

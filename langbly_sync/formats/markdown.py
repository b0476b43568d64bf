"""
Markdown file handling: split frontmatter from body, translate only the body
content, and reassemble.
"""

import re
from typing import NamedTuple, Optional

FRONTMATTER_DELIMITER = "---"

# A delimiter is a line holding exactly "---" (trailing blanks allowed);
# "----------" is a horizontal rule, not frontmatter.
_OPENING_DELIMITER = re.compile(r"---[ \t]*\r?(?:\n|$)")
_CLOSING_DELIMITER = re.compile(r"^---[ \t]*\r?$", re.MULTILINE)


class MarkdownDocument(NamedTuple):
    frontmatter: Optional[str]
    body: str


def split_markdown(content: str) -> MarkdownDocument:
    """
    Split a Markdown file into frontmatter (YAML between --- delimiters) and body.

    The frontmatter keeps any leading whitespace and both delimiters; the body
    is everything after the closing one, so ``frontmatter + body == content``.
    Without a complete frontmatter block the whole content is body.

    Example:
        >>> split_markdown("\\n---\\ntitle: Hi\\n---\\n\\n# Doc")
        MarkdownDocument(frontmatter='\\n---\\ntitle: Hi\\n---', body='\\n\\n# Doc')
    """
    trimmed = content.lstrip()
    lead = len(content) - len(trimmed)

    opening = _OPENING_DELIMITER.match(trimmed)
    if not opening:
        return MarkdownDocument(None, content)

    closing = _CLOSING_DELIMITER.search(trimmed, opening.end())
    if not closing:
        return MarkdownDocument(None, content)

    boundary = lead + closing.end()
    return MarkdownDocument(content[:boundary], content[boundary:])


def assemble_markdown(frontmatter: Optional[str], body: str) -> str:
    """Reassemble a Markdown file from frontmatter and (translated) body."""
    if frontmatter is None:
        return body
    return frontmatter + body

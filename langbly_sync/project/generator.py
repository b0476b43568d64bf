"""
Output file generator module.

This module handles where and how translated files are written:
- Format detection from the file extension
- Output path resolution from a {lang} pattern
- Atomic file writing
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from langbly_sync.config import LANG_PLACEHOLDER
from langbly_sync.logger import get_logger

logger = get_logger(__name__)

MARKDOWN_EXTENSIONS = {".md", ".mdx"}
YAML_EXTENSIONS = {".yaml", ".yml"}


class FileGenerationError(Exception):
    """File generation error."""
    pass


def detect_format(file_path: str) -> str:
    """
    Detect file format from extension.

    Examples:
        >>> detect_format("docs/intro.md")
        'markdown'
        >>> detect_format("locales/en.yml")
        'yaml'
        >>> detect_format("locales/en.json")
        'json'
    """
    ext = Path(file_path).suffix.lower()
    if ext in MARKDOWN_EXTENSIONS:
        return "markdown"
    if ext in YAML_EXTENSIONS:
        return "yaml"
    return "json"


def default_source_root(files: Sequence[str]) -> str:
    """Deepest directory shared by all source files."""
    if not files:
        return "."
    directories = [str(Path(f).parent) for f in files]
    return os.path.commonpath(directories) if len(directories) > 1 else directories[0]


def resolve_output_path(
    pattern: str,
    lang: str,
    source_file: str,
    source_root: Optional[str] = None,
) -> str:
    """
    Resolve the output path for a source file and target language.

    Replaces {lang} in the pattern with the language code. A pattern with
    ``**`` keeps the source path relative to ``source_root``:

        "locales/{lang}.json"      -> "locales/fr.json"
        "docs/{lang}/**/*.md"      -> "docs/fr/<relative path of source>"
    """
    if "**" not in pattern:
        return pattern.replace(LANG_PLACEHOLDER, lang)

    root = source_root if source_root is not None else str(Path(source_file).parent)
    relative_path = os.path.relpath(source_file, root)
    pattern_base = pattern.split("**")[0].replace(LANG_PLACEHOLDER, lang)
    return os.path.join(pattern_base, relative_path)


def write_file_atomic(file_path: Path, content: str) -> None:
    """
    Write text to file atomically.

    Writes to a temporary file in the target directory first, then renames it
    over the target path, so the file is never left partially written.

    Raises:
        FileGenerationError: If write fails
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(
        dir=file_path.parent,
        prefix=f".{file_path.stem}_",
        suffix=f"{file_path.suffix}.tmp",
    )
    temp_path = Path(temp_path)

    try:
        with open(temp_fd, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        temp_path.replace(file_path)
        logger.debug(f"Atomic write successful: {file_path}")
    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        raise FileGenerationError(f"Atomic write failed for {file_path}: {e}") from e


def read_existing_file(file_path: Path) -> Optional[str]:
    """Content of a previously generated file, or None if there is none yet."""
    try:
        return Path(file_path).read_text(encoding='utf-8')
    except FileNotFoundError:
        return None

"""
Formats module - Structured document codecs

This module provides:
- structured: tagged document tree, flatten/unflatten
- json_file / yaml_file: locale file parsing and serialization
- markdown: frontmatter/body split and reassembly
"""

from langbly_sync.formats.structured import (
    FlatEntry,
    MapNode,
    StringLeaf,
    OpaqueLeaf,
    to_tree,
    from_tree,
    flatten,
    unflatten,
    flat_map,
)
from langbly_sync.formats.json_file import parse_json, detect_indent, dump_json
from langbly_sync.formats.yaml_file import parse_yaml, dump_yaml
from langbly_sync.formats.markdown import MarkdownDocument, split_markdown, assemble_markdown

"""
YAML locale file handling: parse YAML i18n files and dump merged trees back.
Key extraction reuses the structured codec.
"""

import re
from typing import Any, Dict

import yaml

from langbly_sync.exceptions import DocumentError

BOOL_TAG = "tag:yaml.org,2002:bool"


class LocaleLoader(yaml.SafeLoader):
    """
    SafeLoader with YAML 1.2 core-schema booleans.

    Only true/false (any case variant the core schema allows) resolve to
    booleans. yes/no/on/off and y/n stay strings, so values like ``Yes`` are
    translated and a ``no:`` key (Norwegian) keeps its name.
    """


LocaleLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != BOOL_TAG]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
LocaleLoader.add_implicit_resolver(
    BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def parse_yaml(content: str, path: str = None) -> Dict[str, Any]:
    """
    Parse a YAML locale document.

    An empty document yields an empty mapping.

    Raises:
        DocumentError: If the YAML is malformed or its root is not a mapping.
    """
    try:
        data = yaml.load(content, Loader=LocaleLoader)
    except yaml.YAMLError as e:
        raise DocumentError(f"Invalid YAML in {path or 'document'}: {e}", path=path) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DocumentError(
            f"YAML root of {path or 'document'} must be a mapping, got {type(data).__name__}",
            path=path,
        )
    return data


def dump_yaml(data: Dict[str, Any]) -> str:
    """
    Dump in block style, keeping key order, unicode and long lines intact.

    The dumper still quotes strings YAML 1.1 readers would take as booleans
    ('Yes', 'no'), so the output reads back the same under either schema.
    """
    return yaml.safe_dump(
        data,
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
        width=float("inf"),
    )

"""Helpers for working with composed PyYAML nodes.

The document model keeps the composed node tree (not the constructed Python
values) so that every finding can point at a line and column. These helpers
look up mapping entries and decode nodes into plain JSON-like values.
"""

from __future__ import annotations

from typing import Any

import yaml
from yaml.constructor import SafeConstructor

# Key normalization pass ceiling (mapping keys coerced to strings)
MAX_DECODE_DEPTH = 500

TAG_STR = "tag:yaml.org,2002:str"
TAG_NULL = "tag:yaml.org,2002:null"
TAG_BOOL = "tag:yaml.org,2002:bool"
TAG_INT = "tag:yaml.org,2002:int"
TAG_FLOAT = "tag:yaml.org,2002:float"
TAG_TIMESTAMP = "tag:yaml.org,2002:timestamp"

# SafeConstructor's scalar methods only read node.value, so one shared
# instance is safe to use from worker threads.
_CONSTRUCTOR = SafeConstructor()

_SCALAR_DECODERS = {
    TAG_NULL: _CONSTRUCTOR.construct_yaml_null,
    TAG_BOOL: _CONSTRUCTOR.construct_yaml_bool,
    TAG_INT: _CONSTRUCTOR.construct_yaml_int,
    TAG_FLOAT: _CONSTRUCTOR.construct_yaml_float,
}


def is_mapping(node: yaml.Node | None) -> bool:
    return isinstance(node, yaml.MappingNode)


def is_sequence(node: yaml.Node | None) -> bool:
    return isinstance(node, yaml.SequenceNode)


def is_scalar(node: yaml.Node | None) -> bool:
    return isinstance(node, yaml.ScalarNode)


def is_null(node: yaml.Node | None) -> bool:
    return node is None or (is_scalar(node) and node.tag == TAG_NULL)


def mapping_items(node: yaml.Node | None) -> list[tuple[yaml.Node, yaml.Node]]:
    """Return (key, value) node pairs of a mapping, or [] for anything else."""
    if not is_mapping(node):
        return []
    return list(node.value)


def find_key(node: yaml.Node | None, key: str) -> tuple[yaml.Node | None, yaml.Node | None]:
    """Find a key in a mapping node.

    Returns:
        (key_node, value_node), or (None, None) when the key is absent.
    """
    for key_node, value_node in mapping_items(node):
        if is_scalar(key_node) and key_node.value == key:
            return key_node, value_node
    return None, None


def scalar_text(node: yaml.Node | None) -> str | None:
    """Raw text of a scalar node (no type resolution)."""
    if is_scalar(node) and node.tag != TAG_NULL:
        return node.value
    return None


def decode_scalar(node: yaml.ScalarNode) -> Any:
    """Decode a scalar node into a Python value.

    Timestamps stay strings: JSON Schema has no date type, and a constructed
    datetime would never validate against `type: string`.
    """
    decoder = _SCALAR_DECODERS.get(node.tag)
    if decoder is None:
        return node.value
    try:
        return decoder(node)
    except (KeyError, ValueError, yaml.YAMLError):
        return node.value


def decode_node(node: yaml.Node | None, depth: int = 0) -> Any:
    """Decode a node tree into JSON-like Python values.

    All mapping keys are coerced to strings. Decoding stops (yielding None)
    once MAX_DECODE_DEPTH is exceeded, which also terminates recursive
    YAML aliases.
    """
    if node is None or depth > MAX_DECODE_DEPTH:
        return None
    if is_mapping(node):
        result: dict[str, Any] = {}
        for key_node, value_node in node.value:
            result[key_string(key_node)] = decode_node(value_node, depth + 1)
        return result
    if is_sequence(node):
        return [decode_node(item, depth + 1) for item in node.value]
    return decode_scalar(node)


def key_string(node: yaml.Node) -> str:
    """Coerce a mapping key node into its string form."""
    if is_scalar(node):
        return node.value
    # Complex keys are rare; use their decoded repr so they stay distinct
    return str(decode_node(node, MAX_DECODE_DEPTH))


def line_of(node: yaml.Node | None) -> int:
    """1-based line where a node starts (0 when unknown)."""
    return node.start_mark.line + 1 if node is not None else 0


def column_of(node: yaml.Node | None) -> int:
    """1-based column where a node starts (0 when unknown)."""
    return node.start_mark.column + 1 if node is not None else 0


def end_line_of(node: yaml.Node | None) -> int:
    return node.end_mark.line + 1 if node is not None else 0


def end_column_of(node: yaml.Node | None) -> int:
    return node.end_mark.column + 1 if node is not None else 0

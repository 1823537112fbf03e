"""Schema Walker - enumerates every distinct schema in a document.

Roots are the component schemas plus the schema of every parameter, header,
media type and (Swagger 2.0) response. From each root the walk follows every
schema-bearing keyword, stepping through references, so a schema shared by
many `$ref`s is yielded once. Cycles are cut by the visited set.
"""

from __future__ import annotations

from itertools import chain
from typing import Iterator

from oas_lint.document import Document, ExampleHolder, ModelNode, Schema, SchemaProxy

# Nesting ceiling for a single walk branch
MAX_WALK_DEPTH = 40

# Ceiling for climbing parent back-references
MAX_PARENT_DEPTH = 10


def schema_dedup_key(schema: Schema) -> tuple:
    """Identity of a schema: (origin, line, column) of its owning slot.

    The owning slot is the key node the schema is defined under, or the value
    node for sequence entries. Schemas with no source position fall back to
    object identity.
    """
    owner = schema.parent
    node = None
    if owner is not None:
        node = owner.key_node if owner.key_node is not None else owner.value_node
    if node is None:
        return ("id", id(schema))
    origin = schema.document.origin if schema.document is not None else None
    return (origin or "", node.start_mark.line, node.start_mark.column)


def _root_proxies(document: Document) -> Iterator[SchemaProxy]:
    yield from document.components.schemas.values()
    for holder in chain(document.parameters, document.headers, document.media_types):
        if holder.schema_proxy is not None:
            yield holder.schema_proxy
    for response in document.responses:
        if response.schema_proxy is not None:
            yield response.schema_proxy


def walk_schemas(document: Document) -> list[Schema]:
    """Return every distinct schema reachable from the document, in walk order."""
    seen_ids: set[int] = set()
    seen_keys: set[tuple] = set()
    schemas: list[Schema] = []

    stack: list[tuple[SchemaProxy, int]] = [(p, 0) for p in reversed(list(_root_proxies(document)))]
    while stack:
        proxy, depth = stack.pop()
        schema = proxy.schema
        if schema is None or id(schema) in seen_ids or depth > MAX_WALK_DEPTH:
            continue
        seen_ids.add(id(schema))
        key = schema_dedup_key(schema)
        if key in seen_keys:
            continue
        seen_keys.add(key)
        schemas.append(schema)
        stack.extend((child, depth + 1) for child in reversed(list(schema.children())))
    return schemas


def schema_ancestors(schema: Schema, limit: int = MAX_PARENT_DEPTH) -> Iterator[Schema]:
    """Yield the schema itself, then each enclosing schema up the owner chain."""
    node: ModelNode | None = schema
    climbed = 0
    while node is not None and climbed <= limit:
        if isinstance(node, Schema):
            yield node
            climbed += 1
        node = node.parent


def owning_holder(schema: Schema, limit: int = MAX_PARENT_DEPTH) -> ExampleHolder | None:
    """Nearest parameter, header or media type that owns the schema, if any."""
    node: ModelNode | None = schema.parent
    climbed = 0
    while node is not None and climbed <= limit:
        if isinstance(node, ExampleHolder):
            return node
        if isinstance(node, Schema):
            climbed += 1
        node = node.parent
    return None

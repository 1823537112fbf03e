"""Path Locator - canonical and alternate JSON paths for model nodes.

A node defined once can be reachable from many places: a component schema is
also "at" every `$ref` that points to it, and so is everything nested inside
it. The locator climbs from the node to the root; wherever an enclosing
object is the target of references, the part of the path below that object
is re-rooted onto each referring slot (recursively, since referrers can sit
inside referenced objects themselves).
"""

from __future__ import annotations

from oas_lint.document import Document, ModelNode

# Ceiling for nested referrer expansion
MAX_REFERRER_DEPTH = 10


def locate(document: Document, node: ModelNode, suffix: str = "") -> tuple[str, list[str]]:
    """Locate a node.

    Args:
        document: Document owning the node.
        node: Any model node.
        suffix: Extra segments appended to every path (e.g. ".required[0]").

    Returns:
        (primary_path, all_paths). all_paths starts with the primary path;
        the remaining paths follow in sorted order, without duplicates.
    """
    primary = node.json_path() + suffix
    paths = {p + suffix for p in _reachable_paths(document, node, 0, set())}
    paths.discard(primary)
    return primary, [primary, *sorted(paths)]


def _reachable_paths(document: Document, node: ModelNode, depth: int, active: set[int]) -> set[str]:
    own = node.json_path()
    paths = {own}
    if depth > MAX_REFERRER_DEPTH:
        return paths

    ancestor: ModelNode | None = node
    while ancestor is not None:
        referrers = document.index.referrers(ancestor)
        if referrers and id(ancestor) not in active:
            rest = own[len(ancestor.json_path()):]
            active.add(id(ancestor))
            for slot in referrers:
                for base in _reachable_paths(document, slot, depth + 1, active):
                    paths.add(base + rest)
            active.discard(id(ancestor))
        ancestor = ancestor.parent
    return paths


def path_and_alternates(document: Document, node: ModelNode, suffix: str = "") -> tuple[str, list[str] | None]:
    """Like locate(), but alternates are None unless there is more than one path."""
    primary, paths = locate(document, node, suffix)
    return primary, paths if len(paths) > 1 else None

"""Link ``inherited_from_id`` references to the declarations they point to.

A serialised tree cannot hold object references, so a method inherited from
a parent class names its origin by id::

    {"id": 41, "kind": "method", "name": "getStatus", "inheritedFromId": 17}

:func:`link_inheritance` indexes every node by ``id`` (including the nodes
under wrapped literal types) and sets ``inherited_from`` on each node that
carries a reference. It is the only place that writes to a tree, and it
runs once, before the tree is handed to the extractor.
"""

from __future__ import annotations

from collections.abc import Iterator

from methodmap.exceptions import TreeParseError
from methodmap.models import DeclarationNode


def link_inheritance(root: DeclarationNode) -> DeclarationNode:
    """Resolve every ``inherited_from_id`` under *root* in place.

    Args:
        root: The root of a freshly validated tree.

    Returns:
        *root*, for chaining.

    Raises:
        TreeParseError: If two nodes share an id, or a reference names an
            id that no node carries.
    """
    index: dict[int, DeclarationNode] = {}
    for node in iter_nodes(root):
        if node.id is None:
            continue
        if node.id in index:
            raise TreeParseError(
                f"Duplicate declaration id {node.id}: "
                f"'{index[node.id].name}' and '{node.name}'"
            )
        index[node.id] = node

    for node in iter_nodes(root):
        if node.inherited_from_id is None:
            continue
        target = index.get(node.inherited_from_id)
        if target is None:
            raise TreeParseError(
                f"Cannot resolve inheritance of '{node.name}': "
                f"no declaration with id {node.inherited_from_id}"
            )
        node.inherited_from = target

    return root


def iter_nodes(root: DeclarationNode) -> Iterator[DeclarationNode]:
    """Yield *root* and every node below it, depth-first in document order.

    Wrapped literal types are descended into before a node's direct
    children.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        pending = list(node.children)
        if node.type_declaration is not None:
            pending.insert(0, node.type_declaration)
        stack.extend(reversed(pending))

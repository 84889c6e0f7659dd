"""Read-only queries over a declaration tree.

Constants written as ``as const`` object literals reach us in one of two
shapes: either their properties are direct ``children`` of the node, or the
node is declared through an aliased literal type and the properties live on
``type_declaration``. :func:`effective_children` picks whichever holds the
real children, and every query below goes through it, so callers never need
to know which shape a constant had.

None of these functions mutate the tree; they return references into it.
"""

from __future__ import annotations

from typing import Callable, Optional

from methodmap.models import DeclarationNode, KnownMethods, ReflectionKind

Guard = Callable[[DeclarationNode], bool]


def effective_children(node: DeclarationNode) -> list[DeclarationNode]:
    """Return the children of *node*, looking through a wrapped literal type."""
    if node.type_declaration is not None:
        return node.type_declaration.children
    return node.children


def find_child_by_guard(node: DeclarationNode, guard: Guard) -> Optional[DeclarationNode]:
    """Return the first child of *node* satisfying *guard*, or ``None``."""
    return next((child for child in effective_children(node) if guard(child)), None)


def find_child_by_name_and_guard(
    node: DeclarationNode, name: str, guard: Guard
) -> Optional[DeclarationNode]:
    """Return the first child of *node* named *name* that satisfies *guard*."""
    return find_child_by_guard(node, lambda child: child.name == name and guard(child))


def filter_children_by_guard(node: DeclarationNode, guard: Guard) -> list[DeclarationNode]:
    """Return every child of *node* satisfying *guard*, in document order."""
    return [child for child in effective_children(node) if guard(child)]


def filter_children_by_kind(node: DeclarationNode, kind: ReflectionKind) -> list[DeclarationNode]:
    """Return every child of *node* of the given *kind*, in document order."""
    return filter_children_by_guard(node, lambda child: child.kind == kind)


def find_parent_by_name(root: DeclarationNode, name: str) -> Optional[DeclarationNode]:
    """Find a module by exact name: *root* itself, or one of its direct children.

    A project built from a single entry point *is* that module; a
    multi-package project has it one level down.
    """
    if root.name == name:
        return root
    return next((child for child in root.children if child.name == name), None)


def find_methods_in_class(class_node: DeclarationNode, is_async_method: Guard) -> KnownMethods:
    """Map method name -> declaration for every async method in a class.

    On a name clash (overloads declared as separate nodes) the last
    declaration wins.
    """
    return {
        method.name: method
        for method in filter_children_by_guard(class_node, is_async_method)
    }

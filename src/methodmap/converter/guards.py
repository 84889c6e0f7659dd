"""Structural predicates that recognise method-map shapes in a declaration tree.

Nothing in a declaration tree says "this is a route". A route entry is a
property whose object literal has only HTTP-verb keys; a command property
is a property named ``command`` holding a literal; and so on. Each
predicate on :class:`ShapeGuards` tests one such shape, and
:meth:`ShapeGuards.classify` folds them into a single total function
returning a :class:`NodeShape`.

Predicates are structural: they look at kind, name, literal payload and
(effective) children, never at where the node sits in the tree. The
parsers supply the context by choosing which children to test.

The names being matched (``command``, ``executeMethodMap``, the module
names ...) come from a :class:`~methodmap.models.WellKnownNames` table.
"""

from __future__ import annotations

import enum
from typing import Optional

from methodmap.converter.tree import effective_children
from methodmap.models import DeclarationNode, HTTPMethod, ReflectionKind, WellKnownNames

_CONSTANT_KINDS = frozenset({ReflectionKind.PROPERTY, ReflectionKind.VARIABLE})
_MODULE_KINDS = frozenset({ReflectionKind.MODULE, ReflectionKind.PROJECT})


class NodeShape(str, enum.Enum):
    """Every node shape the extractor distinguishes."""

    MODULE = "module"
    CLASS = "class"
    EXTENSION_POINT = "extension_point"
    ASYNC_METHOD = "async_method"
    EXEC_MAP = "exec_map"
    COMMAND_PROP = "command_prop"
    PARAMS_PROP = "params_prop"
    PARAM_NAMES_PROP = "param_names_prop"
    VERB_ENTRY = "verb_entry"
    ROUTE_ENTRY = "route_entry"
    METHOD_MAP = "method_map"
    UNKNOWN = "unknown"


def is_object_shaped(node: DeclarationNode) -> bool:
    """Whether *node* declares an object literal (possibly empty).

    True when the node wraps a literal type, or lists ``children``
    explicitly without also carrying a literal value.
    """
    if node.type_declaration is not None:
        return True
    return "children" in node.model_fields_set and not node.has_value


class ShapeGuards:
    """Shape predicates bound to one table of well-known names.

    Args:
        names: Names to match. Defaults to the Appium names.
    """

    def __init__(self, names: Optional[WellKnownNames] = None) -> None:
        self.names = names or WellKnownNames()
        self._verbs = frozenset(method.value for method in HTTPMethod)

    # ------------------------------------------------------------------ #
    # Containers
    # ------------------------------------------------------------------ #

    def is_module(self, node: DeclarationNode) -> bool:
        return node.kind in _MODULE_KINDS

    def is_types_module(self, node: Optional[DeclarationNode]) -> bool:
        """The module declaring the base extension-point interface."""
        return node is not None and self.is_module(node) and node.name == self.names.types_module

    def is_base_driver_module(self, node: Optional[DeclarationNode]) -> bool:
        """The module holding the framework's built-in driver."""
        return (
            node is not None
            and self.is_module(node)
            and node.name == self.names.base_driver_module
        )

    def is_class(self, node: DeclarationNode) -> bool:
        return node.kind == ReflectionKind.CLASS

    def is_extension_point_interface(self, node: DeclarationNode) -> bool:
        return (
            node.kind == ReflectionKind.INTERFACE
            and node.name == self.names.extension_point_interface
        )

    # ------------------------------------------------------------------ #
    # Methods
    # ------------------------------------------------------------------ #

    def is_async_method(self, node: DeclarationNode) -> bool:
        """A method returning the async result type, not private or internal."""
        if node.kind != ReflectionKind.METHOD or not node.return_type:
            return False
        if node.return_type.split("<", 1)[0].strip() != self.names.async_return_type:
            return False
        if node.flags.is_private:
            return False
        return not (node.comment and node.comment.has_modifier(self.names.internal_modifier))

    # ------------------------------------------------------------------ #
    # Map constants and their entries
    # ------------------------------------------------------------------ #

    def is_method_map(self, node: DeclarationNode) -> bool:
        """An object-literal constant; routes are checked entry by entry."""
        return node.kind in _CONSTANT_KINDS and is_object_shaped(node)

    def is_exec_map(self, node: DeclarationNode) -> bool:
        return self.is_method_map(node) and node.name == self.names.execute_method_map

    def is_route_entry(self, node: DeclarationNode) -> bool:
        """A property whose object literal has HTTP-verb keys only."""
        if node.kind != ReflectionKind.PROPERTY or not is_object_shaped(node):
            return False
        return all(child.name in self._verbs for child in effective_children(node))

    def is_verb_entry(self, node: DeclarationNode) -> bool:
        return (
            node.kind == ReflectionKind.PROPERTY
            and node.name in self._verbs
            and is_object_shaped(node)
        )

    def is_command_prop(self, node: DeclarationNode) -> bool:
        """A ``command`` property carrying any literal.

        Whether the literal is a non-empty string is left to the parsers,
        which warn about it.
        """
        return (
            node.kind == ReflectionKind.PROPERTY
            and node.name == self.names.command_prop
            and node.has_value
        )

    def is_params_prop(self, node: DeclarationNode) -> bool:
        return (
            node.kind == ReflectionKind.PROPERTY
            and node.name in self.names.params_props
            and is_object_shaped(node)
        )

    def is_param_names_prop(self, node: DeclarationNode) -> bool:
        """A ``required`` or ``optional`` property holding an array literal."""
        return (
            node.kind == ReflectionKind.PROPERTY
            and node.name in (self.names.required_prop, self.names.optional_prop)
            and isinstance(node.value, list)
        )

    # ------------------------------------------------------------------ #
    # Total classification
    # ------------------------------------------------------------------ #

    def classify(self, node: DeclarationNode) -> NodeShape:
        """Return the single :class:`NodeShape` of *node*.

        Name-anchored shapes are tested before purely structural ones, so a
        ``params`` object is a params property even though it is also an
        object-literal constant.
        """
        if self.is_module(node):
            return NodeShape.MODULE
        if self.is_class(node):
            return NodeShape.CLASS
        if self.is_extension_point_interface(node):
            return NodeShape.EXTENSION_POINT
        if self.is_async_method(node):
            return NodeShape.ASYNC_METHOD
        if self.is_exec_map(node):
            return NodeShape.EXEC_MAP
        if self.is_command_prop(node):
            return NodeShape.COMMAND_PROP
        if self.is_params_prop(node):
            return NodeShape.PARAMS_PROP
        if self.is_param_names_prop(node):
            return NodeShape.PARAM_NAMES_PROP
        if self.is_verb_entry(node):
            return NodeShape.VERB_ENTRY
        if self.is_route_entry(node):
            return NodeShape.ROUTE_ENTRY
        if self.is_method_map(node):
            return NodeShape.METHOD_MAP
        return NodeShape.UNKNOWN

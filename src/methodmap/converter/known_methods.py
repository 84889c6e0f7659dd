"""Collect the canonical command declarations of the extension-point interface.

Drivers inherit most commands rather than re-declaring them, and an
inherited override often has no documentation comment of its own. The
extension-point interface (``ExternalDriver`` in ``@appium/types``) declares
every standard command once, with its documentation. The mapping built here
is the last-resort source of comments for the method-map parser.

A project that does not include the types module is normal: it simply gets
an empty mapping.
"""

from __future__ import annotations

from typing import Optional

from methodmap.converter.guards import ShapeGuards
from methodmap.converter.tree import filter_children_by_guard, find_child_by_guard, find_parent_by_name
from methodmap.log import PluginLogger
from methodmap.models import DeclarationNode, KnownMethods


class KnownMethodsResolver:
    """Builds :data:`~methodmap.models.KnownMethods` for a project.

    Args:
        project: Root of the declaration tree.
        log: Parent logger; a ``types`` child is created from it.
        guards: Shape predicates (and the names they match).
    """

    def __init__(
        self,
        project: DeclarationNode,
        log: PluginLogger,
        guards: Optional[ShapeGuards] = None,
    ) -> None:
        self.project = project
        self.log = log.child("types")
        self.guards = guards or ShapeGuards()

    def convert(self) -> KnownMethods:
        """Return method name -> declaration, or ``{}`` if anything is missing."""
        names = self.guards.names
        types_module = find_parent_by_name(self.project, names.types_module)
        if not self.guards.is_types_module(types_module):
            self.log.verbose("Did not find %s", names.types_module)
            return {}

        self.log.verbose("Found %s", names.types_module)
        return self.convert_method_declarations(types_module)

    def convert_method_declarations(self, types_module: DeclarationNode) -> KnownMethods:
        """Collect the async methods of the extension-point interface in *types_module*."""
        names = self.guards.names
        interface = find_child_by_guard(types_module, self.guards.is_extension_point_interface)
        if interface is None:
            self.log.warn(
                "Could not find %s in %s", names.extension_point_interface, names.types_module
            )
            return {}

        methods = {
            method.name: method
            for method in filter_children_by_guard(interface, self.guards.is_async_method)
        }
        if not methods:
            self.log.warn("No methods found in %s", names.extension_point_interface)
            return {}

        self.log.verbose(
            "Found %d method declarations in %s", len(methods), names.extension_point_interface
        )
        return methods

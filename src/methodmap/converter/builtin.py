"""Convert the framework's built-in method map into the baseline command set.

The base driver package declares every standard route once, in a
module-level ``METHOD_MAP`` constant, and implements most of them on its
``BaseDriver`` class. Most projects being documented do not embed the base
driver package at all; for those this converter returns nothing.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Optional

from methodmap.converter.guards import ShapeGuards
from methodmap.converter.method_map import parse_method_map
from methodmap.converter.tree import (
    find_child_by_name_and_guard,
    find_methods_in_class,
    find_parent_by_name,
)
from methodmap.exceptions import IntegrityViolationError
from methodmap.log import PluginLogger
from methodmap.models import CommandInfo, DeclarationNode, KnownMethods, ModuleCommands


class BuiltinMethodMapConverter:
    """Extracts :class:`~methodmap.models.CommandInfo` from the base driver module.

    Args:
        project: Root of the declaration tree.
        log: Parent logger; a ``builtin-method-map`` child is created from it.
        guards: Shape predicates (and the names they match).
    """

    def __init__(
        self,
        project: DeclarationNode,
        log: PluginLogger,
        guards: Optional[ShapeGuards] = None,
    ) -> None:
        self.project = project
        self.log = log.child("builtin-method-map")
        self.guards = guards or ShapeGuards()

    def convert(self) -> ModuleCommands:
        """Return ``{base_driver_module: CommandInfo}``, or an empty mapping.

        Raises:
            IntegrityViolationError: If the built-in method map exists but
                declares no routes.
        """
        names = self.guards.names
        base_driver = find_parent_by_name(self.project, names.base_driver_module)
        if not self.guards.is_base_driver_module(base_driver):
            self.log.verbose("Did not find %s", names.base_driver_module)
            return MappingProxyType({})

        self.log.verbose("Found %s", names.base_driver_module)

        # The methods implemented on the class supply the route comments.
        methods: KnownMethods = {}
        base_driver_class = find_child_by_name_and_guard(
            base_driver, names.base_driver_class, self.guards.is_class
        )
        if base_driver_class is None:
            self.log.error(
                "Could not find %s in %s", names.base_driver_class, names.base_driver_module
            )
        else:
            methods = find_methods_in_class(base_driver_class, self.guards.is_async_method)

        method_map = find_child_by_name_and_guard(
            base_driver, names.builtin_method_map, self.guards.is_method_map
        )
        if method_map is None:
            self.log.warn(
                "Could not find %s in %s", names.builtin_method_map, names.base_driver_module
            )
            return MappingProxyType({})

        # This module is the source of canonical knowledge, so no known methods.
        routes = parse_method_map(
            method_map, base_driver, methods, log=self.log, guards=self.guards
        )
        if not routes:
            raise IntegrityViolationError(
                f"Could not find any commands in {names.builtin_method_map} "
                f"of {names.base_driver_module}"
            )

        self.log.verbose(
            "Found %d routes in %s", len(routes), names.builtin_method_map
        )
        return MappingProxyType({base_driver: CommandInfo(route_map=routes)})

"""Convert the method maps declared by extension drivers and plugins.

Strategy, for each module of the project (or the project itself when it has
no modules):

1. find every class;
2. find the class's async methods, which *can* implement commands;
3. parse the class's ``newMethodMap``, if any, merging its routes into the
   module's route map at command level;
4. parse the class's ``executeMethodMap``, if any, adding its scripts to the
   module's execute methods.

Modules that yield neither routes nor execute methods are left out.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Optional

from methodmap.converter.guards import ShapeGuards
from methodmap.converter.method_map import (
    merge_execute_methods,
    merge_route_maps,
    parse_execute_method_map,
    parse_method_map,
)
from methodmap.converter.tree import (
    filter_children_by_guard,
    filter_children_by_kind,
    find_child_by_name_and_guard,
    find_methods_in_class,
)
from methodmap.log import PluginLogger
from methodmap.models import (
    CommandInfo,
    DeclarationNode,
    ExecMethodDataSet,
    KnownMethods,
    ModuleCommands,
    ReflectionKind,
    RouteMap,
)


def _plural(word: str, count: int) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class ExternalConverter:
    """Extracts per-module :class:`~methodmap.models.CommandInfo` from extensions.

    Args:
        project: Root of the declaration tree.
        log: Parent logger; an ``external`` child is created from it.
        known_methods: Canonical declarations, the comment fallback for
            commands a driver inherits without documenting.
        guards: Shape predicates (and the names they match).
    """

    def __init__(
        self,
        project: DeclarationNode,
        log: PluginLogger,
        known_methods: KnownMethods,
        guards: Optional[ShapeGuards] = None,
    ) -> None:
        self.project = project
        self.log = log.child("external")
        self.known_methods = known_methods
        self.guards = guards or ShapeGuards()
        self.log.verbose("Known method count: %d", len(known_methods))

    def convert(self) -> ModuleCommands:
        """Return command info for every module that declares commands."""
        project_commands: dict[DeclarationNode, CommandInfo] = {}

        modules = filter_children_by_kind(self.project, ReflectionKind.MODULE)
        for module in modules or [self.project]:
            self.log.verbose("Converting module %s", module.name)
            info = self.convert_module_classes(module)
            if info.has_data:
                project_commands[module] = info

        if project_commands:
            route_count = sum(len(info.route_map) for info in project_commands.values())
            command_count = sum(info.command_count for info in project_commands.values())
            exec_count = sum(len(info.execute_methods) for info in project_commands.values())
            self.log.info(
                "Found %s on %s and %s in %d of %s",
                _plural("command", command_count),
                _plural("route", route_count),
                _plural("execute method", exec_count),
                len(project_commands),
                _plural("module", len(modules) or 1),
            )
        else:
            self.log.warn("No commands nor execute methods found in entire project!")

        return MappingProxyType(project_commands)

    def convert_module_classes(self, parent: DeclarationNode) -> CommandInfo:
        """Collect the routes and execute methods of every class in *parent*.

        Classes are processed in document order; when two classes bind the
        same command on the same route, the later class wins.
        """
        names = self.guards.names
        routes: RouteMap = {}
        execute_methods: ExecMethodDataSet = []

        for class_node in filter_children_by_guard(parent, self.guards.is_class):
            self.log.verbose("Converting class %s", class_node.name)

            methods = find_methods_in_class(class_node, self.guards.is_async_method)
            self.log.verbose(
                "Found %d interesting methods in class %s", len(methods), class_node.name
            )

            method_map = find_child_by_name_and_guard(
                class_node, names.extension_method_map, self.guards.is_method_map
            )
            if method_map is None:
                self.log.verbose("No %s in %s", names.extension_method_map, class_node.name)
            else:
                merge_route_maps(
                    routes,
                    parse_method_map(
                        method_map,
                        class_node,
                        methods,
                        self.known_methods,
                        log=self.log,
                        guards=self.guards,
                    ),
                )

            merge_execute_methods(
                execute_methods,
                parse_execute_method_map(class_node, methods, log=self.log, guards=self.guards),
            )
            self.log.verbose("Converted class %s", class_node.name)

        return CommandInfo(route_map=routes, execute_methods=execute_methods)

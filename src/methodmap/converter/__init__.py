"""Extraction engine -- turn a declaration tree into per-module command maps.

The logic here depends on the Appium extension API and on specific uses of
TypeScript types. Anything parsed successfully must be declared as a
``const`` object literal, for example::

    const METHOD_MAP = {
      '/status': {
        GET: {command: 'getStatus'},
      },
      // ...
    } as const;

Typical usage::

    from methodmap.converter import extract
    from methodmap.parser import load_tree

    commands = extract(load_tree("project.json"))
    for module, info in commands.items():
        for route, command_map in info.route_map.items():
            ...

Sub-modules:

* :mod:`~methodmap.converter.tree` -- child queries that look through
  aliased literal types.
* :mod:`~methodmap.converter.guards` -- shape predicates and classification.
* :mod:`~methodmap.converter.known_methods` -- canonical command
  declarations from the extension-point interface.
* :mod:`~methodmap.converter.method_map` -- the two map parsers.
* :mod:`~methodmap.converter.builtin` -- the base driver's ``METHOD_MAP``.
* :mod:`~methodmap.converter.external` -- extension drivers and plugins.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Optional

from methodmap.converter.builtin import BuiltinMethodMapConverter
from methodmap.converter.external import ExternalConverter
from methodmap.converter.guards import NodeShape, ShapeGuards
from methodmap.converter.known_methods import KnownMethodsResolver
from methodmap.converter.method_map import (
    merge_execute_methods,
    merge_route_maps,
    parse_execute_method_map,
    parse_method_map,
)
from methodmap.log import PluginLogger
from methodmap.models import CommandInfo, DeclarationNode, ModuleCommands, WellKnownNames


def extract(
    tree: DeclarationNode,
    names: Optional[WellKnownNames] = None,
    log: Optional[PluginLogger] = None,
) -> ModuleCommands:
    """Extract every command declared in *tree*.

    Runs the known-methods resolver, then the built-in and extension
    converters, and merges their results. A module found by both gets a
    single :class:`~methodmap.models.CommandInfo`, with the extension's
    commands taking precedence per command name.

    Args:
        tree: Root (project) node of the declaration tree. It is not modified.
        names: Well-known names to match. Defaults to the Appium names.
        log: Logger for diagnostics. Defaults to one writing to the global
            :class:`~methodmap.output.OutputManager`.

    Returns:
        A read-only mapping from module (or project) node to its commands,
        keyed by the node instances of *tree*.

    Raises:
        IntegrityViolationError: If the built-in driver's method map is
            present but declares no routes. No partial result is returned.
    """
    log = (log or PluginLogger()).child("converter")
    guards = ShapeGuards(names)

    known_methods = KnownMethodsResolver(tree, log, guards).convert()
    builtin_commands = BuiltinMethodMapConverter(tree, log, guards).convert()
    external_commands = ExternalConverter(tree, log, known_methods, guards).convert()

    module_commands: dict[DeclarationNode, CommandInfo] = {}
    for source in (builtin_commands, external_commands):
        for module, info in source.items():
            existing = module_commands.get(module)
            if existing is None:
                module_commands[module] = CommandInfo(
                    route_map=dict(info.route_map),
                    execute_methods=list(info.execute_methods),
                )
                continue
            merge_route_maps(existing.route_map, info.route_map)
            merge_execute_methods(existing.execute_methods, info.execute_methods)

    return MappingProxyType(module_commands)


__all__ = [
    "BuiltinMethodMapConverter",
    "ExternalConverter",
    "KnownMethodsResolver",
    "NodeShape",
    "ShapeGuards",
    "extract",
    "merge_execute_methods",
    "merge_route_maps",
    "parse_execute_method_map",
    "parse_method_map",
]

"""Parse method-map and execute-method-map constants into command models.

A driver declares its HTTP surface as an ``as const`` object literal::

    static newMethodMap = {
      '/session/:sessionId/status': {
        GET: {command: 'getStatus'},
        POST: {command: 'setStatus', payloadParams: {required: ['status']}},
      },
    } as const;

and its script surface as::

    static executeMethodMap = {
      'mobile: shell': {command: 'mobileShell', params: {optional: ['timeout']}},
    } as const;

:func:`parse_method_map` turns the first into a
:data:`~methodmap.models.RouteMap`; :func:`parse_execute_method_map` turns
the second into an ordered set of :class:`~methodmap.models.ExecuteCommand`.
Malformed entries are logged and skipped; their siblings are still parsed.

Comments for route commands are resolved in this order:

1. the comment on the class's own implementation of the command;
2. the comment on the declaration that implementation is inherited from;
3. the comment on the known (extension-point) declaration of the command;
4. the comment on the HTTP-verb entry in the map itself.
"""

from __future__ import annotations

from typing import Optional

from methodmap.converter.guards import ShapeGuards
from methodmap.converter.tree import (
    effective_children,
    filter_children_by_kind,
    find_child_by_guard,
    find_child_by_name_and_guard,
)
from methodmap.log import PluginLogger
from methodmap.models import (
    Command,
    Comment,
    DeclarationNode,
    ExecMethodDataSet,
    ExecuteCommand,
    HTTPMethod,
    KnownMethods,
    ReflectionKind,
    RouteMap,
)


def parse_method_map(
    map_node: DeclarationNode,
    parent_node: DeclarationNode,
    local_methods: KnownMethods,
    known_methods: Optional[KnownMethods] = None,
    *,
    log: PluginLogger,
    guards: Optional[ShapeGuards] = None,
) -> RouteMap:
    """Extract the routes declared by a method-map constant.

    Args:
        map_node: The method-map constant (module variable or static property).
        parent_node: Module or class owning the map; used in diagnostics only.
        local_methods: Async methods implemented by the owning class.
        known_methods: Canonical declarations used as a comment fallback.
        log: Destination for diagnostics.
        guards: Shape predicates. Defaults to the Appium names.

    Returns:
        Route -> command name -> :class:`~methodmap.models.Command`, in
        document order. Empty if the map declares no usable route.
    """
    guards = guards or ShapeGuards()
    known_methods = known_methods or {}
    routes: RouteMap = {}

    # Ordered set of method names no command has claimed yet.
    unmatched = dict.fromkeys([*local_methods, *known_methods])

    route_props = filter_children_by_kind(map_node, ReflectionKind.PROPERTY)
    if not route_props:
        log.warn("No routes found in method map of %s; skipping", parent_node.name)
        return routes

    for route_prop in route_props:
        route = route_prop.key
        if not route:
            log.warn("Empty route in %s; skipping", parent_node.name)
            continue

        if not guards.is_route_entry(route_prop):
            log.warn(
                "Route %s.%s is not an object of HTTP methods (found %s); skipping",
                parent_node.name,
                route,
                guards.classify(route_prop).value,
            )
            continue

        verb_props = []
        for child in effective_children(route_prop):
            if guards.is_verb_entry(child):
                verb_props.append(child)
            else:
                log.warn(
                    "Malformed HTTP method %s in route %s.%s; skipping",
                    child.name,
                    parent_node.name,
                    route,
                )
        if not verb_props:
            log.warn("No HTTP methods found in route %s.%s", parent_node.name, route)
            continue

        for verb_prop in verb_props:
            http_method = HTTPMethod(verb_prop.name)

            command_prop = find_child_by_guard(verb_prop, guards.is_command_prop)
            if command_prop is None:
                log.verbose(
                    "No command bound to %s %s in %s", http_method.value, route, parent_node.name
                )
                continue

            command = command_prop.value
            if not isinstance(command, str) or not command:
                log.warn(
                    "Empty command name found in %s.%s.%s",
                    parent_node.name,
                    route,
                    http_method.value,
                )
                continue

            if command in local_methods:
                log.verbose("Found method matching command %s", command)
            unmatched.pop(command, None)

            params_prop = find_child_by_guard(verb_prop, guards.is_params_prop)
            routes.setdefault(route, {})[command] = Command(
                command=command,
                route=route,
                http_method=http_method,
                required_params=convert_required_params(params_prop, guards),
                optional_params=convert_optional_params(params_prop, guards),
                comment=resolve_command_comment(command, verb_prop, local_methods, known_methods),
            )

    for name in unmatched:
        if name in local_methods:
            log.info("Method %s in %s is not bound to any route", name, parent_node.name)
        else:
            log.verbose("Known method %s is not bound to any route in %s", name, parent_node.name)

    return routes


def parse_execute_method_map(
    class_node: DeclarationNode,
    local_methods: KnownMethods,
    *,
    log: PluginLogger,
    guards: Optional[ShapeGuards] = None,
) -> ExecMethodDataSet:
    """Extract the execute commands declared on *class_node*.

    Unlike a route, an execute-map entry without a ``command`` property is
    always malformed, so it is warned about rather than skipped silently.

    Returns:
        Execute commands in document order; a later entry with the same
        ``(script, command)`` identity as an earlier one is dropped.
    """
    guards = guards or ShapeGuards()
    exec_map = find_child_by_guard(class_node, guards.is_exec_map)
    if exec_map is None:
        return []

    found: dict[tuple[str, str], ExecuteCommand] = {}
    for entry in filter_children_by_kind(exec_map, ReflectionKind.PROPERTY):
        script = entry.key

        command_prop = find_child_by_guard(entry, guards.is_command_prop)
        if command_prop is None:
            log.warn(
                'Execute method map in %s has no "command" property for %s',
                class_node.name,
                script,
            )
            continue

        command = command_prop.value
        if not isinstance(command, str) or not command:
            log.warn(
                'Execute method map in %s has an empty or invalid "command" property for %s',
                class_node.name,
                script,
            )
            continue

        if command not in local_methods:
            log.verbose(
                "Execute method %s calls %s, which %s does not implement",
                script,
                command,
                class_node.name,
            )

        params_prop = find_child_by_guard(entry, guards.is_params_prop)
        execute_command = ExecuteCommand(
            command=command,
            script=script,
            required_params=convert_required_params(params_prop, guards),
            optional_params=convert_optional_params(params_prop, guards),
            comment=entry.comment,
        )
        found.setdefault(execute_command.identity, execute_command)

    return list(found.values())


def resolve_command_comment(
    command: str,
    verb_prop: DeclarationNode,
    local_methods: KnownMethods,
    known_methods: KnownMethods,
) -> Optional[Comment]:
    """Pick the documentation comment for *command* (see module docstring)."""
    method = local_methods.get(command)
    if method is not None:
        if method.comment is not None:
            return method.comment
        if method.inherited_from is not None and method.inherited_from.comment is not None:
            return method.inherited_from.comment

    known = known_methods.get(command)
    if known is not None and known.comment is not None:
        return known.comment

    return verb_prop.comment


def convert_required_params(
    params_prop: Optional[DeclarationNode], guards: ShapeGuards
) -> list[str]:
    return _convert_command_params(guards.names.required_prop, params_prop, guards)


def convert_optional_params(
    params_prop: Optional[DeclarationNode], guards: ShapeGuards
) -> list[str]:
    return _convert_command_params(guards.names.optional_prop, params_prop, guards)


def _convert_command_params(
    prop_name: str, params_prop: Optional[DeclarationNode], guards: ShapeGuards
) -> list[str]:
    """Read the string literals of the *prop_name* array under *params_prop*."""
    if params_prop is None:
        return []

    names_prop = find_child_by_name_and_guard(params_prop, prop_name, guards.is_param_names_prop)
    if names_prop is None:
        return []

    return [value for value in names_prop.value if isinstance(value, str) and value]


def merge_route_maps(target: RouteMap, source: RouteMap) -> RouteMap:
    """Merge *source* into *target* in place, per command name; *source* wins."""
    for route, commands in source.items():
        target.setdefault(route, {}).update(commands)
    return target


def merge_execute_methods(
    target: ExecMethodDataSet, source: ExecMethodDataSet
) -> ExecMethodDataSet:
    """Append the members of *source* not already in *target*, in place."""
    seen = {execute_command.identity for execute_command in target}
    for execute_command in source:
        if execute_command.identity not in seen:
            seen.add(execute_command.identity)
            target.append(execute_command)
    return target

"""Extract command -- print the commands declared in a declaration tree.

``methodmap extract SOURCE`` loads a tree (file, URL, or ``-`` for stdin),
runs the extraction engine, and prints one table of route-bound commands
and one of execute methods. With ``--json`` the full per-module
:class:`~methodmap.models.CommandInfo` documents are written instead.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from methodmap.models import CommandInfo, DeclarationNode
from methodmap.output import OutputFormat, format_response, get_output, info, warning


def extract_command(
    ctx: typer.Context,
    source: str = typer.Argument(
        help="Declaration tree: file path, http(s) URL, or '-' for stdin."
    ),
    module: Optional[str] = typer.Option(
        None, "--module", "-m", help="Only show commands of this module."
    ),
) -> None:
    """Extract routes and execute methods from a declaration tree.

    Example::

        methodmap extract docs/project.json
        methodmap --json extract docs/project.json -m @appium/fake-driver
        typedoc --json /dev/stdout | methodmap extract -
    """
    from methodmap.converter import extract
    from methodmap.models import WellKnownNames
    from methodmap.parser import load_tree

    names = (ctx.obj or {}).get("names") or WellKnownNames()

    tree = load_tree(source)
    module_commands = extract(tree, names=names)

    selected = [
        (node, command_info)
        for node, command_info in module_commands.items()
        if module is None or node.name == module
    ]
    if module is not None and not selected:
        info(f"No commands found for module {module}")

    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response(_to_document(selected))
        return

    route_rows, exec_rows = _to_rows(selected)
    output.print_table(
        ["Module", "Route", "Method", "Command", "Required", "Optional"],
        route_rows,
        title=f"Routes ({len(route_rows)})",
    )
    if exec_rows:
        output.print_table(
            ["Module", "Script", "Command", "Required", "Optional"],
            exec_rows,
            title=f"Execute methods ({len(exec_rows)})",
        )


def _to_document(selected: list[tuple[DeclarationNode, CommandInfo]]) -> dict[str, Any]:
    """Key each module by name; a repeated name is keyed ``name#id``."""
    document: dict[str, Any] = {}
    for node, command_info in selected:
        key = node.name
        if key in document:
            key = f"{node.name}#{node.id if node.id is not None else len(document)}"
            warning(f"Module name {node.name} is declared more than once; keyed as {key}")
        document[key] = command_info.model_dump(mode="json")
    return document


def _to_rows(
    selected: list[tuple[DeclarationNode, CommandInfo]],
) -> tuple[list[list[str]], list[list[str]]]:
    route_rows: list[list[str]] = []
    exec_rows: list[list[str]] = []
    for node, command_info in selected:
        name = node.name
        for route, command_map in command_info.route_map.items():
            for command in command_map.values():
                route_rows.append([
                    name,
                    route,
                    command.http_method.value,
                    command.command,
                    ", ".join(command.required_params),
                    ", ".join(command.optional_params),
                ])
        for execute_command in command_info.execute_methods:
            exec_rows.append([
                name,
                execute_command.script,
                execute_command.command,
                ", ".join(execute_command.required_params),
                ", ".join(execute_command.optional_params),
            ])
    return route_rows, exec_rows

"""methodmap -- Extract command maps from driver declaration trees.

This package reads a tree of parsed source declarations (as produced by a
documentation front-end such as TypeDoc) and recovers the commands a
remote-automation driver declares: HTTP routes from its method maps and
script bindings from its execute-method maps. The result is a per-module
command model that a renderer can turn into reference pages.

Typical workflow::

    methodmap extract project.json          # table of routes and scripts
    methodmap --json extract project.json   # machine-readable output

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models for declaration trees and command maps.
    converter: The extraction engine (guards, tree queries, parsers).
    parser: Loading declaration trees from files, URLs, or stdin.
    config: XDG-aware configuration and the well-known names table.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    log: Leveled, namespaced logger handed to the extraction engine.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"

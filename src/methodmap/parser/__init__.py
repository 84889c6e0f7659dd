"""Declaration-tree loading -- read, normalise, validate and link a tree.

This sub-package turns a serialised declaration tree (JSON or YAML, local
file, remote URL, or stdin) into a :class:`~methodmap.models.DeclarationNode`
that the extraction engine can consume.

Typical usage::

    from methodmap.parser import load_tree
    from methodmap.converter import extract

    commands = extract(load_tree("docs/project.json"))

Sub-modules:

* :mod:`~methodmap.parser.loader` -- I/O layer plus format detection.
* :mod:`~methodmap.parser.typedoc` -- normalisation of TypeDoc JSON output.
* :mod:`~methodmap.parser.resolver` -- linking of ``inherited_from`` ids.
"""

from methodmap.parser.loader import build_tree, load_document, load_tree

__all__ = ["load_tree", "load_document", "build_tree"]

"""Load declaration trees from a URL, local file, or stdin.

This module handles all I/O for fetching a serialised declaration tree and
turning it into a linked :class:`~methodmap.models.DeclarationNode`. Both
JSON and YAML are accepted, with automatic format detection. Two document
shapes are understood:

* the native shape, which validates directly as a ``DeclarationNode``
  (``kind``, ``name``, ``children``, ``typeDeclaration``, ``value`` ...);
* TypeDoc's JSON output (``typedoc --json``), recognised by its integer
  ``kind`` and normalised by :mod:`methodmap.parser.typedoc`.

The public functions are:

* :func:`load_tree` -- load, normalise, validate and link a tree.
* :func:`load_document` -- load the raw dictionary only.
* :func:`build_tree` -- normalise, validate and link an in-memory document.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from methodmap.exceptions import TreeParseError
from methodmap.models import DeclarationNode
from methodmap.parser.resolver import link_inheritance
from methodmap.parser.typedoc import from_typedoc, is_typedoc_document


def load_tree(source: str) -> DeclarationNode:
    """Load a declaration tree from URL, file path, or stdin (``-``).

    Args:
        source: A URL (http/https), file path, or ``-`` for stdin.

    Returns:
        The root node, with ``inherited_from`` links resolved.

    Raises:
        TreeParseError: If the source cannot be read, parsed, validated,
            or linked.
    """
    return build_tree(load_document(source))


def build_tree(document: dict[str, Any]) -> DeclarationNode:
    """Validate *document* as a declaration tree and link inheritance ids.

    Raises:
        TreeParseError: If the document is not a valid tree.
    """
    if is_typedoc_document(document):
        document = from_typedoc(document)

    try:
        root = DeclarationNode.model_validate(document)
    except ValidationError as exc:
        raise TreeParseError(f"Invalid declaration tree: {exc}") from exc

    link_inheritance(root)
    return root


def load_document(source: str) -> dict[str, Any]:
    """Load a raw document from URL, file path, or stdin ('-')."""
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise TreeParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise TreeParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP(S), using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise TreeParseError(
            f"HTTP {exc.response.status_code} fetching tree from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise TreeParseError(f"Failed to fetch tree from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local file; ``.json``/``.yaml``/``.yml`` extensions set the hint."""
    file_path = Path(path)
    if not file_path.is_file():
        raise TreeParseError(f"Tree file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TreeParseError(f"Failed to read tree file {path}: {exc}") from exc

    if not content.strip():
        raise TreeParseError(f"Tree file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    JSON is tried first unless the hint says YAML; every JSON document is
    also YAML, but the JSON parser is stricter and faster.

    Raises:
        TreeParseError: If the content parses as neither format, or is not
            a mapping at the top level.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise TreeParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse tree as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise TreeParseError(msg) from exc

    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise TreeParseError(f"Tree must be a JSON/YAML object (got {kind})")
    return result

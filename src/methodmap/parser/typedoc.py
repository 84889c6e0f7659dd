"""Normalise TypeDoc's JSON output into the native declaration-tree shape.

``typedoc --json project.json`` serialises its reflections with integer
``kind`` bit flags, nests object-literal members under
``type.declaration``, keeps literal values inside ``type`` objects, puts
method return types and comments on ``signatures``, and refers to inherited
declarations by id through ``inheritedFrom.target``. :func:`from_typedoc`
rewrites all of that into a dictionary that validates as a
:class:`~methodmap.models.DeclarationNode`.

Inheritance references that point outside the document (TypeDoc's
``excludeExternals``) are dropped rather than left dangling, and references
to a signature are redirected to the method that owns it.
"""

from __future__ import annotations

from typing import Any, Optional

from methodmap.models import ReflectionKind

_KINDS: dict[int, ReflectionKind] = {
    1: ReflectionKind.PROJECT,
    2: ReflectionKind.MODULE,
    4: ReflectionKind.NAMESPACE,
    32: ReflectionKind.VARIABLE,
    64: ReflectionKind.FUNCTION,
    128: ReflectionKind.CLASS,
    256: ReflectionKind.INTERFACE,
    512: ReflectionKind.CONSTRUCTOR,
    1024: ReflectionKind.PROPERTY,
    2048: ReflectionKind.METHOD,
    65536: ReflectionKind.TYPE_LITERAL,
    262144: ReflectionKind.ACCESSOR,
    4194304: ReflectionKind.TYPE_ALIAS,
}

_FLAGS = ("isPrivate", "isProtected", "isStatic", "isReadonly", "isConst", "isExternal")


def is_typedoc_document(document: dict[str, Any]) -> bool:
    """Whether *document* is TypeDoc JSON (integer ``kind`` at the root)."""
    kind = document.get("kind")
    return isinstance(kind, int) and not isinstance(kind, bool)


def from_typedoc(document: dict[str, Any]) -> dict[str, Any]:
    """Return the native-shape equivalent of a TypeDoc JSON *document*."""
    converter = _TypeDocConverter()
    root = converter.convert(document)
    converter.fix_references(root)
    return root


class _TypeDocConverter:
    def __init__(self) -> None:
        self._ids: set[int] = set()
        self._signature_owners: dict[int, int] = {}

    def convert(self, reflection: dict[str, Any]) -> dict[str, Any]:
        node: dict[str, Any] = {
            "id": reflection.get("id"),
            "kind": _KINDS.get(reflection.get("kind"), ReflectionKind.OTHER).value,
            "name": reflection.get("name", ""),
            "flags": {
                flag: True for flag in _FLAGS if (reflection.get("flags") or {}).get(flag)
            },
        }
        if node["id"] is not None:
            self._ids.add(node["id"])
        if "originalName" in reflection:
            node["originalName"] = reflection["originalName"]

        comment = _comment(reflection.get("comment"))
        inherited = reflection.get("inheritedFrom")

        signatures = reflection.get("signatures") or []
        for signature in signatures:
            if signature.get("id") is not None and node["id"] is not None:
                self._signature_owners[signature["id"]] = node["id"]
        if signatures:
            first = signatures[0]
            if comment is None:
                comment = _comment(first.get("comment"))
            if inherited is None:
                inherited = first.get("inheritedFrom")
            node["returnType"] = _type_name(first.get("type"))

        if comment is not None:
            node["comment"] = comment
        target = _reference_target(inherited)
        if target is not None:
            node["inheritedFromId"] = target

        if "children" in reflection:
            node["children"] = [self.convert(child) for child in reflection["children"]]

        self._apply_type(node, reflection.get("type"))
        return node

    def _apply_type(self, node: dict[str, Any], type_: Any) -> None:
        type_ = _unwrap_readonly(type_)
        if not isinstance(type_, dict):
            return
        kind = type_.get("type")
        if kind == "reflection":
            node["typeDeclaration"] = self.convert(type_.get("declaration") or {})
        elif kind == "literal":
            node["value"] = _literal(type_.get("value"))
        elif kind == "tuple":
            node["value"] = [
                _literal(element.get("value"))
                for element in type_.get("elements") or []
                if isinstance(element, dict) and element.get("type") == "literal"
            ]

    def fix_references(self, root: dict[str, Any]) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            if "inheritedFromId" in node:
                target = self._signature_owners.get(node["inheritedFromId"], node["inheritedFromId"])
                if target in self._ids and target != node.get("id"):
                    node["inheritedFromId"] = target
                else:
                    del node["inheritedFromId"]
            stack.extend(node.get("children", []))
            if "typeDeclaration" in node:
                stack.append(node["typeDeclaration"])


def _unwrap_readonly(type_: Any) -> Any:
    # ``as const`` arrays arrive as ``readonly [...]``.
    while isinstance(type_, dict) and type_.get("type") == "typeOperator":
        type_ = type_.get("target")
    return type_


def _type_name(type_: Any) -> Optional[str]:
    type_ = _unwrap_readonly(type_)
    if isinstance(type_, dict) and type_.get("type") in ("reference", "intrinsic"):
        return type_.get("name")
    return None


def _reference_target(reference: Any) -> Optional[int]:
    if not isinstance(reference, dict):
        return None
    # TypeDoc < 0.23 used "id" where newer versions use "target".
    target = reference.get("target", reference.get("id"))
    return target if isinstance(target, int) and not isinstance(target, bool) else None


def _literal(value: Any) -> Any:
    if isinstance(value, dict) and "value" in value:
        # bigint literals: {"negative": bool, "value": "123"}
        number = int(value["value"])
        return -number if value.get("negative") else number
    return value


def _comment(raw: Any) -> Optional[dict[str, Any]]:
    if not isinstance(raw, dict):
        return None
    if "summary" in raw:
        return {
            "summary": _join_parts(raw.get("summary")),
            "blockTags": [
                {"tag": tag.get("tag", ""), "content": _join_parts(tag.get("content"))}
                for tag in raw.get("blockTags") or []
            ],
            "modifierTags": list(raw.get("modifierTags") or []),
        }
    # Pre-0.23 comments: shortText/text plus flat tags.
    summary = "\n\n".join(part for part in (raw.get("shortText"), raw.get("text")) if part)
    return {
        "summary": summary.strip(),
        "blockTags": [
            {"tag": f"@{tag.get('tag', '').lstrip('@')}", "content": (tag.get("text") or "").strip()}
            for tag in raw.get("tags") or []
        ],
    }


def _join_parts(parts: Any) -> str:
    return "".join(part.get("text", "") for part in parts or [] if isinstance(part, dict)).strip()

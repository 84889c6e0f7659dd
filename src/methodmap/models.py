"""Canonical Pydantic models shared across all methodmap modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Declaration tree models** -- the read-only input handed to the extractor:
    :class:`ReflectionKind`, :class:`CommentTag`, :class:`Comment`,
    :class:`NodeFlags`, and :class:`DeclarationNode`.

**Command models** -- produced by the extraction engine and consumed by
renderers:
    :class:`HTTPMethod`, :class:`Command`, :class:`ExecuteCommand`, and
    :class:`CommandInfo`, plus the ``CommandMap``, ``RouteMap``,
    ``KnownMethods`` and ``ModuleCommands`` aliases.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`WellKnownNames`, :class:`OutputConfig`, and :class:`GlobalConfig`.

All models use Pydantic v2. Input models accept both the snake_case field
names and the camelCase spellings used by documentation front-ends.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Declaration Tree ---


class ReflectionKind(str, enum.Enum):
    """Kinds of declaration a :class:`DeclarationNode` can represent."""

    PROJECT = "project"
    MODULE = "module"
    NAMESPACE = "namespace"
    CLASS = "class"
    INTERFACE = "interface"
    METHOD = "method"
    PROPERTY = "property"
    VARIABLE = "variable"
    FUNCTION = "function"
    ACCESSOR = "accessor"
    CONSTRUCTOR = "constructor"
    TYPE_LITERAL = "type_literal"
    TYPE_ALIAS = "type_alias"
    OTHER = "other"


class CommentTag(BaseModel):
    """A block tag (``@returns``, ``@example`` ...) inside a :class:`Comment`."""

    tag: str
    content: str = ""


class Comment(BaseModel):
    """A documentation comment attached to a declaration.

    Only the summary is needed to document a command; block and modifier
    tags are carried through so renderers can use them. A bare string is
    accepted wherever a comment is expected and becomes the summary.
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    block_tags: list[CommentTag] = Field(default_factory=list, alias="blockTags")
    modifier_tags: list[str] = Field(default_factory=list, alias="modifierTags")

    def has_modifier(self, tag: str) -> bool:
        """Return ``True`` if the comment carries *tag* (with or without ``@``)."""
        wanted = tag.lstrip("@")
        return any(t.lstrip("@") == wanted for t in self.modifier_tags)


class NodeFlags(BaseModel):
    """Modifier flags reported by the front-end for a declaration."""

    model_config = ConfigDict(populate_by_name=True)

    is_private: bool = Field(default=False, alias="isPrivate")
    is_protected: bool = Field(default=False, alias="isProtected")
    is_static: bool = Field(default=False, alias="isStatic")
    is_readonly: bool = Field(default=False, alias="isReadonly")
    is_const: bool = Field(default=False, alias="isConst")
    is_external: bool = Field(default=False, alias="isExternal")


class DeclarationNode(BaseModel):
    """One node of the parsed-source declaration tree.

    The tree is produced by an external front-end and treated as read-only.
    A few fields deserve explanation:

    * ``original_name`` -- the literal key as written in source. Route
      paths such as ``/session/:sessionId/url`` live here when the
      front-end normalises ``name``.
    * ``value`` -- the literal payload of a ``const`` property (a string,
      number, or a list for array literals). Whether a value was supplied at
      all is reported by :attr:`has_value`, so a ``null`` literal is not
      mistaken for "no literal".
    * ``type_declaration`` -- for constants declared through an aliased
      literal type, the wrapped type-literal declaration that holds the
      real children. See :func:`~methodmap.converter.tree.effective_children`.
    * ``inherited_from`` -- the declaration this one is inherited from.
      Documents refer to it by ``inherited_from_id``; the link is made by
      :func:`~methodmap.parser.resolver.link_inheritance`.

    Nodes compare and hash by identity: two structurally equal nodes are
    still different declarations, and results are keyed by the exact node
    instances of the input tree.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    kind: ReflectionKind
    name: str
    original_name: Optional[str] = Field(default=None, alias="originalName")
    children: list[DeclarationNode] = Field(default_factory=list)
    value: Any = None
    comment: Optional[Comment] = None
    type_declaration: Optional[DeclarationNode] = Field(
        default=None, alias="typeDeclaration"
    )
    return_type: Optional[str] = Field(
        default=None, alias="returnType", description="Name of the declared return type"
    )
    flags: NodeFlags = Field(default_factory=NodeFlags)
    inherited_from_id: Optional[int] = Field(default=None, alias="inheritedFromId")
    inherited_from: Optional[DeclarationNode] = Field(
        default=None, exclude=True, repr=False
    )

    @field_validator("comment", mode="before")
    @classmethod
    def _coerce_comment(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"summary": value}
        return value

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    @property
    def has_value(self) -> bool:
        """Whether a literal value was declared for this node."""
        return "value" in self.model_fields_set

    @property
    def key(self) -> str:
        """The literal key of this node: ``original_name`` if set, else ``name``."""
        return self.original_name if self.original_name is not None else self.name


# --- Command Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP verbs a method-map route may bind a command to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class Command(BaseModel):
    """A command bound to one route + HTTP verb pair of a method map."""

    command: str = Field(min_length=1)
    route: str = Field(min_length=1)
    http_method: HTTPMethod
    required_params: list[str] = Field(default_factory=list)
    optional_params: list[str] = Field(default_factory=list)
    comment: Optional[Comment] = None


class ExecuteCommand(BaseModel):
    """A command reachable through a driver's execute-method map.

    Identity is the ``(script, command)`` pair: two entries naming the same
    script and command are the same execute command even if their params
    or comments differ.
    """

    command: str = Field(min_length=1)
    script: str
    required_params: list[str] = Field(default_factory=list)
    optional_params: list[str] = Field(default_factory=list)
    comment: Optional[Comment] = None

    @property
    def identity(self) -> tuple[str, str]:
        return (self.script, self.command)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExecuteCommand):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


CommandMap = dict[str, Command]
"""Command name -> :class:`Command`, scoped to a single route."""

RouteMap = dict[str, CommandMap]
"""Route string -> :data:`CommandMap`, in document order."""

ExecMethodDataSet = list[ExecuteCommand]
"""Ordered set of :class:`ExecuteCommand`; no two share an identity."""

KnownMethods = dict[str, DeclarationNode]
"""Method name -> canonical method declaration on the extension point."""


class CommandInfo(BaseModel):
    """Everything extracted from one module (or from the project itself)."""

    route_map: RouteMap = Field(default_factory=dict)
    execute_methods: ExecMethodDataSet = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        """``True`` unless both the route map and execute methods are empty."""
        return bool(self.route_map) or bool(self.execute_methods)

    @property
    def command_count(self) -> int:
        """Number of route-bound commands across all routes."""
        return sum(len(commands) for commands in self.route_map.values())


ModuleCommands = Mapping[DeclarationNode, CommandInfo]
"""Module or project node (by identity) -> :class:`CommandInfo`."""


# --- Configuration ---


class WellKnownNames(BaseModel):
    """The names the extractor looks for in a declaration tree.

    Defaults match the Appium extension API. Every name can be overridden in
    the global or project config so the extractor works against forks and
    renamed packages.
    """

    types_module: str = Field(
        default="@appium/types",
        description="Module declaring the base extension-point interface",
    )
    extension_point_interface: str = Field(
        default="ExternalDriver",
        description="Interface whose async methods are the known commands",
    )
    base_driver_module: str = Field(
        default="@appium/base-driver",
        description="Module holding the framework's built-in driver",
    )
    base_driver_class: str = Field(default="BaseDriver")
    builtin_method_map: str = Field(
        default="METHOD_MAP", description="Module-level constant of built-in routes"
    )
    extension_method_map: str = Field(
        default="newMethodMap", description="Static class property of extension routes"
    )
    execute_method_map: str = Field(
        default="executeMethodMap", description="Static class property of execute scripts"
    )
    command_prop: str = "command"
    params_props: list[str] = Field(
        default_factory=lambda: ["payloadParams", "params"],
        description="Property names holding required/optional parameter lists",
    )
    required_prop: str = "required"
    optional_prop: str = "optional"
    async_return_type: str = Field(
        default="Promise", description="Return type marking a method as asynchronous"
    )
    internal_modifier: str = Field(
        default="@internal", description="Comment modifier excluding a method"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/methodmap/config.json``.

    Loaded and saved by :func:`~methodmap.config.load_global_config` and
    :func:`~methodmap.config.save_global_config`. See
    :func:`~methodmap.config.resolve_config` for the full precedence chain.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    names: WellKnownNames = Field(default_factory=WellKnownNames)

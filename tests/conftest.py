"""Shared test fixtures for methodmap.

Provides builders for native-shape declaration documents, a logger that
records what the extractor reports, isolated config environments, and a
CLI runner. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from methodmap.log import PluginLogger
from methodmap.models import DeclarationNode
from methodmap.output import OutputFormat, OutputManager, reset_output, set_output
from methodmap.parser import build_tree


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams the
    cached references go stale, so each test starts from a fresh manager.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Recording logger
# ---------------------------------------------------------------------------


class RecordingLogger(PluginLogger):
    """PluginLogger that keeps ``(level, namespace, text)`` tuples.

    Child loggers share the parent's ``records`` list.
    """

    def __init__(self, namespace: str = "methodmap") -> None:
        super().__init__(namespace)
        self.records: list[tuple[str, str, str]] = []

    def _emit(self, level: str, message: str, args: tuple[Any, ...]) -> None:
        self.records.append((level, self.namespace, message % args if args else message))

    def messages(self, level: str) -> list[str]:
        return [text for lvl, _, text in self.records if lvl == level]


@pytest.fixture
def log() -> RecordingLogger:
    return RecordingLogger()


# ---------------------------------------------------------------------------
# Declaration document builders
# ---------------------------------------------------------------------------


def _node(kind: str, name: str, children: Optional[list[dict]] = None, **extra: Any) -> dict:
    node: dict[str, Any] = {"kind": kind, "name": name}
    if children is not None:
        node["children"] = children
    node.update({key: value for key, value in extra.items() if value is not None})
    return node


def _literal(name: str, value: Any) -> dict:
    return {"kind": "property", "name": name, "value": value}


def _obj(name: str, *children: dict, comment: Optional[str] = None, kind: str = "property") -> dict:
    return _node(kind, name, list(children), comment=comment)


def _params(required: Optional[list] = None, optional: Optional[list] = None, name: str = "payloadParams") -> dict:
    children = []
    if required is not None:
        children.append(_literal("required", required))
    if optional is not None:
        children.append(_literal("optional", optional))
    return _obj(name, *children)


def _verb(
    verb: str,
    command: Any = None,
    *,
    required: Optional[list] = None,
    optional: Optional[list] = None,
    comment: Optional[str] = None,
) -> dict:
    children = []
    if command is not None:
        children.append(_literal("command", command))
    if required is not None or optional is not None:
        children.append(_params(required, optional))
    return _obj(verb, *children, comment=comment)


def _route(path: str, *verbs: dict) -> dict:
    return _obj(path, *verbs)


def _method(
    name: str,
    comment: Optional[str] = None,
    *,
    return_type: str = "Promise",
    id: Optional[int] = None,
    inherited_from: Optional[int] = None,
    **extra: Any,
) -> dict:
    return _node(
        "method",
        name,
        returnType=return_type,
        comment=comment,
        id=id,
        inheritedFromId=inherited_from,
        **extra,
    )


def _exec_entry(
    script: str,
    command: Any = None,
    *,
    required: Optional[list] = None,
    optional: Optional[list] = None,
    comment: Optional[str] = None,
) -> dict:
    children = []
    if command is not None:
        children.append(_literal("command", command))
    if required is not None or optional is not None:
        children.append(_params(required, optional, name="params"))
    return _obj(script, *children, comment=comment)


def _method_map(*routes: dict, name: str = "newMethodMap") -> dict:
    return _obj(name, *routes)


def _exec_map(*entries: dict) -> dict:
    return _obj("executeMethodMap", *entries)


def _klass(name: str, *children: dict) -> dict:
    return _node("class", name, list(children))


def _module(name: str, *children: dict) -> dict:
    return _node("module", name, list(children))


def _project(*children: dict, name: str = "project") -> dict:
    return _node("project", name, list(children))


def _build(document: dict) -> DeclarationNode:
    return build_tree(json.loads(json.dumps(document)))


@pytest.fixture
def nodes() -> SimpleNamespace:
    """Builders for native-shape declaration documents.

    Each builder returns a plain dict; ``nodes.build(doc)`` validates it
    into a linked :class:`DeclarationNode` tree.
    """
    return SimpleNamespace(
        literal=_literal,
        obj=_obj,
        params=_params,
        verb=_verb,
        route=_route,
        method=_method,
        exec_entry=_exec_entry,
        method_map=_method_map,
        exec_map=_exec_map,
        klass=_klass,
        module=_module,
        project=_project,
        build=_build,
    )


# ---------------------------------------------------------------------------
# Fixture files
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_driver_path() -> Path:
    return FIXTURES_DIR / "fake_driver.json"


@pytest.fixture
def fake_driver_typedoc_path() -> Path:
    return FIXTURES_DIR / "fake_driver.typedoc.json"


@pytest.fixture
def fake_driver_raw(fake_driver_path: Path) -> dict[str, Any]:
    with open(fake_driver_path) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of
    tmp_path, forces the XDG layout, clears all METHODMAP_* variables, and
    changes the working directory to tmp_path.
    """
    monkeypatch.setattr("methodmap.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "METHODMAP_FORMAT",
        "METHODMAP_TYPES_MODULE",
        "METHODMAP_BASE_DRIVER_MODULE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner with the built-in commands registered."""
    from typer.testing import CliRunner

    from methodmap.app import register_commands

    register_commands()
    return CliRunner()

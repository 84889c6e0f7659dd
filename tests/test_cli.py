"""Tests for the methodmap CLI (extract and config commands)."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from methodmap import __version__
from methodmap.app import app, main
from methodmap.config import load_global_config
from methodmap.exceptions import ConfigError, TreeParseError
from methodmap.exit_codes import (
    EXIT_INTEGRITY_VIOLATION,
    EXIT_INVALID_USAGE,
    EXIT_TREE_PARSE_ERROR,
)


@pytest.fixture
def empty_builtin_tree(tmp_path: Path) -> Path:
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({
        "kind": "project",
        "name": "p",
        "children": [{
            "kind": "module",
            "name": "@appium/base-driver",
            "children": [{"kind": "variable", "name": "METHOD_MAP", "children": []}],
        }],
    }), encoding="utf-8")
    return path


class TestRoot:

    def test_version(self, cli_runner, isolated_config) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"methodmap {__version__}"

    def test_invalid_format_in_env(self, cli_runner, isolated_config, monkeypatch, fake_driver_path) -> None:
        monkeypatch.setenv("METHODMAP_FORMAT", "xml")
        result = cli_runner.invoke(app, ["extract", str(fake_driver_path)])
        assert isinstance(result.exception, ConfigError)


class TestExtractCommand:

    def test_json_output(self, cli_runner, isolated_config, fake_driver_path: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "extract", str(fake_driver_path)])
        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert list(document) == ["@appium/base-driver", "@appium/fake-driver"]
        fake = document["@appium/fake-driver"]
        command = fake["route_map"]["/session/:sessionId/fakedriver"]["setFakeThing"]
        assert command["http_method"] == "POST"
        assert command["required_params"] == ["thing"]
        assert [e["script"] for e in fake["execute_methods"]] == ["fake: getThing", "fake: setThing"]

    def test_format_flag_belongs_to_root(self, cli_runner, isolated_config, fake_driver_path: Path) -> None:
        result = cli_runner.invoke(app, ["--quiet", "extract", str(fake_driver_path), "--json"])
        assert result.exit_code == 2

    def test_json_from_project_config_format(
        self, cli_runner, isolated_config: Path, fake_driver_path: Path
    ) -> None:
        (isolated_config / "methodmap.json").write_text('{"output": {"format": "json"}}')
        result = cli_runner.invoke(app, ["--quiet", "extract", str(fake_driver_path)])
        assert result.exit_code == 0, result.output
        assert "@appium/fake-driver" in json.loads(result.stdout)

    def test_plain_tables(self, cli_runner, isolated_config, fake_driver_path: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "--quiet", "extract", str(fake_driver_path)])
        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert lines[0] == "Module\tRoute\tMethod\tCommand\tRequired\tOptional"
        assert lines[1] == "@appium/base-driver\t/status\tGET\tgetStatus\t\t"
        assert "@appium/base-driver\t/session/:sessionId/element\tPOST\tfindElement\tusing, value\t" in lines
        assert "Module\tScript\tCommand\tRequired\tOptional" in lines
        assert lines[-1] == "@appium/fake-driver\tfake: setThing\tsetFakeThing\tthing\tforce"

    def test_module_filter(self, cli_runner, isolated_config, fake_driver_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "extract", str(fake_driver_path), "-m", "@appium/fake-driver"]
        )
        assert list(json.loads(result.stdout)) == ["@appium/fake-driver"]

    def test_stdin(self, cli_runner, isolated_config, fake_driver_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "extract", "-"], input=fake_driver_path.read_text()
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 2

    def test_typedoc_source(self, cli_runner, isolated_config, fake_driver_typedoc_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "extract", str(fake_driver_typedoc_path)]
        )
        assert result.exit_code == 0, result.output
        assert list(json.loads(result.stdout)) == ["@appium/base-driver", "@appium/fake-driver"]

    def test_output_file(self, cli_runner, isolated_config: Path, fake_driver_path: Path) -> None:
        target = isolated_config / "commands.json"
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "-o", str(target), "extract", str(fake_driver_path)]
        )
        assert result.exit_code == 0, result.output
        assert result.stdout == ""
        assert "@appium/base-driver" in json.loads(target.read_text(encoding="utf-8"))

    def test_custom_names_from_env(
        self, cli_runner, isolated_config, monkeypatch, fake_driver_path: Path
    ) -> None:
        monkeypatch.setenv("METHODMAP_BASE_DRIVER_MODULE", "@acme/base-driver")
        result = cli_runner.invoke(app, ["--json", "--quiet", "extract", str(fake_driver_path)])
        assert list(json.loads(result.stdout)) == ["@appium/fake-driver"]

    def test_missing_file(self, cli_runner, isolated_config, tmp_path: Path) -> None:
        result = cli_runner.invoke(app, ["extract", str(tmp_path / "nope.json")])
        assert isinstance(result.exception, TreeParseError)


class TestMainExitCodes:

    @pytest.fixture(autouse=True)
    def _no_signal_handlers(self, monkeypatch) -> None:
        monkeypatch.setattr("methodmap.app._setup_signal_handlers", lambda: None)

    def _run(self, monkeypatch, *args: str) -> int:
        monkeypatch.setattr(sys, "argv", ["methodmap", *args])
        with pytest.raises(SystemExit) as exc_info:
            main()
        return exc_info.value.code

    def test_integrity_violation_exits_8(
        self, isolated_config, monkeypatch, capsys, empty_builtin_tree: Path
    ) -> None:
        code = self._run(monkeypatch, "--no-color", "extract", str(empty_builtin_tree))
        assert code == EXIT_INTEGRITY_VIOLATION
        assert "Error: Could not find any commands in METHOD_MAP" in capsys.readouterr().err

    def test_tree_parse_error_exits_7(self, isolated_config, monkeypatch, tmp_path: Path) -> None:
        code = self._run(monkeypatch, "extract", str(tmp_path / "nope.json"))
        assert code == EXIT_TREE_PARSE_ERROR

    def test_conflicting_formats_exit_2(
        self, isolated_config, monkeypatch, capsys, fake_driver_path: Path
    ) -> None:
        code = self._run(monkeypatch, "--json", "--plain", "extract", str(fake_driver_path))
        assert code == EXIT_INVALID_USAGE
        assert "mutually exclusive" in capsys.readouterr().err

    def test_verbose_shows_trace_messages(
        self, isolated_config, monkeypatch, capsys, fake_driver_path: Path
    ) -> None:
        code = self._run(
            monkeypatch, "--json", "--no-color", "--verbose", "extract", str(fake_driver_path)
        )
        assert code == 0
        assert "[debug]" in capsys.readouterr().err

    def test_trace_messages_hidden_by_default(
        self, isolated_config, monkeypatch, capsys, fake_driver_path: Path
    ) -> None:
        code = self._run(monkeypatch, "--json", "--no-color", "extract", str(fake_driver_path))
        assert code == 0
        assert "[debug]" not in capsys.readouterr().err

    def test_duplicate_module_names_keyed_by_id(
        self, isolated_config: Path, monkeypatch, capsys, nodes
    ) -> None:
        def driver(node_id: int, command: str) -> dict:
            module = nodes.module(
                "@acme/driver",
                nodes.klass("AcmeDriver", nodes.method_map(
                    nodes.route("/x", nodes.verb("GET", command))
                )),
            )
            module["id"] = node_id
            return module

        source = isolated_config / "twins.json"
        source.write_text(json.dumps(nodes.project(driver(1, "first"), driver(2, "second"))))
        target = isolated_config / "commands.json"

        code = self._run(monkeypatch, "--json", "--no-color", "-o", str(target), "extract", str(source))
        assert code == 0
        document = json.loads(target.read_text(encoding="utf-8"))
        assert list(document) == ["@acme/driver", "@acme/driver#2"]
        assert list(document["@acme/driver"]["route_map"]["/x"]) == ["first"]
        assert list(document["@acme/driver#2"]["route_map"]["/x"]) == ["second"]
        assert "Module name @acme/driver is declared more than once" in capsys.readouterr().err

    def test_success_exits_0(self, isolated_config, monkeypatch, fake_driver_path: Path) -> None:
        code = self._run(monkeypatch, "--json", "--quiet", "extract", str(fake_driver_path))
        assert code == 0

    def test_unexpected_error_writes_crash_log(
        self, isolated_config: Path, monkeypatch, fake_driver_path: Path
    ) -> None:
        def _boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("methodmap.converter.extract", _boom)
        code = self._run(monkeypatch, "extract", str(fake_driver_path))
        assert code == 1
        logs = list((isolated_config / "data" / "methodmap" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: boom" in logs[0].read_text()


class TestConfigCommands:

    def test_show(self, cli_runner, isolated_config) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["names"]["execute_method_map"] == "executeMethodMap"

    def test_show_effective(self, cli_runner, isolated_config, monkeypatch) -> None:
        monkeypatch.setenv("METHODMAP_TYPES_MODULE", "@env/types")
        result = cli_runner.invoke(app, ["--json", "--quiet", "config", "show", "--effective"])
        assert json.loads(result.stdout)["names"]["types_module"] == "@env/types"

    def test_set_string(self, cli_runner, isolated_config) -> None:
        result = cli_runner.invoke(app, ["config", "set", "names.base_driver_module", "@acme/base"])
        assert result.exit_code == 0, result.output
        assert load_global_config().names.base_driver_module == "@acme/base"

    def test_set_list(self, cli_runner, isolated_config) -> None:
        result = cli_runner.invoke(app, ["config", "set", "names.params_props", "args, params"])
        assert result.exit_code == 0, result.output
        assert load_global_config().names.params_props == ["args", "params"]

    def test_set_unknown_key(self, cli_runner, isolated_config) -> None:
        result = cli_runner.invoke(app, ["config", "set", "names.nope", "x"])
        assert result.exit_code == 2

    def test_reset_with_force(self, cli_runner, isolated_config) -> None:
        cli_runner.invoke(app, ["config", "set", "output.format", "json"])
        result = cli_runner.invoke(app, ["--force", "config", "reset"])
        assert result.exit_code == 0, result.output
        assert load_global_config().output.format == "auto"

    def test_reset_declined(self, cli_runner, isolated_config) -> None:
        cli_runner.invoke(app, ["config", "set", "output.format", "json"])
        result = cli_runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert load_global_config().output.format == "json"

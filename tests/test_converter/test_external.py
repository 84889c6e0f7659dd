"""Tests for methodmap.converter.external -- extension drivers and plugins."""

from __future__ import annotations

from methodmap.converter.external import ExternalConverter


def _status_map(nodes, *verbs: dict) -> dict:
    return nodes.method_map(nodes.route("/status", *verbs))


class TestExternalConverter:

    def test_modules_with_data_only(self, nodes, log) -> None:
        root = nodes.build(nodes.project(
            nodes.module("empty", nodes.klass("Nothing")),
            nodes.module("driver", nodes.klass("Driver", _status_map(nodes, nodes.verb("GET", "getStatus")))),
        ))
        result = ExternalConverter(root, log, {}).convert()
        assert list(result) == [root.children[1]]

    def test_project_is_sole_module(self, nodes, log) -> None:
        root = nodes.build(nodes.project(
            nodes.klass("Driver", _status_map(nodes, nodes.verb("GET", "getStatus"))),
        ))
        result = ExternalConverter(root, log, {}).convert()
        assert list(result) == [root]
        assert log.messages("info") == [
            "Found 1 command on 1 route and 0 execute methods in 1 of 1 module"
        ]

    def test_classes_merge_at_command_level(self, nodes, log) -> None:
        root = nodes.build(nodes.project(nodes.module(
            "driver",
            nodes.klass("First", _status_map(
                nodes, nodes.verb("GET", "getStatus"), nodes.verb("POST", "shared")
            )),
            nodes.klass("Second", _status_map(
                nodes, nodes.verb("PUT", "setStatus"), nodes.verb("DELETE", "shared")
            )),
        )))
        info = ExternalConverter(root, log, {}).convert()[root.children[0]]
        command_map = info.route_map["/status"]
        assert list(command_map) == ["getStatus", "shared", "setStatus"]
        assert command_map["shared"].http_method.value == "DELETE"

    def test_execute_methods_are_unioned(self, nodes, log) -> None:
        root = nodes.build(nodes.project(nodes.module(
            "plugin",
            nodes.klass("A", nodes.exec_map(
                nodes.exec_entry("x: a", "doA"), nodes.exec_entry("x: b", "doB"),
            )),
            nodes.klass("B", nodes.exec_map(
                nodes.exec_entry("x: b", "doB"), nodes.exec_entry("x: c", "doC"),
            )),
        )))
        info = ExternalConverter(root, log, {}).convert()[root.children[0]]
        assert info.route_map == {}
        assert [c.script for c in info.execute_methods] == ["x: a", "x: b", "x: c"]
        assert info.has_data

    def test_known_methods_supply_comments(self, nodes, log) -> None:
        root = nodes.build(nodes.project(
            {"kind": "interface", "name": "ExternalDriver", "children": [
                nodes.method("getStatus", "Known status."),
            ]},
            nodes.module("driver", nodes.klass(
                "Driver", _status_map(nodes, nodes.verb("GET", "getStatus"))
            )),
        ))
        known = {"getStatus": root.children[0].children[0]}
        result = ExternalConverter(root, log, known).convert()
        command = result[root.children[1]].route_map["/status"]["getStatus"]
        assert command.comment.summary == "Known status."

    def test_nothing_found_warns(self, nodes, log) -> None:
        root = nodes.build(nodes.project(nodes.module("empty")))
        assert len(ExternalConverter(root, log, {}).convert()) == 0
        assert log.messages("warn") == ["No commands nor execute methods found in entire project!"]

    def test_extension_map_name_is_configurable(self, nodes, log) -> None:
        from methodmap.converter.guards import ShapeGuards
        from methodmap.models import WellKnownNames

        root = nodes.build(nodes.project(nodes.klass(
            "Driver",
            nodes.method_map(nodes.route("/status", nodes.verb("GET", "getStatus")), name="routes"),
        )))
        guards = ShapeGuards(WellKnownNames(extension_method_map="routes"))
        assert list(ExternalConverter(root, log, {}, guards).convert()) == [root]

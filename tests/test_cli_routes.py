"""Tests for switchyard.cli._routes — ``switchyard routes`` subcommand."""

import types

import pytest

from switchyard.app import Proxy
from switchyard.cli import main
from switchyard.cli._routes import format_table
from switchyard.routing.rule import proxy, proxy_path, proxy_subdomains
from switchyard.routing.table import build


class TestFormatTable:
    def test_rows_in_match_order(self) -> None:
        table = build(
            [
                *proxy_path("health", "Health"),
                *proxy_subdomains("example.com", "Sub"),
                *proxy("example.com", "v1/oauth", "OAuth"),
            ],
            default="Web",
        )

        lines = format_table(table)

        assert lines[0].split() == ["#", "CLASS", "DOMAIN", "PATH", "TARGET"]
        assert set(lines[1]) == {"-"}
        assert lines[2].split() == ["1", "domain+path", "example.com", "/v1/oauth", "OAuth"]
        assert lines[3].split() == ["2", "subdomains", "*.example.com", "*", "Sub"]
        assert lines[4].split() == ["3", "path", "*", "/health", "Health"]
        assert lines[5].split() == ["-", "default", "*", "*", "Web"]

    def test_columns_aligned(self) -> None:
        table = build([*proxy("a.com", "A"), *proxy("much-longer.example.com", "B")])

        lines = format_table(table)

        column = lines[0].index("PATH")
        assert all(line[column] in "*-" for line in lines[1:])

    def test_no_default(self) -> None:
        lines = format_table(build([]))
        assert lines[-1].split() == ["-", "default", "*", "*", "(none)"]


class TestSwitchyardRoutes:
    def test_prints_table(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        app = Proxy(default="Web")
        app.proxy("example.com", "api", "Api")
        mod = types.ModuleType("_routes_test_proxy")
        mod.proxy = app  # type: ignore[attr-defined]
        monkeypatch.setitem(__import__("sys").modules, "_routes_test_proxy", mod)

        main(["routes", "_routes_test_proxy"])

        out = capsys.readouterr().out.splitlines()
        assert out[2].split() == ["1", "domain+path", "example.com", "/api", "Api"]
        assert out[3].split() == ["-", "default", "*", "*", "Web"]

    def test_invalid_import_string(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "nonexistent_module_xyz:proxy"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

"""Tests for switchyard.cli._run — ``switchyard run`` subcommand."""

import types
from unittest.mock import MagicMock, patch

import pytest

from switchyard.app import Proxy
from switchyard.cli import main
from switchyard.config import ProxyConfig


@pytest.fixture
def fake_proxy(monkeypatch: pytest.MonkeyPatch) -> Proxy:
    """Register a fake module with a switchyard Proxy instance."""
    proxy = Proxy(config=ProxyConfig(host="127.0.0.1", port=8000, debug=True, workers=2))
    mod = types.ModuleType("_run_test_proxy")
    mod.proxy = proxy  # type: ignore[attr-defined]
    monkeypatch.setitem(__import__("sys").modules, "_run_test_proxy", mod)
    return proxy


class TestSwitchyardRun:
    @patch("switchyard.server.dev.run_server")
    def test_default_host_and_port(self, mock_server: MagicMock, fake_proxy: Proxy) -> None:
        """run uses proxy config defaults when --host/--port are omitted."""
        main(["run", "_run_test_proxy:proxy"])
        mock_server.assert_called_once()
        args = mock_server.call_args[0]
        assert args[0] is fake_proxy
        assert args[1] == "127.0.0.1"
        assert args[2] == 8000

    @patch("switchyard.server.dev.run_server")
    def test_host_override(self, mock_server: MagicMock, fake_proxy: Proxy) -> None:
        """--host overrides the proxy config."""
        main(["run", "_run_test_proxy:proxy", "--host", "0.0.0.0"])
        args = mock_server.call_args[0]
        assert args[1] == "0.0.0.0"

    @patch("switchyard.server.dev.run_server")
    def test_port_override(self, mock_server: MagicMock, fake_proxy: Proxy) -> None:
        """--port overrides the proxy config."""
        main(["run", "_run_test_proxy:proxy", "--port", "3000"])
        args = mock_server.call_args[0]
        assert args[2] == 3000

    @patch("switchyard.server.dev.run_server")
    def test_port_zero_override(self, mock_server: MagicMock, fake_proxy: Proxy) -> None:
        """--port 0 asks for an ephemeral port instead of the config's."""
        main(["run", "_run_test_proxy:proxy", "--port", "0"])
        args = mock_server.call_args[0]
        assert args[2] == 0

    @patch("switchyard.server.dev.run_server")
    def test_workers(self, mock_server: MagicMock, fake_proxy: Proxy) -> None:
        main(["run", "_run_test_proxy:proxy"])
        assert mock_server.call_args[1]["workers"] == 2

        main(["run", "_run_test_proxy:proxy", "--workers", "4"])
        assert mock_server.call_args[1]["workers"] == 4

    @patch("switchyard.server.dev.run_server")
    def test_app_path_forwarded(self, mock_server: MagicMock, fake_proxy: Proxy) -> None:
        """The original import string is passed as app_path for reload."""
        main(["run", "_run_test_proxy:proxy"])
        kwargs = mock_server.call_args[1]
        assert kwargs["app_path"] == "_run_test_proxy:proxy"

    @patch("switchyard.server.dev.run_server")
    def test_reload_from_config(self, mock_server: MagicMock, fake_proxy: Proxy) -> None:
        """reload flag comes from proxy.config.debug."""
        main(["run", "_run_test_proxy:proxy"])
        kwargs = mock_server.call_args[1]
        assert kwargs["reload"] is True  # debug=True in fixture

    @patch("switchyard.server.dev.run_server")
    def test_proxy_frozen_before_serving(self, mock_server: MagicMock, fake_proxy: Proxy) -> None:
        main(["run", "_run_test_proxy:proxy"])
        with pytest.raises(RuntimeError):
            fake_proxy.proxy_default("web")

    @patch("switchyard.server.dev.run_server")
    def test_configuration_error_exits_one(
        self,
        mock_server: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        proxy = Proxy(ProxyConfig(require_default=True))
        mod = types.ModuleType("_run_test_broken")
        mod.proxy = proxy  # type: ignore[attr-defined]
        monkeypatch.setitem(__import__("sys").modules, "_run_test_broken", mod)

        with pytest.raises(SystemExit) as exc_info:
            main(["run", "_run_test_broken:proxy"])

        assert exc_info.value.code == 1
        assert "No default target" in capsys.readouterr().err
        mock_server.assert_not_called()

    def test_invalid_import_string(self, capsys: pytest.CaptureFixture[str]) -> None:
        """run exits 1 with error message for bad import string."""
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "nonexistent_module_xyz:proxy"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "Error:" in captured.err

"""Tests for switchyard.cli._resolve — Proxy import resolution."""

import types

import pytest

from switchyard.app import Proxy
from switchyard.cli._resolve import resolve_proxy


def _broken_factory() -> Proxy:
    msg = "no config"
    raise ValueError(msg)


@pytest.fixture
def _fake_proxy_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with switchyard proxies on sys.modules."""
    mod = types.ModuleType("_fake_switchyard_proxy")
    mod.proxy = Proxy()  # type: ignore[attr-defined]
    mod.custom = Proxy()  # type: ignore[attr-defined]
    mod.create_proxy = Proxy  # type: ignore[attr-defined]
    mod.broken = _broken_factory  # type: ignore[attr-defined]
    mod.not_a_proxy = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(__import__("sys").modules, "_fake_switchyard_proxy", mod)


@pytest.mark.usefixtures("_fake_proxy_module")
class TestResolveProxy:
    def test_explicit_attribute(self) -> None:
        assert isinstance(resolve_proxy("_fake_switchyard_proxy:proxy"), Proxy)

    def test_custom_attribute(self) -> None:
        import sys

        proxy = resolve_proxy("_fake_switchyard_proxy:custom")
        assert proxy is sys.modules["_fake_switchyard_proxy"].custom

    def test_default_attribute(self) -> None:
        """Omitting :attr defaults to 'proxy'."""
        import sys

        proxy = resolve_proxy("_fake_switchyard_proxy")
        assert proxy is sys.modules["_fake_switchyard_proxy"].proxy

    def test_factory(self) -> None:
        assert isinstance(resolve_proxy("_fake_switchyard_proxy:create_proxy"), Proxy)

    def test_failing_factory(self) -> None:
        with pytest.raises(TypeError, match="raised an error: no config"):
            resolve_proxy("_fake_switchyard_proxy:broken")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_proxy("nonexistent_module_xyz:proxy")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_proxy("_fake_switchyard_proxy:does_not_exist")

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match=r"not a switchyard\.Proxy instance"):
            resolve_proxy("_fake_switchyard_proxy:not_a_proxy")

"""Tests for switchyard.server.lifespan — lifespan fan-out to backends."""

import logging
from typing import Any

import pytest

from switchyard.server.lifespan import fan_out_lifespan
from switchyard.targets import Backend


class LifespanApp:
    """Backend that speaks the lifespan protocol and records what it saw."""

    def __init__(self, *, fail_startup: str = "", fail_shutdown: str = "") -> None:
        self.fail_startup = fail_startup
        self.fail_shutdown = fail_shutdown
        self.events: list[str] = []

    async def __call__(self, scope, receive, send) -> None:
        assert scope["type"] == "lifespan"
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self.events.append("startup")
                if self.fail_startup:
                    await send({"type": "lifespan.startup.failed", "message": self.fail_startup})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                self.events.append("shutdown")
                if self.fail_shutdown:
                    await send({"type": "lifespan.shutdown.failed", "message": self.fail_shutdown})
                else:
                    await send({"type": "lifespan.shutdown.complete"})
                return


async def http_only(scope, receive, send) -> None:
    if scope["type"] != "http":
        msg = "unsupported scope"
        raise RuntimeError(msg)


async def _run(targets: list[Any], *, shutdown: bool = True) -> list[dict[str, Any]]:
    messages = [{"type": "lifespan.startup"}]
    if shutdown:
        messages.append({"type": "lifespan.shutdown"})
    inbox = iter(messages)
    sent: list[dict[str, Any]] = []

    async def receive() -> dict[str, Any]:
        return next(inbox)

    async def send(message: dict[str, Any]) -> None:
        sent.append(message)

    await fan_out_lifespan(
        {"type": "lifespan", "asgi": {"version": "3.0"}}, receive, send, targets=targets
    )
    return sent


class TestFanOut:
    async def test_every_backend_started_and_stopped(self) -> None:
        a, b = LifespanApp(), LifespanApp()

        sent = await _run([Backend(a, name="a"), Backend(b, name="b")])

        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        assert a.events == ["startup", "shutdown"]
        assert b.events == ["startup", "shutdown"]

    async def test_backend_without_lifespan_support(self) -> None:
        a = LifespanApp()

        sent = await _run([Backend(http_only), Backend(a, name="a")])

        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        assert a.events == ["startup", "shutdown"]

    async def test_startup_failure_reported(self) -> None:
        a = LifespanApp()
        broken = LifespanApp(fail_startup="database unreachable")

        sent = await _run([Backend(a, name="a"), Backend(broken, name="db")], shutdown=False)

        (message,) = sent
        assert message["type"] == "lifespan.startup.failed"
        assert message["message"] == "db: database unreachable"

    async def test_startup_failure_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        broken = LifespanApp(fail_startup="boom")

        with caplog.at_level(logging.ERROR, logger="switchyard.server"):
            await _run([Backend(broken, name="db")], shutdown=False)

        assert "backend startup failed: db: boom" in caplog.text

    async def test_shutdown_failure_reported(self) -> None:
        broken = LifespanApp(fail_shutdown="flush failed")

        sent = await _run([Backend(broken, name="cache")])

        assert sent[0]["type"] == "lifespan.startup.complete"
        assert sent[1] == {"type": "lifespan.shutdown.failed", "message": "cache: flush failed"}

    async def test_exception_after_startup_is_a_failure(self) -> None:
        class CrashOnShutdown:
            async def __call__(self, scope, receive, send) -> None:
                await receive()
                await send({"type": "lifespan.startup.complete"})
                await receive()
                msg = "crashed"
                raise RuntimeError(msg)

        sent = await _run([Backend(CrashOnShutdown(), name="worker")])

        assert sent[1] == {"type": "lifespan.shutdown.failed", "message": "worker: crashed"}

    async def test_backends_receive_copies_of_scope(self) -> None:
        scopes: list[dict[str, Any]] = []

        async def recorder(scope, receive, send) -> None:
            scopes.append(scope)
            scope["state"] = {"mine": True}

        await _run([Backend(recorder), Backend(recorder)])

        first, second = scopes
        assert first is not second
        assert first["type"] == second["type"] == "lifespan"

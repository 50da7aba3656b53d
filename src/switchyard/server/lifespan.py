"""Lifespan fan-out — relays the ASGI lifespan protocol to every backend.

Each backend runs its own lifespan coroutine in an anyio task group and
gets its own inbox (a memory object stream). The proxy forwards
``lifespan.startup`` to all of them and answers the server once every
backend has either started, failed, or shown it does not speak
lifespan (returned or raised before sending anything, as the ASGI protocol
allows).
"""

import contextlib
import logging
from collections.abc import Sequence
from typing import Any

import anyio

from switchyard._internal.asgi import Receive, Scope, Send
from switchyard.errors import target_name

logger = logging.getLogger("switchyard.server")


class _BackendLifespan:
    """Lifespan state for one backend. Lives for one lifespan scope."""

    __slots__ = (
        "_inbox_receive",
        "_inbox_send",
        "failure",
        "finished",
        "replied",
        "scope",
        "started",
        "stopped",
        "supported",
        "target",
    )

    def __init__(self, target: Any, scope: Scope) -> None:
        self.target = target
        self.scope = dict(scope)
        self._inbox_send, self._inbox_receive = anyio.create_memory_object_stream(2)
        self.started = anyio.Event()
        self.stopped = anyio.Event()
        self.failure: str | None = None
        self.finished = False
        self.replied = False
        self.supported = True

    @property
    def name(self) -> str:
        return target_name(self.target)

    async def _receive(self) -> dict[str, Any]:
        return await self._inbox_receive.receive()

    async def _send(self, message: dict[str, Any]) -> None:
        self.replied = True
        msg_type = message["type"]
        if msg_type == "lifespan.startup.complete":
            self.started.set()
        elif msg_type == "lifespan.startup.failed":
            self.failure = message.get("message", "") or "startup failed"
            self.started.set()
        elif msg_type == "lifespan.shutdown.complete":
            self.stopped.set()
        elif msg_type == "lifespan.shutdown.failed":
            self.failure = message.get("message", "") or "shutdown failed"
            self.stopped.set()

    async def run(self) -> None:
        try:
            await self.target(self.scope, self._receive, self._send)
        except Exception as exc:
            if self.replied:
                logger.exception("lifespan error in %s", self.name)
                self.failure = self.failure or str(exc) or type(exc).__name__
            else:
                logger.debug("%s does not support lifespan (%r)", self.name, exc)
                self.supported = False
        else:
            if not self.replied:
                self.supported = False
        finally:
            self.finished = True
            self.started.set()
            self.stopped.set()
            self._inbox_receive.close()

    async def deliver(self, message: dict[str, Any]) -> None:
        if self.finished:
            return
        # The backend may return between the check and the send
        with contextlib.suppress(anyio.BrokenResourceError):
            await self._inbox_send.send(message)

    def close(self) -> None:
        self._inbox_send.close()


def _failure_message(backends: Sequence[_BackendLifespan]) -> str:
    return "; ".join(f"{b.name}: {b.failure}" for b in backends if b.failure)


async def fan_out_lifespan(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    targets: Sequence[Any],
) -> None:
    """Run the lifespan protocol on behalf of ``targets``.

    Returns after shutdown completes, or right after reporting a
    startup failure.
    """
    backends = [_BackendLifespan(target, scope) for target in targets]
    try:
        await _relay(receive, send, backends)
    finally:
        for backend in backends:
            backend.close()


async def _relay(receive: Receive, send: Send, backends: Sequence[_BackendLifespan]) -> None:
    async with anyio.create_task_group() as tg:
        for backend in backends:
            tg.start_soon(backend.run)

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                for backend in backends:
                    await backend.deliver(message)
                for backend in backends:
                    await backend.started.wait()

                failure = _failure_message(backends)
                if failure:
                    logger.error("backend startup failed: %s", failure)
                    await send({"type": "lifespan.startup.failed", "message": failure})
                    tg.cancel_scope.cancel()
                    return

                started = [b.name for b in backends if b.supported]
                logger.info("started %d backend(s): %s", len(started), ", ".join(started))
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for backend in backends:
                    await backend.deliver(message)
                for backend in backends:
                    await backend.stopped.wait()

                failure = _failure_message(backends)
                if failure:
                    logger.error("backend shutdown failed: %s", failure)
                    await send({"type": "lifespan.shutdown.failed", "message": failure})
                else:
                    await send({"type": "lifespan.shutdown.complete"})
                tg.cancel_scope.cancel()
                return

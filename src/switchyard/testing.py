"""In-process test client for switchyard proxies.

Feeds scripted ASGI messages to the proxy and records what comes back.
Nothing is bound to a socket.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from switchyard.app import Proxy


@dataclass(frozen=True, slots=True)
class TestResponse:
    """An HTTP response reassembled from ``http.response.*`` messages."""

    __test__ = False

    status: int
    headers: dict[str, str]
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @classmethod
    def from_messages(cls, messages: Sequence[dict[str, Any]]) -> "TestResponse":
        status = 200
        headers: dict[str, str] = {}
        chunks: list[bytes] = []
        for message in messages:
            if message["type"] == "http.response.start":
                status = message["status"]
                headers.update(
                    (k.decode("latin-1"), v.decode("latin-1"))
                    for k, v in message.get("headers", ())
                )
            elif message["type"] == "http.response.body":
                chunks.append(message.get("body", b""))
        return cls(status=status, headers=headers, body=b"".join(chunks))


def _scope(kind: str, path: str, host: str, extra_headers: dict[str, str]) -> dict[str, Any]:
    path, _, query = path.partition("?")
    headers = [(b"host", host.encode("latin-1"))]
    headers.extend(
        (k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in extra_headers.items()
    )
    return {
        "type": kind,
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "scheme": "ws" if kind == "websocket" else "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query.encode("latin-1"),
        "root_path": "",
        "headers": headers,
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


class TestClient:
    """Drives a Proxy through its ASGI interface.

    Usage::

        async with TestClient(proxy) as client:
            response = await client.get("/v1/users", host="api.example.com")
            assert response.status == 200
    """

    __test__ = False
    __slots__ = ("proxy",)

    def __init__(self, proxy: Proxy) -> None:
        self.proxy = proxy

    async def __aenter__(self) -> "TestClient":
        self.proxy.freeze()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def _exchange(
        self, scope: dict[str, Any], inbound: list[dict[str, Any]], final: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Call the proxy; ``final`` repeats once ``inbound`` runs out."""
        pending = list(inbound)
        outbound: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return pending.pop(0) if pending else final

        async def send(message: dict[str, Any]) -> None:
            outbound.append(message)

        await self.proxy(scope, receive, send)
        return outbound

    async def get(
        self,
        path: str,
        *,
        host: str = "testserver",
        headers: dict[str, str] | None = None,
    ) -> TestResponse:
        return await self.request("GET", path, host=host, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        host: str = "testserver",
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> TestResponse:
        """Send one HTTP request and collect the response."""
        scope = _scope("http", path, host, headers or {})
        scope["method"] = method.upper()
        messages = await self._exchange(
            scope,
            [{"type": "http.request", "body": body or b"", "more_body": False}],
            {"type": "http.disconnect"},
        )
        return TestResponse.from_messages(messages)

    async def websocket(self, path: str, *, host: str = "testserver") -> list[dict[str, Any]]:
        """Connect, then disconnect as soon as the app waits for more.

        Returns every message the proxy or the backend sent.
        """
        scope = _scope("websocket", path, host, {})
        scope["subprotocols"] = []
        return await self._exchange(
            scope,
            [{"type": "websocket.connect"}],
            {"type": "websocket.disconnect", "code": 1000},
        )

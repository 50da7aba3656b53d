"""ASGI type aliases and the routing view of a connection scope.

``ConnectionScope`` extracts the two things dispatch needs from a raw
``http`` or ``websocket`` scope: the normalised host and the path.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias

# Raw ASGI types
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]


def normalize_host(raw: str) -> str:
    """Lowercase a Host header value and drop the port and trailing dot.

    Examples::

        "Example.COM:8443" -> "example.com"
        "example.com."     -> "example.com"
        "[::1]:8000"       -> "[::1]"
    """
    host = raw.strip().lower()
    if host.startswith("["):
        # IPv6 literal: keep the brackets, drop anything after them
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    host, _, _ = host.partition(":")
    return host.rstrip(".")


def split_path(path: str) -> tuple[str, ...]:
    """Split a URL path into its non-empty segments.

    ``"/v1/oauth/"`` -> ``("v1", "oauth")``
    """
    return tuple(p for p in path.split("/") if p)


@dataclass(frozen=True, slots=True)
class ConnectionScope:
    """Routing view of an ``http`` or ``websocket`` scope.

    Only the fields the dispatcher needs: the normalised host and the
    path segments the matcher consumes.
    """

    type: str
    host: str
    path: str
    path_segments: tuple[str, ...]

    @classmethod
    def from_scope(cls, scope: Scope) -> "ConnectionScope":
        """Parse raw ASGI scope into typed object.

        The host comes from the ``Host`` header; when it is missing the
        server address from the scope is used instead.
        """
        host = ""
        for name, value in scope.get("headers", ()):
            if name.lower() == b"host":
                host = normalize_host(value.decode("latin-1"))
                break
        if not host:
            server = scope.get("server")
            if server:
                host = normalize_host(str(server[0]))
        path = scope.get("path", "/")
        return cls(
            type=scope["type"],
            host=host,
            path=path,
            path_segments=split_path(path),
        )

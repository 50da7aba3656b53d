"""ASGI dispatch — hands each connection to the target that owns it.

The only component that touches raw ``http`` and ``websocket`` scopes.
Resolves the target from the Host header and path, then calls it with
the scope, receive, and send it was given, unmodified.
"""

import logging

from switchyard._internal.asgi import ConnectionScope, Receive, Scope, Send
from switchyard.errors import target_name
from switchyard.routing.matcher import resolve
from switchyard.routing.table import RuleTable

logger = logging.getLogger("switchyard.server")

# Close code for a websocket nobody owns (4000-4999 is application space)
WEBSOCKET_NOT_FOUND = 4404


async def send_not_found(send: Send, body: str) -> None:
    """Send a plain-text 404 response."""
    payload = body.encode("utf-8")
    await send(
        {
            "type": "http.response.start",
            "status": 404,
            "headers": [
                (b"content-type", b"text/plain; charset=utf-8"),
                (b"content-length", str(len(payload)).encode("latin-1")),
            ],
        }
    )
    await send({"type": "http.response.body", "body": payload})


async def reject_websocket(receive: Receive, send: Send) -> None:
    """Refuse a websocket handshake no target claims."""
    message = await receive()
    if message["type"] == "websocket.connect":
        await send({"type": "websocket.close", "code": WEBSOCKET_NOT_FOUND})


async def dispatch(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    table: RuleTable,
    not_found_body: str = "Not Found",
) -> None:
    """Route one ``http`` or ``websocket`` connection."""
    if scope["type"] not in ("http", "websocket"):
        return

    conn = ConnectionScope.from_scope(scope)
    target = resolve(table, conn.host, conn.path_segments)

    if target is None:
        logger.debug("%s %s%s (no target)", conn.type, conn.host, conn.path)
        if conn.type == "websocket":
            await reject_websocket(receive, send)
        else:
            await send_not_found(send, not_found_body)
        return

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s %s%s -> %s", conn.type, conn.host, conn.path, target_name(target))
    await target(scope, receive, send)

"""Serving through pounce.

pounce is optional (``pip install switchyard[server]``) and is only
imported here, when a proxy is actually served.
"""

from __future__ import annotations


def run_server(
    proxy: object,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
    log_level: str = "info",
    app_path: str | None = None,
) -> None:
    """Hand an already-frozen Proxy to a pounce ``Server`` and block.

    Args:
        proxy: The ASGI callable to serve.
        host: Interface to listen on.
        port: TCP port to listen on.
        workers: Number of pounce workers.
        reload: Restart when source files change.
        log_level: Server log level (debug, info, warning, error).
        app_path: ``"module:attribute"`` the proxy was loaded from. With
            ``reload`` set, pounce re-imports it after every change.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    server_config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        reload=reload,
        log_level=log_level,
    )
    Server(server_config, proxy, app_path=app_path).run()

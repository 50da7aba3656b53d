"""``switchyard run`` — serve a proxy.

Resolves an import string to a Proxy, validates it, and starts the
pounce server. CLI flags override the proxy's config.
"""

import argparse
import sys

from switchyard.cli._resolve import resolve_proxy
from switchyard.errors import ConfigurationError


def run(args: argparse.Namespace) -> None:
    """Start the server for ``args.app``."""
    try:
        proxy = resolve_proxy(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        proxy.freeze()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from switchyard.server.dev import run_server

    run_server(
        proxy,
        args.host if args.host is not None else proxy.config.host,
        args.port if args.port is not None else proxy.config.port,
        workers=args.workers if args.workers is not None else proxy.config.workers,
        reload=args.reload or proxy.config.debug,
        log_level=proxy.config.log_level,
        app_path=args.app,
    )

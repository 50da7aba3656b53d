"""``switchyard check`` — configuration validation command.

Resolves an import string to a Proxy, compiles its rules and checks the
targets for sub-resource collisions. Exits with code 1 on any error.
"""

import argparse
import sys

from switchyard.cli._resolve import resolve_proxy
from switchyard.errors import CollisionError, ConfigurationError


def run_check(args: argparse.Namespace) -> None:
    """Validate a proxy's configuration and print the result."""
    try:
        proxy = resolve_proxy(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        proxy.freeze()
    except CollisionError as exc:
        for collision in exc.collisions:
            print(f"Error: {collision}", file=sys.stderr)
        print(f"{len(exc.collisions)} collision(s) found", file=sys.stderr)
        raise SystemExit(1) from exc
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    table = proxy.table
    default = "with default" if table.default is not None else "no default"
    print(
        f"OK: {len(table)} rule(s), {len(table.targets)} target(s), "
        f"{len(proxy.sub_resources)} sub-resource(s), {default}"
    )

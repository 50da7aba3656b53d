"""Switchyard CLI — rule table listing, validation, and serving.

Entry point registered as ``switchyard`` in ``pyproject.toml``::

    [project.scripts]
    switchyard = "switchyard.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``switchyard`` command."""
    parser = argparse.ArgumentParser(
        prog="switchyard",
        description="Switchyard — host and path dispatch for several ASGI apps on one port.",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: warning)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- switchyard routes ------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List compiled rules in match order")
    routes_parser.add_argument(
        "app",
        help="Import string (e.g. myproxy:proxy)",
    )

    # -- switchyard check -------------------------------------------------
    check_parser = subparsers.add_parser(
        "check", help="Compile rules and check for sub-resource collisions"
    )
    check_parser.add_argument(
        "app",
        help="Import string (e.g. myproxy:proxy)",
    )

    # -- switchyard run ---------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve the proxy")
    run_parser.add_argument(
        "app",
        help="Import string (e.g. myproxy:proxy)",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count",
    )
    run_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "routes":
        from switchyard.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from switchyard.cli._check import run_check

        run_check(args)
    elif args.command == "run":
        from switchyard.cli._run import run

        run(args)

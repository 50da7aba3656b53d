"""``switchyard routes`` — list compiled rules.

Resolves an import string to a Proxy, compiles it, and prints the rule
table in the order requests are matched against it.
"""

import argparse
import sys

from switchyard.cli._resolve import resolve_proxy
from switchyard.errors import ConfigurationError, target_name
from switchyard.routing.table import RuleTable


def format_table(table: RuleTable) -> list[str]:
    """Render a compiled table as aligned text lines."""
    rows: list[tuple[str, str, str, str, str]] = []
    for position, entry in enumerate(table.entries, 1):
        rule = entry.rule
        domain = rule.domain or "*"
        if entry.suffix:
            domain = f"*.{domain}"
        path = "/" + "/".join(rule.path_prefix) if rule.path_prefix else "*"
        rows.append((str(position), entry.match_class.label, domain, path, target_name(rule.target)))

    default = target_name(table.default) if table.default is not None else "(none)"
    rows.append(("-", "default", "*", "*", default))

    header = ("#", "CLASS", "DOMAIN", "PATH", "TARGET")
    widths = [max(len(r[i]) for r in [header, *rows]) for i in range(4)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths) + "  {}"

    head = fmt.format(*header)
    body = [fmt.format(*row) for row in rows]
    separator = "-" * min(max(len(line) for line in [head, *body]), 80)
    return [head, separator, *body]


def run_routes(args: argparse.Namespace) -> None:
    """Print the compiled rule table for a proxy."""
    try:
        proxy = resolve_proxy(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        table = proxy.table
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for line in format_table(table):
        print(line)

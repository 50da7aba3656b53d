"""Request resolution against a compiled ``RuleTable``.

A pure function: no I/O, no locks, no mutation. Safe to call from any
number of threads or tasks against one table.
"""

from collections.abc import Sequence
from typing import Any

from switchyard.routing.rule import SubdomainMode
from switchyard.routing.table import CompiledRule, RuleTable, reverse_domain


def _matches(entry: CompiledRule, host: str, reversed_host: str, segments: Sequence[str]) -> bool:
    rule = entry.rule
    if rule.mode is SubdomainMode.DOMAIN_ONLY:
        if host != rule.domain:
            return False
    elif rule.mode is SubdomainMode.INCLUDE_SUBDOMAINS:
        if not reversed_host.startswith(entry.suffix):
            return False

    prefix = rule.path_prefix
    if not prefix:
        return True
    if len(segments) < len(prefix):
        return False
    return tuple(segments[: len(prefix)]) == prefix


def resolve(table: RuleTable, host: str, path_segments: Sequence[str]) -> Any:
    """Return the target that owns ``(host, path_segments)``.

    ``host`` must already be lowercased with the port removed (see
    ``normalize_host``). Only the leading segments are compared, so
    ``["v1", "oauth", "token"]`` matches a ``v1/oauth`` prefix.

    Returns the table default when no rule matches, which may be
    ``None`` if the table was built without one.

    Examples::

        table = build([*proxy("example.com", "v1", Api)], default=Web)
        resolve(table, "example.com", ["v1", "users"])  # Api
        resolve(table, "example.com", ["v2"])           # Web
    """
    entry = explain(table, host, path_segments)
    if entry is None:
        return table.default
    return entry.target


def explain(table: RuleTable, host: str, path_segments: Sequence[str]) -> CompiledRule | None:
    """Return the entry that claims the request, or ``None`` for the default.

    Same walk as ``resolve()``; used by the CLI and in debug logging.
    """
    reversed_host = reverse_domain(host)
    for entry in table.entries:
        if _matches(entry, host, reversed_host, path_segments):
            return entry
    return None

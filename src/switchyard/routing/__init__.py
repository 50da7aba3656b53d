"""Routing — compiled rule table with first-match resolution.

Rules are declared during setup and compiled into an immutable
lookup structure when the proxy freezes.
"""

from switchyard.routing.matcher import explain, resolve
from switchyard.routing.rule import (
    MatchClass,
    Rule,
    SubdomainMode,
    parse_prefix,
    proxy,
    proxy_all,
    proxy_path,
    proxy_subdomains,
)
from switchyard.routing.table import CompiledRule, RuleTable, build, reverse_domain

__all__ = [
    "CompiledRule",
    "MatchClass",
    "Rule",
    "RuleTable",
    "SubdomainMode",
    "build",
    "explain",
    "parse_prefix",
    "proxy",
    "proxy_all",
    "proxy_path",
    "proxy_subdomains",
    "resolve",
    "reverse_domain",
]

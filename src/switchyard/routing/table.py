"""Compiled rule table.

``build()`` turns an ordered list of rules into an immutable table whose
entry order is the match order. The order depends only on the set of
rules, never on the order they were declared in (apart from the last
tie-break between rules that could claim exactly the same requests).

Ordering, most specific first:

1. match class (domain+path, domain, subdomains+path, subdomains, path)
2. domain group: longer domains first (UTF-8 byte length), then
   alphabetical; path-only rules have no domain and come last
3. longer path prefixes first
4. declaration order

Free-threading safety:
    - CompiledRule and RuleTable are frozen dataclasses holding tuples
    - build() has no side effects besides debug logging
"""

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from switchyard.errors import NoDefaultError, target_name
from switchyard.routing.rule import MatchClass, Rule, SubdomainMode, parse_prefix

logger = logging.getLogger("switchyard.routing")


def reverse_domain(domain: str) -> str:
    """Reverse a domain name string.

    Used for subdomain matching: ``host`` is a subdomain of ``domain``
    exactly when ``reverse_domain(host)`` starts with
    ``reverse_domain(domain) + "."``.

    Examples::

        "abc.com" -> "moc.cba"
    """
    return domain[::-1]


@dataclass(frozen=True, slots=True)
class CompiledRule:
    """A rule prepared for matching.

    ``suffix`` is the reversed domain followed by ``"."`` for subdomain
    rules and empty otherwise.
    """

    rule: Rule
    match_class: MatchClass
    suffix: str = ""

    @property
    def target(self) -> Any:
        return self.rule.target


@dataclass(frozen=True, slots=True)
class RuleTable:
    """Compiled, priority-ordered routing table. Immutable.

    ``entries`` are tried in order; ``default`` answers when none
    matches (``None`` means "no match" is a valid outcome). ``targets``
    is the registry of every distinct target, rules first in declaration
    order, then the default.
    """

    entries: tuple[CompiledRule, ...]
    default: Any = None
    targets: tuple[Any, ...] = ()

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Rules in match order."""
        return tuple(entry.rule for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def unique(items: Iterable[Any]) -> list[Any]:
    """Drop repeated items (by equality), keeping first-seen order.

    Targets are opaque and need not be hashable, hence the linear scan.
    """
    seen: list[Any] = []
    for item in items:
        if not any(item is s or item == s for s in seen):
            seen.append(item)
    return seen


def _normalize(rule: Rule) -> Rule:
    """Coerce list prefixes to tuples and empty prefixes to ``None``."""
    if rule.path_prefix is None:
        return rule
    prefix = parse_prefix(rule.path_prefix)
    if prefix == rule.path_prefix:
        return rule
    return dataclasses.replace(rule, path_prefix=prefix)


def _group_key(domain: str | None) -> tuple[int, int, str]:
    if domain is None:
        return (1, 0, "")
    return (0, -len(domain.encode("utf-8")), domain)


def build(
    rules: Sequence[Rule],
    default: Any = None,
    *,
    require_default: bool = False,
) -> RuleTable:
    """Compile rules into a ``RuleTable``.

    Args:
        rules: Declared rules, in declaration order.
        default: Target for requests no rule claims. ``None`` leaves
            such requests unmatched.
        require_default: Raise ``NoDefaultError`` when ``default`` is
            ``None``.

    Raises:
        ConfigurationError: A rule has an inconsistent domain/mode
            combination or an invalid path prefix.
        NoDefaultError: ``require_default`` is set and there is no default.
    """
    if require_default and default is None:
        raise NoDefaultError

    declared: list[Rule] = []
    for rule in rules:
        rule = _normalize(rule)
        rule.check()
        declared.append(rule)
    declared = unique(declared)

    indexed = list(enumerate(declared))
    indexed.sort(
        key=lambda pair: (
            pair[1].match_class,
            _group_key(pair[1].domain),
            -len(pair[1].path_prefix or ()),
            pair[0],
        )
    )

    entries: list[CompiledRule] = []
    for _index, rule in indexed:
        suffix = ""
        if rule.mode is SubdomainMode.INCLUDE_SUBDOMAINS:
            suffix = reverse_domain(rule.domain or "") + "."
        entries.append(CompiledRule(rule=rule, match_class=rule.match_class, suffix=suffix))

    targets = unique([rule.target for rule in declared] + [default])
    targets = [t for t in targets if t is not None]

    table = RuleTable(entries=tuple(entries), default=default, targets=tuple(targets))
    if logger.isEnabledFor(logging.DEBUG):
        for position, entry in enumerate(table.entries, 1):
            logger.debug(
                "%d. [%s] %s -> %s",
                position,
                entry.match_class.label,
                entry.rule.describe(),
                target_name(entry.target),
            )
        logger.debug(
            "default -> %s",
            target_name(default) if default is not None else "(none)",
        )
    return table

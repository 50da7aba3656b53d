"""Rule frozen dataclass and the declaration helpers that produce rules.

A rule says "requests for this domain (and maybe its subdomains), under
this path prefix, belong to this target". Rules are plain values: build
a list of them and hand it to ``build()``::

    rules = [
        *proxy("api.example.com", "v1", ApiV1),
        *proxy_all("example.com", Web),
        *proxy_path("health", Health),
    ]
    table = build(rules, default=Web)
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

from switchyard.errors import ConfigurationError

# A path prefix as given by the caller: "v1/oauth" or ("v1", "oauth")
type PathSpec = str | Sequence[str] | None


class SubdomainMode(Enum):
    """How a rule's domain is compared with the request host."""

    DOMAIN_ONLY = "domain-only"
    INCLUDE_SUBDOMAINS = "include-subdomains"
    ANY_DOMAIN = "any-domain"


class MatchClass(IntEnum):
    """Specificity layer of a rule. Lower values are tried first."""

    DOMAIN_PATH = 1
    DOMAIN = 2
    SUBDOMAINS_PATH = 3
    SUBDOMAINS = 4
    PATH = 5
    DEFAULT = 6

    @property
    def label(self) -> str:
        return _CLASS_LABELS[self]


_CLASS_LABELS = {
    MatchClass.DOMAIN_PATH: "domain+path",
    MatchClass.DOMAIN: "domain",
    MatchClass.SUBDOMAINS_PATH: "subdomains+path",
    MatchClass.SUBDOMAINS: "subdomains",
    MatchClass.PATH: "path",
    MatchClass.DEFAULT: "default",
}


def parse_prefix(path: PathSpec) -> tuple[str, ...] | None:
    """Normalise a path prefix into a tuple of segments.

    Examples::

        "v1/oauth"          -> ("v1", "oauth")
        "/v1/"              -> ("v1",)
        ["v1", "oauth"]     -> ("v1", "oauth")
        None, "", "/", []   -> None
    """
    if path is None:
        return None
    if isinstance(path, str):
        segments = tuple(part for part in path.split("/") if part)
    else:
        segments = tuple(path)
        for segment in segments:
            if not isinstance(segment, str) or not segment or "/" in segment:
                msg = (
                    f"Invalid path segment {segment!r} in {path!r}. "
                    "Segments must be non-empty strings without '/'."
                )
                raise ConfigurationError(msg)
    return segments or None


@dataclass(frozen=True, slots=True)
class Rule:
    """A frozen routing declaration.

    Created during setup, compiled into a ``RuleTable`` by ``build()``.
    ``domain`` is ``None`` exactly when ``mode`` is ``ANY_DOMAIN``.
    """

    target: Any
    domain: str | None
    mode: SubdomainMode
    path_prefix: tuple[str, ...] | None = None

    @property
    def match_class(self) -> MatchClass:
        if self.mode is SubdomainMode.DOMAIN_ONLY:
            return MatchClass.DOMAIN_PATH if self.path_prefix else MatchClass.DOMAIN
        if self.mode is SubdomainMode.INCLUDE_SUBDOMAINS:
            return MatchClass.SUBDOMAINS_PATH if self.path_prefix else MatchClass.SUBDOMAINS
        return MatchClass.PATH

    def check(self) -> None:
        """Raise ``ConfigurationError`` if the domain/mode combination is invalid."""
        if not isinstance(self.mode, SubdomainMode):
            msg = f"Unknown subdomain mode {self.mode!r} in {self!r}."
            raise ConfigurationError(msg)
        if self.target is None:
            msg = f"Rule {self!r} has no target."
            raise ConfigurationError(msg)
        if self.mode is SubdomainMode.ANY_DOMAIN:
            if self.domain is not None:
                msg = (
                    f"Rule {self!r} matches any domain but also names domain "
                    f"{self.domain!r}. Use DOMAIN_ONLY or INCLUDE_SUBDOMAINS instead."
                )
                raise ConfigurationError(msg)
            if not self.path_prefix:
                msg = (
                    f"Rule {self!r} matches any domain and any path. "
                    "Declare it as the default target instead."
                )
                raise ConfigurationError(msg)
            return
        if not isinstance(self.domain, str) or not self.domain:
            msg = f"Rule {self!r} requires a domain for mode {self.mode.value!r}."
            raise ConfigurationError(msg)
        if self.domain.startswith("["):
            # IPv6 literal, e.g. "[::1]"; anything after "]" is a port
            has_port = not self.domain.endswith("]")
        else:
            has_port = ":" in self.domain
        if self.domain != self.domain.strip().lower() or has_port:
            msg = (
                f"Domain {self.domain!r} must be lowercase, without a port "
                "or surrounding whitespace."
            )
            raise ConfigurationError(msg)

    def describe(self) -> str:
        domain = self.domain or "*"
        if self.mode is SubdomainMode.INCLUDE_SUBDOMAINS:
            domain = f"*.{domain}"
        path = "/" + "/".join(self.path_prefix) if self.path_prefix else "/*"
        return f"{domain}{path}"


# -- Declaration helpers --
#
# proxy(domain, target) / proxy(domain, path, target): the two-argument form
# means "any path". Every helper returns a tuple of rules.


def _split_args(args: tuple[Any, ...], helper: str) -> tuple[PathSpec, Any]:
    if len(args) == 1:
        return None, args[0]
    if len(args) == 2:
        return args[0], args[1]
    msg = f"{helper}() takes a domain, an optional path prefix, and a target."
    raise TypeError(msg)


def proxy(domain: str, *args: Any) -> tuple[Rule]:
    """Route ``domain`` itself (not its subdomains), optionally under a path prefix."""
    path, target = _split_args(args, "proxy")
    return (Rule(target, domain, SubdomainMode.DOMAIN_ONLY, parse_prefix(path)),)


def proxy_subdomains(domain: str, *args: Any) -> tuple[Rule]:
    """Route every subdomain of ``domain``, excluding the domain itself."""
    path, target = _split_args(args, "proxy_subdomains")
    return (Rule(target, domain, SubdomainMode.INCLUDE_SUBDOMAINS, parse_prefix(path)),)


def proxy_all(domain: str, *args: Any) -> tuple[Rule, Rule]:
    """Route ``domain`` and all of its subdomains.

    Equivalent to ``proxy(domain, ...)`` plus ``proxy_subdomains(domain, ...)``.
    """
    path, target = _split_args(args, "proxy_all")
    prefix = parse_prefix(path)
    return (
        Rule(target, domain, SubdomainMode.DOMAIN_ONLY, prefix),
        Rule(target, domain, SubdomainMode.INCLUDE_SUBDOMAINS, prefix),
    )


def proxy_path(path: str | Sequence[str], target: Any) -> tuple[Rule]:
    """Route a path prefix on any domain.

    Applied after every domain-specific rule, before the default.
    """
    prefix = parse_prefix(path)
    if prefix is None:
        msg = f"proxy_path() needs a non-empty path prefix, got {path!r}."
        raise ConfigurationError(msg)
    return (Rule(target, None, SubdomainMode.ANY_DOMAIN, prefix),)

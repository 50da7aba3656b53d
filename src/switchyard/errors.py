"""Switchyard exception hierarchy.

Shared across the rule builder, the collision detector, and the proxy so
every module raises and catches the same types. All of them are startup
errors: nothing here is raised while serving requests.
"""

from dataclasses import dataclass
from typing import Any


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when a routing declaration is invalid.

    Typically raised from ``build()`` inside ``Proxy.freeze()`` at startup.
    """


class NoDefaultError(ConfigurationError):
    """Raised when a default target is required but none was declared."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            detail
            or "No default target declared. Call proxy_default() or set "
            "ProxyConfig(require_default=False)."
        )


def target_name(target: Any) -> str:
    """Human-readable name for a target, used in logs and error messages."""
    if isinstance(target, str):
        return target
    name = getattr(target, "name", None)
    if isinstance(name, str) and name:
        return name
    qualname = getattr(target, "__qualname__", None)
    if qualname:
        return qualname
    return repr(target)


@dataclass(frozen=True, slots=True)
class Collision:
    """One sub-resource key claimed by more than one target."""

    key: str
    targets: tuple[Any, ...]

    def __str__(self) -> str:
        names = ", ".join(target_name(t) for t in self.targets)
        return (
            f"Sub-resource collision for key {self.key!r} detected in targets "
            f"[{names}]. Please change the keys to make them unique!"
        )


class CollisionError(ConfigurationError):
    """Two or more targets declare the same sub-resource key.

    Carries every collision found in one validation pass, not just the
    first one::

        try:
            validate(targets)
        except CollisionError as exc:
            for collision in exc.collisions:
                print(collision.key, collision.targets)
    """

    def __init__(self, collisions: tuple[Collision, ...]) -> None:
        self.collisions = collisions
        super().__init__("\n".join(str(c) for c in collisions))

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(c.key for c in self.collisions)

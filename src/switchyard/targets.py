"""Target protocol and the Backend wrapper.

A target is whatever a rule points at. The proxy only needs two things
from it::

    sub_resources  -> keys it owns (e.g. websocket mount paths)
    __call__       -> an ASGI application to hand the request to

No base class required. The proxy checks the shape, not the lineage.
Any ASGI app without ``sub_resources`` is a valid target that owns
nothing; wrap it in ``Backend`` to give it a name and declare keys::

    api = Backend(api_app, name="api", sub_resources=["/socket"])
"""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from switchyard._internal.asgi import ASGIApp, Receive, Scope, Send


@runtime_checkable
class Target(Protocol):
    """Protocol for proxy targets."""

    @property
    def sub_resources(self) -> Iterable[str]: ...

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None: ...


def _as_keys(declared: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(declared, str):
        return (declared,)
    return tuple(declared)


def sub_resource_keys(target: Any) -> tuple[str, ...]:
    """Return the sub-resource keys ``target`` declares, in order.

    ``sub_resources`` may be an attribute or a zero-argument method, and
    a single string counts as one key. Targets without it declare nothing.
    """
    declared = getattr(target, "sub_resources", None)
    if declared is None:
        return ()
    if callable(declared):
        declared = declared()
    return _as_keys(declared)


class Backend:
    """Named ASGI application with declared sub-resources.

    ``sub_resources`` defaults to whatever the wrapped app declares.
    Compared by identity, so two wrappers of one app are two targets.
    """

    __slots__ = ("app", "name", "sub_resources")

    def __init__(
        self,
        app: ASGIApp,
        *,
        name: str | None = None,
        sub_resources: str | Iterable[str] | None = None,
    ) -> None:
        self.app = app
        self.name: str = name or getattr(app, "__qualname__", None) or type(app).__qualname__
        if sub_resources is None:
            self.sub_resources: tuple[str, ...] = sub_resource_keys(app)
        else:
            self.sub_resources = _as_keys(sub_resources)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)

    def __repr__(self) -> str:
        return f"Backend({self.name!r})"

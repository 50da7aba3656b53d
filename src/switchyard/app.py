"""Switchyard proxy application.

Mutable during setup (rule declaration). Frozen at runtime when
``proxy.run()``, ``proxy.freeze()`` or ``__call__()`` is first invoked.
"""

import logging
import threading
from collections.abc import Iterable, Sequence
from typing import Any

from switchyard._internal.asgi import Receive, Scope, Send, split_path
from switchyard.collisions import collect_sub_resources, validate
from switchyard.config import ProxyConfig
from switchyard.errors import ConfigurationError, target_name
from switchyard.routing import rule as _rule
from switchyard.routing.matcher import resolve
from switchyard.routing.rule import Rule
from switchyard.routing.table import RuleTable, build
from switchyard.server.dispatch import dispatch
from switchyard.server.lifespan import fan_out_lifespan

logger = logging.getLogger("switchyard.server")


class Proxy:
    """Routes requests to backend ASGI apps by host and path.

    Usage::

        proxy = Proxy()
        proxy.proxy("api.example.com", "v1", api_v1)
        proxy.proxy_all("example.com", web)
        proxy.proxy_path("health", health)
        proxy.proxy_default(web)

    More specific rules are matched first regardless of the order in
    which they are declared. Rules can also be passed in as values::

        proxy = Proxy(rules=[*proxy_all("example.com", web)], default=web)

    Thread safety:
        The setup phase is single-threaded (declarations at import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the table, even under free-threading where
        multiple ASGI workers could call ``__call__()`` concurrently on
        first request. The compiled table is immutable; matching takes
        no locks.
    """

    __slots__ = (
        "_default",
        "_freeze_lock",
        "_frozen",
        "_pending_rules",
        "_sub_resources",
        "_table",
        "config",
    )

    def __init__(
        self,
        config: ProxyConfig | None = None,
        *,
        rules: Iterable[Rule] = (),
        default: Any = None,
    ) -> None:
        self.config: ProxyConfig = config or ProxyConfig()
        self._pending_rules: list[Rule] = list(rules)
        self._default: Any = default
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Set by _freeze()
        self._table: RuleTable | None = None
        self._sub_resources: tuple[tuple[str, Any], ...] = ()

    # -- Rule declaration --

    def add(self, *rules: Rule) -> None:
        """Append already-built rules."""
        self._check_not_frozen()
        self._pending_rules.extend(rules)

    def proxy(self, domain: str, *args: Any) -> None:
        """Route ``domain`` itself, optionally under a path prefix.

        ``proxy("example.com", web)`` or ``proxy("example.com", "v1/oauth", oauth)``.
        """
        self.add(*_rule.proxy(domain, *args))

    def proxy_subdomains(self, domain: str, *args: Any) -> None:
        """Route every subdomain of ``domain`` but not the domain itself."""
        self.add(*_rule.proxy_subdomains(domain, *args))

    def proxy_all(self, domain: str, *args: Any) -> None:
        """Route ``domain`` and all of its subdomains."""
        self.add(*_rule.proxy_all(domain, *args))

    def proxy_path(self, path: str | Sequence[str], target: Any) -> None:
        """Route a path prefix on any domain, after all domain rules."""
        self.add(*_rule.proxy_path(path, target))

    def proxy_default(self, target: Any) -> None:
        """Set the target for requests nothing else matches."""
        self._check_not_frozen()
        self._default = target

    # -- Introspection --

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Declared rules, in declaration order."""
        return tuple(self._pending_rules)

    @property
    def default(self) -> Any:
        return self._default

    @property
    def table(self) -> RuleTable:
        """The compiled table. Freezes the proxy."""
        self._ensure_frozen()
        assert self._table is not None
        return self._table

    @property
    def targets(self) -> tuple[Any, ...]:
        """Every distinct target, rules first, then the default."""
        return self.table.targets

    @property
    def sub_resources(self) -> tuple[tuple[str, Any], ...]:
        """Combined ``(key, target)`` sub-resources of all targets."""
        self._ensure_frozen()
        return self._sub_resources

    def match(self, host: str, path: str | Sequence[str]) -> Any:
        """Return the target for ``host`` and ``path``, or ``None``.

        ``path`` is either a URL path (``"/v1/users"``) or its segments.
        """
        segments = split_path(path) if isinstance(path, str) else path
        return resolve(self.table, host, segments)

    def freeze(self) -> None:
        """Compile and validate now instead of on the first request."""
        self._ensure_frozen()

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start serving through pounce.

        Freezes the proxy first so configuration errors surface before
        the server binds.
        """
        self._ensure_frozen()

        from switchyard.server.dev import run_server

        run_server(
            self,
            host if host is not None else self.config.host,
            port if port is not None else self.config.port,
            workers=self.config.workers,
            reload=self.config.debug,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan directly, then hands ``http`` and ``websocket``
        scopes to the target that owns them.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._table is not None

        await dispatch(
            scope,
            receive,
            send,
            table=self._table,
            not_found_body=self.config.not_found_body,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the proxy at startup (before the first request). A
        configuration error is reported as ``lifespan.startup.failed``.
        When ``forward_lifespan`` is set, every target takes part in
        the lifespan protocol too.
        """
        try:
            self._ensure_frozen()
        except ConfigurationError as exc:
            logger.error("proxy configuration is invalid:\n%s", exc)
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.failed", "message": str(exc)})
            return

        assert self._table is not None

        if self.config.forward_lifespan and self._table.targets:
            await fan_out_lifespan(scope, receive, send, targets=self._table.targets)
            return

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the proxy into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Compile rule table
        table = build(
            self._pending_rules,
            self._default,
            require_default=self.config.require_default,
        )

        # 2. Every target must own its sub-resources exclusively
        validate(table.targets)

        self._sub_resources = tuple(collect_sub_resources(table.targets))
        self._table = table
        self._frozen = True

        logger.info(
            "compiled %d rule(s) for %d target(s), default: %s",
            len(table),
            len(table.targets),
            target_name(table.default) if table.default is not None else "(none)",
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the proxy after it has started serving requests. "
                "Declare rules and the default target before calling proxy.run()."
            )
            raise RuntimeError(msg)

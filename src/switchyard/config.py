"""Proxy configuration.

ProxyConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProxyConfig:
    """Proxy configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ProxyConfig(port=4000, require_default=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 1

    # Routing
    require_default: bool = False  # Fail the build when proxy_default() was never called

    # Lifespan — relay startup/shutdown to every backend
    forward_lifespan: bool = True

    # Fallback response when nothing matches and there is no default
    not_found_body: str = "Not Found"

    # Logging (applied by the CLI; the library never configures handlers)
    log_level: str = "info"

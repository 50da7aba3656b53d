"""Switchyard — host and path dispatch for several ASGI apps on one port.

Routes each request to the backend that owns it, by domain, subdomain,
and path prefix. More specific rules win regardless of declaration
order, and backends that claim the same sub-resource (e.g. a websocket
path) are rejected before the server starts.

Basic usage::

    from switchyard import Backend, Proxy

    proxy = Proxy()
    proxy.proxy("api.example.com", "v1", Backend(api_v1, name="api-v1"))
    proxy.proxy_all("example.com", Backend(web, name="web", sub_resources=["/socket"]))
    proxy.proxy_default(web)

    proxy.run()

The routing core can be used on its own::

    from switchyard import build, proxy_all, resolve, validate

    table = build([*proxy_all("example.com", "web")], default="fallback")
    validate(table.targets)
    resolve(table, "img.example.com", ["logo.png"])  # "web"
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "Backend",
    "Collision",
    "CollisionError",
    "ConfigurationError",
    "MatchClass",
    "NoDefaultError",
    "Proxy",
    "ProxyConfig",
    "Rule",
    "RuleTable",
    "SubdomainMode",
    "SwitchyardError",
    "Target",
    "build",
    "proxy",
    "proxy_all",
    "proxy_path",
    "proxy_subdomains",
    "resolve",
    "validate",
]

# name -> module that defines it
_LAZY_IMPORTS: dict[str, str] = {
    "Backend": "switchyard.targets",
    "Collision": "switchyard.errors",
    "CollisionError": "switchyard.errors",
    "ConfigurationError": "switchyard.errors",
    "MatchClass": "switchyard.routing.rule",
    "NoDefaultError": "switchyard.errors",
    "Proxy": "switchyard.app",
    "ProxyConfig": "switchyard.config",
    "Rule": "switchyard.routing.rule",
    "RuleTable": "switchyard.routing.table",
    "SubdomainMode": "switchyard.routing.rule",
    "SwitchyardError": "switchyard.errors",
    "Target": "switchyard.targets",
    "build": "switchyard.routing.table",
    "proxy": "switchyard.routing.rule",
    "proxy_all": "switchyard.routing.rule",
    "proxy_path": "switchyard.routing.rule",
    "proxy_subdomains": "switchyard.routing.rule",
    "resolve": "switchyard.routing.matcher",
    "validate": "switchyard.collisions",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` fast while providing a clean top-level API.
    """
    module_path = _LAZY_IMPORTS.get(name)
    if module_path is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    module = importlib.import_module(module_path)
    return getattr(module, name)

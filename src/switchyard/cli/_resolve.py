"""Locate the Proxy a CLI command operates on.

``routes``, ``check`` and ``run`` all take an ``APP`` argument of the
form ``package.module:name``.
"""

import importlib

from switchyard.app import Proxy


def resolve_proxy(import_string: str) -> Proxy:
    """Import ``import_string`` and return the Proxy it names.

    ``"myproxy"`` is shorthand for ``"myproxy:proxy"``. A callable that
    is not itself a Proxy is treated as a factory and called with no
    arguments.

    Raises:
        ModuleNotFoundError: The module part does not import.
        AttributeError: The module has no such attribute.
        TypeError: The object (or the factory's result) is not a Proxy,
            or the factory raised.
    """
    module_name, _, attribute = import_string.partition(":")
    found = getattr(importlib.import_module(module_name), attribute or "proxy")

    if callable(found) and not isinstance(found, Proxy):
        try:
            found = found()
        except Exception as exc:
            msg = f"Proxy factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(found, Proxy):
        return found
    msg = f"{import_string!r} resolved to {type(found).__name__}, not a switchyard.Proxy instance"
    raise TypeError(msg)

"""Process-wide default registry and functions bound to it."""

from __future__ import annotations

from anysignal.registry import Registry


default_registry = Registry(name="default")

register = default_registry.register
get = default_registry.get
deregister = default_registry.deregister
connect = default_registry.connect
disconnect = default_registry.disconnect
emit = default_registry.emit
aemit = default_registry.aemit
cleanup = default_registry.cleanup

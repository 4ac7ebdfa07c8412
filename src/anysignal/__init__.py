"""AnySignal: decoupled publish/subscribe registry for arbitrary objects.

Emitters expose named signals, listeners connect to them by key, and a
registry keeps a by-emitter and a by-listener index in lock-step.

Example:
    registry = Registry()
    registry.register(door, "opened")
    registry.connect(door, "opened", lights, "turn_on")
    registry.emit(door, "opened")
    registry.cleanup(lights)
"""

from __future__ import annotations

__version__ = "0.1.0"

from anysignal.bound import BoundSignal, SignalSlot
from anysignal.config import RegistryConfig
from anysignal.defaults import (
    aemit,
    cleanup,
    connect,
    default_registry,
    deregister,
    disconnect,
    emit,
    get,
    register,
)
from anysignal.exceptions import (
    AsyncCallbackError,
    DuplicateConnectionError,
    DuplicateSignalError,
    InvalidArgumentError,
    SignalError,
    SignalNotFoundError,
)
from anysignal.models import Connection, Signal
from anysignal.registry import Registry

__all__ = [
    "AsyncCallbackError",
    "BoundSignal",
    "Connection",
    "DuplicateConnectionError",
    "DuplicateSignalError",
    "InvalidArgumentError",
    "Registry",
    "RegistryConfig",
    "Signal",
    "SignalError",
    "SignalNotFoundError",
    "SignalSlot",
    # Default registry
    "aemit",
    "cleanup",
    "connect",
    "default_registry",
    "deregister",
    "disconnect",
    "emit",
    "get",
    "register",
]

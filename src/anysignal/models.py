"""Signal and connection records shared by both registry indexes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from anysignal.identity import ConnectionId, IdentityDict, SignalId


type Callback = Callable[..., Any]


def method_callback(listener: Any, name: str) -> Callback:
    """Create a callback invoking the listener's method called `name`.

    The method is looked up on every call, so rebinding the attribute
    after connecting is picked up.
    """

    def call_method(*args: Any) -> Any:
        return getattr(listener, name)(*args)

    call_method.__name__ = name
    call_method.__qualname__ = f"{type(listener).__qualname__}.{name}"
    return call_method


@dataclass(slots=True, eq=False)
class Connection:
    """A single subscription of a listener to an emitter's signal."""

    emitter: Any
    signal_id: SignalId
    listener: Any
    connection_id: ConnectionId
    callback: Callback
    oneshot: bool = False
    fired: bool = field(default=False, repr=False)
    """Set once a oneshot connection has started its only invocation."""

    @property
    def key(self) -> tuple[Any, SignalId, Any, ConnectionId]:
        return (self.emitter, self.signal_id, self.listener, self.connection_id)

    def invoke(self, *args: Any) -> Any:
        return self.callback(*args)


class Signal:
    """Named slot on an emitter, holding connections keyed by listener."""

    __slots__ = ("emitter", "listeners", "signal_id")

    def __init__(self, emitter: Any, signal_id: SignalId) -> None:
        self.emitter = emitter
        self.signal_id = signal_id
        self.listeners: IdentityDict[Any, dict[ConnectionId, Connection]] = IdentityDict()

    def connections(self) -> list[Connection]:
        """Flat snapshot of all connections, in listener then connect order."""
        return [
            conn for by_id in self.listeners.values() for conn in by_id.values()
        ]

    def lookup(self, listener: Any, connection_id: ConnectionId) -> Connection | None:
        by_id = self.listeners.get(listener)
        if by_id is None:
            return None
        return by_id.get(connection_id)

    @property
    def connection_count(self) -> int:
        return sum(len(by_id) for by_id in self.listeners.values())

    def __repr__(self) -> str:
        return (
            f"Signal(emitter={self.emitter!r}, signal_id={self.signal_id!r}, "
            f"connections={self.connection_count})"
        )

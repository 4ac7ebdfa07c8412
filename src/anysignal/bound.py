"""Descriptor-based access to registry signals.

Usage:
    class Player:
        health_changed = SignalSlot()

    player = Player()
    player.health_changed.connect(hud, "update")
    player.health_changed.emit(70)
    ...
    registry.cleanup(player)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, overload

from anysignal.defaults import default_registry


if TYPE_CHECKING:
    from typing import Self

    from anysignal.identity import ConnectionId, SignalId
    from anysignal.models import Callback, Connection
    from anysignal.registry import Registry


class BoundSignal:
    """Handle to one (emitter, signal id) pair on a registry."""

    __slots__ = ("emitter", "registry", "signal_id")

    def __init__(self, registry: Registry, emitter: Any, signal_id: SignalId) -> None:
        self.registry = registry
        self.emitter = emitter
        self.signal_id = signal_id

    def __repr__(self) -> str:
        return f"BoundSignal({self.emitter!r}, {self.signal_id!r})"

    @property
    def is_registered(self) -> bool:
        return self.registry.get(self.emitter, self.signal_id) is not None

    def connect(
        self,
        listener: Any,
        connection_id: ConnectionId,
        callback: Callback | None = None,
        oneshot: bool = False,
    ) -> Connection:
        """Connect listener. See Registry.connect."""
        return self.registry.connect(
            self.emitter, self.signal_id, listener, connection_id, callback, oneshot
        )

    def disconnect(self, listener: Any, connection_id: ConnectionId) -> None:
        self.registry.disconnect(self.emitter, self.signal_id, listener, connection_id)

    def emit(self, *args: Any) -> None:
        self.registry.emit(self.emitter, self.signal_id, *args)

    async def aemit(self, *args: Any) -> None:
        await self.registry.aemit(self.emitter, self.signal_id, *args)

    def connections(self) -> list[Connection]:
        return self.registry.connections(self.emitter, self.signal_id)


class SignalSlot:
    """Descriptor: define at class level, get a BoundSignal per instance.

    The signal is registered on first instance access. After
    `registry.cleanup(obj)` the next access registers it again.

    Example:
        class Door:
            opened = SignalSlot()
            closed = SignalSlot("door_closed", registry=my_registry)
    """

    __slots__ = ("_registry", "_signal_id")

    def __init__(
        self,
        signal_id: SignalId | None = None,
        *,
        registry: Registry | None = None,
    ) -> None:
        self._signal_id = signal_id
        self._registry = registry

    def __set_name__(self, owner: type, name: str) -> None:
        if self._signal_id is None:
            self._signal_id = name

    @property
    def registry(self) -> Registry:
        return self._registry if self._registry is not None else default_registry

    @property
    def signal_id(self) -> SignalId:
        if self._signal_id is None:
            msg = "SignalSlot has no id; declare it in a class body or pass one"
            raise AttributeError(msg)
        return self._signal_id

    @overload
    def __get__(self, obj: None, owner: type | None = None) -> Self: ...

    @overload
    def __get__(self, obj: object, owner: type | None = None) -> BoundSignal: ...

    def __get__(self, obj: object | None, owner: type | None = None) -> Self | BoundSignal:
        if obj is None:
            return self
        registry = self.registry
        registry.register_if_absent(obj, self.signal_id)
        return BoundSignal(registry, obj, self.signal_id)

"""Dual-indexed signal registry.

The forward index maps emitter -> signal id -> Signal (which holds
listener -> connection id -> Connection). The reverse index maps
listener -> emitter -> signal id -> connection id -> Connection.
Both hold the same Connection objects and are always written together.
Emptied levels are pruned, so plain membership answers "has any".
"""

from __future__ import annotations

import contextlib
import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any

from anysignal.config import RegistryConfig
from anysignal.exceptions import (
    AsyncCallbackError,
    DuplicateConnectionError,
    DuplicateSignalError,
    InvalidArgumentError,
    SignalNotFoundError,
)
from anysignal.identity import IdentityDict, is_valid_id, validate_id, validate_identity
from anysignal.models import Connection, Signal, method_callback


if TYPE_CHECKING:
    from anysignal.identity import ConnectionId, SignalId
    from anysignal.models import Callback


logger = logging.getLogger(__name__)

type ReverseEntry = IdentityDict[Any, dict[SignalId, dict[ConnectionId, Connection]]]


class Registry:
    """Registry of signals and the connections made to them.

    Example:
        registry = Registry()
        registry.register(player, "health_changed")
        registry.connect(player, "health_changed", hud, "update")
        registry.emit(player, "health_changed", 70)
    """

    def __init__(self, config: RegistryConfig | None = None, **overrides: Any) -> None:
        """Create an empty registry.

        Args:
            config: Registry configuration, defaults to RegistryConfig()
            overrides: Config fields overriding those of `config`
        """
        if config is None:
            config = RegistryConfig(**overrides)
        elif overrides:
            config = RegistryConfig.model_validate({**config.model_dump(), **overrides})
        self._config = config
        self._lock: contextlib.AbstractContextManager[Any] = (
            threading.RLock() if config.thread_safe else contextlib.nullcontext()
        )
        self._forward: IdentityDict[Any, dict[SignalId, Signal]] = IdentityDict()
        self._reverse: IdentityDict[Any, ReverseEntry] = IdentityDict()

    @property
    def config(self) -> RegistryConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._config.name

    def __repr__(self) -> str:
        return (
            f"Registry(name={self.name!r}, emitters={len(self._forward)}, "
            f"listeners={len(self._reverse)})"
        )

    # Signals

    def register(self, emitter: Any, signal_id: SignalId) -> None:
        """Create an empty signal on the emitter.

        Raises:
            DuplicateSignalError: The signal already exists on this emitter
        """
        validate_identity(emitter, "emitter")
        validate_id(signal_id, "signal_id")
        with self._lock:
            signals = self._forward.get(emitter)
            if signals is not None and signal_id in signals:
                raise DuplicateSignalError(emitter, signal_id)
            if signals is None:
                signals = self._forward[emitter] = {}
            signals[signal_id] = Signal(emitter, signal_id)
        logger.debug("%s: registered signal %r on %r", self.name, signal_id, emitter)

    def get(self, emitter: Any, signal_id: SignalId) -> Signal | None:
        """Return the signal, or None if it is not registered."""
        if not is_valid_id(signal_id):
            return None
        signals = self._forward.get(emitter)
        if signals is None:
            return None
        return signals.get(signal_id)

    def deregister(self, emitter: Any, signal_id: SignalId) -> None:
        """Disconnect everything from the signal and remove it. No-op if absent."""
        validate_id(signal_id, "signal_id")
        with self._lock:
            signal = self.get(emitter, signal_id)
            if signal is None:
                return
            for conn in signal.connections():
                self._unlink(signal, conn.listener, conn.connection_id)
            signals = self._forward[emitter]
            del signals[signal_id]
            if not signals:
                del self._forward[emitter]
        logger.debug("%s: deregistered signal %r on %r", self.name, signal_id, emitter)

    def signals(self, emitter: Any) -> list[SignalId]:
        """Ids of all signals registered on the emitter."""
        with self._lock:
            return list(self._forward.get(emitter, {}))

    def register_if_absent(self, emitter: Any, signal_id: SignalId) -> Signal:
        """Return the signal, registering it first if needed."""
        with self._lock:
            signal = self.get(emitter, signal_id)
            if signal is None:
                self.register(emitter, signal_id)
                signal = self._forward[emitter][signal_id]
            return signal

    # Connections

    def connect(
        self,
        emitter: Any,
        signal_id: SignalId,
        listener: Any,
        connection_id: ConnectionId,
        callback: Callback | None = None,
        oneshot: bool = False,
    ) -> Connection:
        """Connect a listener to an emitter's signal.

        Without a callback, emitting calls the listener's method named
        `connection_id` with the emitted arguments.

        Args:
            emitter: Object owning the signal
            signal_id: Id of a registered signal
            listener: Object the connection belongs to
            connection_id: Key unique per (emitter, signal, listener)
            callback: Called with the emitted arguments
            oneshot: Disconnect after the first invocation

        Raises:
            InvalidArgumentError: Wrong argument types
            SignalNotFoundError: The signal is not registered
            DuplicateConnectionError: The connection already exists
        """
        self._validate_key(emitter, signal_id, listener, connection_id)
        if callback is None:
            if not isinstance(connection_id, str):
                msg = "connection_id must name a method when no callback is given"
                raise InvalidArgumentError(msg)
            callback = method_callback(listener, connection_id)
        elif not callable(callback):
            msg = f"callback must be callable, got {type(callback).__name__}"
            raise InvalidArgumentError(msg)

        with self._lock:
            signal = self._require_signal(emitter, signal_id)
            if signal.lookup(listener, connection_id) is not None:
                raise DuplicateConnectionError(emitter, signal_id, listener, connection_id)
            conn = Connection(
                emitter=emitter,
                signal_id=signal_id,
                listener=listener,
                connection_id=connection_id,
                callback=callback,
                oneshot=bool(oneshot),
            )
            signal.listeners.setdefault(listener, {})[connection_id] = conn
            by_emitter = self._reverse.setdefault(listener, IdentityDict())
            by_signal = by_emitter.setdefault(emitter, {})
            by_signal.setdefault(signal_id, {})[connection_id] = conn
        logger.debug(
            "%s: connected %r to %r.%r as %r (oneshot=%s)",
            self.name,
            listener,
            emitter,
            signal_id,
            connection_id,
            conn.oneshot,
        )
        return conn

    def disconnect(
        self,
        emitter: Any,
        signal_id: SignalId,
        listener: Any,
        connection_id: ConnectionId,
    ) -> None:
        """Remove a connection. Missing connections are ignored.

        Raises:
            InvalidArgumentError: Wrong argument types
            SignalNotFoundError: The signal is not registered
        """
        self._validate_key(emitter, signal_id, listener, connection_id)
        with self._lock:
            signal = self._require_signal(emitter, signal_id)
            removed = self._unlink(signal, listener, connection_id)
        if removed is not None:
            logger.debug(
                "%s: disconnected %r from %r.%r (%r)",
                self.name,
                listener,
                emitter,
                signal_id,
                connection_id,
            )

    def connections(self, emitter: Any, signal_id: SignalId) -> list[Connection]:
        """Snapshot of the connections on a registered signal."""
        with self._lock:
            return self._require_signal(emitter, signal_id).connections()

    def subscriptions(self, listener: Any) -> list[Connection]:
        """Snapshot of every connection held by the listener."""
        with self._lock:
            by_emitter = self._reverse.get(listener)
            if by_emitter is None:
                return []
            return [
                conn
                for by_signal in by_emitter.values()
                for by_id in by_signal.values()
                for conn in by_id.values()
            ]

    def is_connected(
        self,
        emitter: Any,
        signal_id: SignalId,
        listener: Any,
        connection_id: ConnectionId,
    ) -> bool:
        if not is_valid_id(connection_id):
            return False
        signal = self.get(emitter, signal_id)
        return signal is not None and signal.lookup(listener, connection_id) is not None

    def has_emitter(self, obj: Any) -> bool:
        """Whether obj owns any signals."""
        return obj in self._forward

    def has_listener(self, obj: Any) -> bool:
        """Whether obj holds any connections."""
        return obj in self._reverse

    # Emission

    def emit(self, emitter: Any, signal_id: SignalId, *args: Any) -> None:
        """Invoke every connection present on the signal when emit starts.

        Connections are called in listener order, then connect order.
        A connection removed by an earlier callback is skipped; one added
        during emission waits for the next emit. Oneshot connections are
        disconnected right after their callback, even if it raises.

        Raises:
            InvalidArgumentError: signal_id is not a str or int
            SignalNotFoundError: The signal is not registered
            AsyncCallbackError: A callback returned an awaitable
        """
        validate_id(signal_id, "signal_id")
        with self._lock:
            snapshot = self._require_signal(emitter, signal_id).connections()
        for conn in snapshot:
            if not self._claim(conn):
                continue
            spent = True
            try:
                result = conn.invoke(*args)
                if inspect.isawaitable(result):
                    # Nothing ran, so a oneshot stays connected for aemit.
                    spent = False
                    conn.fired = False
                    _close_awaitable(result)
                    raise AsyncCallbackError(emitter, signal_id, conn.connection_id)
            except AsyncCallbackError:
                raise
            except Exception:
                if self._config.raise_exceptions:
                    raise
                logger.exception(
                    "%s: callback %r for %r.%r failed",
                    self.name,
                    conn.connection_id,
                    emitter,
                    signal_id,
                )
            finally:
                if conn.oneshot and spent:
                    self._discard(conn)

    async def aemit(self, emitter: Any, signal_id: SignalId, *args: Any) -> None:
        """Like emit, but awaits callbacks that return awaitables."""
        validate_id(signal_id, "signal_id")
        with self._lock:
            snapshot = self._require_signal(emitter, signal_id).connections()
        for conn in snapshot:
            if not self._claim(conn):
                continue
            try:
                result = conn.invoke(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                if self._config.raise_exceptions:
                    raise
                logger.exception(
                    "%s: callback %r for %r.%r failed",
                    self.name,
                    conn.connection_id,
                    emitter,
                    signal_id,
                )
            finally:
                if conn.oneshot:
                    self._discard(conn)

    # Lifecycle

    def cleanup(self, obj: Any) -> None:
        """Remove every trace of obj, both as listener and as emitter.

        Must be called before the owner drops obj; the registry holds
        strong references and cannot notice on its own.

        Raises:
            InvalidArgumentError: obj is not a reference object
        """
        validate_identity(obj, "object")
        with self._lock:
            by_emitter = self._reverse.get(obj)
            if by_emitter is not None:
                held = [
                    conn
                    for by_signal in by_emitter.values()
                    for by_id in by_signal.values()
                    for conn in by_id.values()
                ]
                for conn in held:
                    self._discard(conn)
            signals = self._forward.get(obj)
            if signals is not None:
                for signal in signals.values():
                    for conn in signal.connections():
                        self._unlink(signal, conn.listener, conn.connection_id)
                del self._forward[obj]
        logger.debug("%s: cleaned up %r", self.name, obj)

    def clear(self) -> None:
        """Drop all signals and connections."""
        with self._lock:
            self._forward = IdentityDict()
            self._reverse = IdentityDict()

    # Internals

    @staticmethod
    def _validate_key(
        emitter: Any,
        signal_id: Any,
        listener: Any,
        connection_id: Any,
    ) -> None:
        validate_identity(emitter, "emitter")
        validate_identity(listener, "listener")
        validate_id(signal_id, "signal_id")
        validate_id(connection_id, "connection_id")

    def _require_signal(self, emitter: Any, signal_id: SignalId) -> Signal:
        signal = self.get(emitter, signal_id)
        if signal is None:
            raise SignalNotFoundError(emitter, signal_id)
        return signal

    def _unlink(
        self,
        signal: Signal,
        listener: Any,
        connection_id: ConnectionId,
    ) -> Connection | None:
        """Remove one connection from both indexes, pruning empty levels."""
        by_id = signal.listeners.get(listener)
        if by_id is None or connection_id not in by_id:
            return None
        conn = by_id.pop(connection_id)
        if not by_id:
            del signal.listeners[listener]

        by_emitter = self._reverse[listener]
        by_signal = by_emitter[signal.emitter]
        reverse_ids = by_signal[signal.signal_id]
        del reverse_ids[connection_id]
        if not reverse_ids:
            del by_signal[signal.signal_id]
        if not by_signal:
            del by_emitter[signal.emitter]
        if not by_emitter:
            del self._reverse[listener]
        return conn

    def _is_live(self, conn: Connection) -> bool:
        signal = self.get(conn.emitter, conn.signal_id)
        return (
            signal is not None
            and signal.lookup(conn.listener, conn.connection_id) is conn
        )

    def _claim(self, conn: Connection) -> bool:
        """Check a snapshot entry may run now; oneshots are marked as fired."""
        with self._lock:
            if not self._is_live(conn):
                return False
            if conn.oneshot:
                if conn.fired:
                    return False
                conn.fired = True
            return True

    def _discard(self, conn: Connection) -> None:
        """Remove exactly this connection if it is still registered."""
        with self._lock:
            if self._is_live(conn):
                signal = self._forward[conn.emitter][conn.signal_id]
                self._unlink(signal, conn.listener, conn.connection_id)


def _close_awaitable(result: Any) -> None:
    """Close an unawaited coroutine so it does not warn on collection."""
    close = getattr(result, "close", None)
    if close is not None:
        close()

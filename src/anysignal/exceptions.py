"""Exceptions raised by the signal registry."""

from __future__ import annotations

from typing import Any


class SignalError(Exception):
    """Base class for all registry errors."""


class InvalidArgumentError(SignalError, TypeError):
    """An emitter, listener or id has the wrong type."""


class SignalNotFoundError(SignalError, LookupError):
    """Operation targets a signal that was never registered."""

    def __init__(self, emitter: Any, signal_id: str | int):
        super().__init__(f"Signal {signal_id!r} does not exist for object {emitter!r}")
        self.emitter = emitter
        self.signal_id = signal_id


class DuplicateSignalError(SignalError):
    """Signal is already registered on the emitter."""

    def __init__(self, emitter: Any, signal_id: str | int):
        super().__init__(f"Signal {signal_id!r} already registered for object {emitter!r}")
        self.emitter = emitter
        self.signal_id = signal_id


class DuplicateConnectionError(SignalError):
    """Connection with the same key already exists."""

    def __init__(
        self,
        emitter: Any,
        signal_id: str | int,
        listener: Any,
        connection_id: str | int,
    ):
        super().__init__(
            f"Connection {connection_id!r} from {listener!r} "
            f"to signal {signal_id!r} of {emitter!r} already exists"
        )
        self.emitter = emitter
        self.signal_id = signal_id
        self.listener = listener
        self.connection_id = connection_id


class AsyncCallbackError(SignalError, TypeError):
    """A callback returned an awaitable during a synchronous emit."""

    def __init__(self, emitter: Any, signal_id: str | int, connection_id: str | int):
        super().__init__(
            f"Callback {connection_id!r} on signal {signal_id!r} of {emitter!r} "
            "returned an awaitable; use aemit to dispatch async callbacks"
        )
        self.emitter = emitter
        self.signal_id = signal_id
        self.connection_id = connection_id

"""Shared fixtures and index consistency checks."""

from __future__ import annotations

import pytest

from anysignal import Registry


class Obj:
    """Plain reference object usable as emitter or listener."""

    def __init__(self, name: str = "obj") -> None:
        self.name = name
        self.calls: list[tuple] = []

    def __repr__(self) -> str:
        return f"Obj({self.name!r})"

    def update(self, *args) -> None:
        self.calls.append(args)


@pytest.fixture
def registry() -> Registry:
    """Create an isolated registry."""
    return Registry(name="test")


def assert_consistent(registry: Registry) -> None:
    """Check both indexes mirror each other and contain no empty levels."""
    forward_count = 0
    for emitter, signals in registry._forward.items():
        assert signals, f"empty signal map left for {emitter!r}"
        for signal_id, signal in signals.items():
            assert signal.emitter is emitter
            assert signal.signal_id == signal_id
            for listener, by_id in signal.listeners.items():
                assert by_id, f"empty connection map left for {listener!r}"
                for connection_id, conn in by_id.items():
                    forward_count += 1
                    mirrored = registry._reverse[listener][emitter][signal_id]
                    assert mirrored[connection_id] is conn

    reverse_count = 0
    for listener, by_emitter in registry._reverse.items():
        assert by_emitter
        for emitter, by_signal in by_emitter.items():
            assert by_signal
            for signal_id, by_id in by_signal.items():
                assert by_id
                for connection_id, conn in by_id.items():
                    reverse_count += 1
                    signal = registry._forward[emitter][signal_id]
                    assert signal.listeners[listener][connection_id] is conn
    assert forward_count == reverse_count


def references(registry: Registry, obj: object) -> bool:
    """Whether obj appears anywhere in either index."""
    if obj in registry._forward or obj in registry._reverse:
        return True
    for signals in registry._forward.values():
        for signal in signals.values():
            if obj in signal.listeners:
                return True
    return any(obj in by_emitter for by_emitter in registry._reverse.values())

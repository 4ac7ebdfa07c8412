"""Identity-keyed containers and argument validation."""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping
from typing import Any

from anysignal.exceptions import InvalidArgumentError


type SignalId = str | int
type ConnectionId = str | int

# Types compared by value; their identity is not meaningful as a key.
_VALUE_TYPES = (str, bytes, bytearray, int, float, complex, bool, tuple, frozenset)


class IdentityDict[K, V](MutableMapping[K, V]):
    """Mapping that compares keys by identity instead of equality.

    Keys are held strongly, so their ``id()`` stays valid for as long as
    the entry exists. Iteration follows insertion order.
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: dict[int, tuple[K, V]] = {}

    def __getitem__(self, key: K) -> V:
        try:
            return self._data[id(key)][1]
        except KeyError:
            raise KeyError(key) from None

    def __setitem__(self, key: K, value: V) -> None:
        self._data[id(key)] = (key, value)

    def __delitem__(self, key: K) -> None:
        try:
            del self._data[id(key)]
        except KeyError:
            raise KeyError(key) from None

    def __contains__(self, key: object) -> bool:
        return id(key) in self._data

    def __iter__(self) -> Iterator[K]:
        return (key for key, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self._data.values())
        return f"{type(self).__name__}({{{items}}})"


def validate_identity(obj: Any, role: str) -> None:
    """Raise if obj cannot act as an emitter or listener."""
    if obj is None or isinstance(obj, _VALUE_TYPES):
        msg = f"{role} must be a reference object, got {type(obj).__name__}"
        raise InvalidArgumentError(msg)


def is_valid_id(value: Any) -> bool:
    """Whether value is a str or a (non-bool) int."""
    return isinstance(value, str | int) and not isinstance(value, bool)


def validate_id(value: Any, role: str) -> None:
    """Raise unless value is a str or a (non-bool) int."""
    if not is_valid_id(value):
        msg = f"{role} must be a str or int, got {type(value).__name__}"
        raise InvalidArgumentError(msg)

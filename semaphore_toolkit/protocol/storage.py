"""
Keyed stores owned by a deployment.

State lives in explicit stores created by one composition root and injected
into the components that use them. ``KeyedStore`` maps one key to a value;
``SlotStore`` is two-dimensional and maps ``(group_id, slot)`` to a root.
Both serialize to plain CBOR-friendly structures for snapshots.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Iterator, Optional, Tuple, TypeVar

import cbor2

K = TypeVar("K")
V = TypeVar("V")


class KeyedStore(Generic[K, V]):
    """Dictionary-backed store with explicit get/put semantics."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._data: Dict[K, V] = {}

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        return self._data.get(key, default)

    def put(self, key: K, value: V) -> None:
        self._data[key] = value

    def delete(self, key: K) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def items(self) -> Iterator[Tuple[K, V]]:
        return iter(list(self._data.items()))

    def to_list(self, encode: Callable[[V], Any] = lambda v: v) -> list:
        return [[key, encode(value)] for key, value in self._data.items()]

    def load_list(self, entries: list, decode: Callable[[Any], V] = lambda v: v) -> None:
        self._data = {_key(entry[0]): decode(entry[1]) for entry in entries}


class SlotStore:
    """
    Two-dimensional store of root-history slots.

    Empty slots read as 0 and are never materialized.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._data: Dict[int, Dict[int, int]] = {}

    def get(self, group_id: int, slot: int) -> int:
        return self._data.get(group_id, {}).get(slot, 0)

    def put(self, group_id: int, slot: int, value: int) -> None:
        self._data.setdefault(group_id, {})[slot] = value

    def row(self, group_id: int) -> Dict[int, int]:
        return dict(self._data.get(group_id, {}))

    def __len__(self) -> int:
        return sum(len(row) for row in self._data.values())

    def to_list(self) -> list:
        return [
            [group_id, slot, value]
            for group_id, row in self._data.items()
            for slot, value in row.items()
        ]

    def load_list(self, entries: list) -> None:
        data: Dict[int, Dict[int, int]] = {}
        for group_id, slot, value in entries:
            data.setdefault(int(group_id), {})[int(slot)] = int(value)
        self._data = data


def _key(value: Any) -> Any:
    # CBOR has no tuple type; composite keys come back as lists.
    if isinstance(value, list):
        return tuple(value)
    return value


def dumps(payload: dict) -> bytes:
    return cbor2.dumps(payload)


def loads(blob: bytes) -> dict:
    if not isinstance(blob, (bytes, bytearray)):
        raise TypeError("snapshot blob must be bytes")
    payload = cbor2.loads(bytes(blob))
    if not isinstance(payload, dict):
        raise ValueError("snapshot payload must be a dict")
    return payload

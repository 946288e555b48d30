"""
Event types and the append-only event log.

External indexers rebuild the full group, membership and signal history
from this stream alone, so every state change emits exactly one event.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, Iterable, List, Tuple, Type

import cbor2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupCreated:
    group_id: int
    admin: str


@dataclass(frozen=True)
class MemberAdded:
    group_id: int
    member_ref: int
    index: int
    root: int


@dataclass(frozen=True)
class MemberRemoved:
    group_id: int
    member_ref: int
    root: int


@dataclass(frozen=True)
class SignalAccepted:
    group_id: int
    nullifier: int
    message: int
    scope: int


@dataclass(frozen=True)
class AdminTransferProposed:
    group_id: int
    from_admin: str
    to_admin: str


@dataclass(frozen=True)
class AdminTransferAccepted:
    group_id: int
    new_admin: str


EVENT_TYPES: Dict[str, Type] = {
    cls.__name__: cls
    for cls in (
        GroupCreated,
        MemberAdded,
        MemberRemoved,
        SignalAccepted,
        AdminTransferProposed,
        AdminTransferAccepted,
    )
}

Subscriber = Callable[[Any], None]


class EventLog:
    """Append-only, thread-safe event stream with synchronous subscribers."""

    def __init__(self) -> None:
        self._events: List[Any] = []
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def emit(self, event: Any) -> None:
        if type(event).__name__ not in EVENT_TYPES:
            raise TypeError(f"unknown event type: {type(event).__name__}")
        with self._lock:
            self._events.append(event)
            subscribers = list(self._subscribers)
        logger.debug("event %s", event)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                # The state change has already committed.
                logger.exception("event subscriber failed on %s", type(event).__name__)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def events(self, kind: Type | None = None) -> Tuple[Any, ...]:
        with self._lock:
            snapshot = tuple(self._events)
        if kind is None:
            return snapshot
        return tuple(event for event in snapshot if isinstance(event, kind))

    def load(self, events: Iterable[Any]) -> None:
        """Append previously recorded events without notifying subscribers."""
        with self._lock:
            self._events.extend(events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def to_bytes(self) -> bytes:
        return encode_events(self.events())

    @classmethod
    def from_bytes(cls, blob: bytes) -> "EventLog":
        log = cls()
        log.load(decode_events(blob))
        return log


def event_to_dict(event: Any) -> Dict[str, Any]:
    payload = asdict(event)
    payload["type"] = type(event).__name__
    return payload


def event_from_dict(data: Dict[str, Any]) -> Any:
    if not isinstance(data, dict):
        raise ValueError("event payload must be a dict")
    name = data.get("type")
    cls = EVENT_TYPES.get(name)
    if cls is None:
        raise ValueError(f"unknown event type: {name!r}")
    try:
        return cls(**{f.name: data[f.name] for f in fields(cls)})
    except KeyError as exc:
        raise ValueError(f"{name} missing field {exc.args[0]!r}") from exc


def encode_events(events: Iterable[Any]) -> bytes:
    return cbor2.dumps([event_to_dict(event) for event in events])


def decode_events(blob: bytes) -> List[Any]:
    if not isinstance(blob, (bytes, bytearray)):
        raise ValueError("event blob must be bytes")
    payload = cbor2.loads(bytes(blob))
    if not isinstance(payload, list):
        raise ValueError("event stream must be a list")
    return [event_from_dict(entry) for entry in payload]

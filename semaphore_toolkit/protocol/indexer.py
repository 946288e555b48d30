"""Rebuild group, membership and signal history from an event stream."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .events import (
    AdminTransferAccepted,
    AdminTransferProposed,
    GroupCreated,
    MemberAdded,
    MemberRemoved,
    SignalAccepted,
)


@dataclass
class IndexedGroup:
    group_id: int
    admin: str
    pending_admin: Optional[str] = None
    members: Dict[int, int] = field(default_factory=dict)
    removed: List[int] = field(default_factory=list)
    member_count: int = 0
    current_root: int = 0
    signals: List[SignalAccepted] = field(default_factory=list)

    @property
    def active_members(self) -> List[int]:
        """Member refs in index order, with removed refs dropped."""
        pending_removals = Counter(self.removed)
        active = []
        for index in sorted(self.members):
            ref = self.members[index]
            if pending_removals[ref]:
                pending_removals[ref] -= 1
                continue
            active.append(ref)
        return active

    def tally(self, scope: int) -> Counter:
        """Count accepted signals per message digest within ``scope``."""
        return Counter(s.message for s in self.signals if s.scope == scope)


class GroupIndexer:
    """Folds events into per-group state; apply() accepts events in emit order."""

    def __init__(self) -> None:
        self.groups: Dict[int, IndexedGroup] = {}
        self.nullifiers: Set[int] = set()

    @classmethod
    def from_events(cls, events: Iterable[Any]) -> "GroupIndexer":
        indexer = cls()
        for event in events:
            indexer.apply(event)
        return indexer

    def apply(self, event: Any) -> None:
        if isinstance(event, GroupCreated):
            self.groups[event.group_id] = IndexedGroup(
                group_id=event.group_id, admin=event.admin
            )
            return

        group = self.groups.get(event.group_id)
        if group is None:
            raise ValueError(
                f"{type(event).__name__} for unknown group {event.group_id}"
            )

        if isinstance(event, MemberAdded):
            group.members[event.index] = event.member_ref
            group.member_count += 1
            group.current_root = event.root
        elif isinstance(event, MemberRemoved):
            group.removed.append(event.member_ref)
            group.member_count -= 1
            group.current_root = event.root
        elif isinstance(event, SignalAccepted):
            group.signals.append(event)
            self.nullifiers.add(event.nullifier)
        elif isinstance(event, AdminTransferProposed):
            group.pending_admin = event.to_admin
        elif isinstance(event, AdminTransferAccepted):
            group.admin = event.new_admin
            group.pending_admin = None
        else:
            raise ValueError(f"unsupported event: {event!r}")

"""
Group registry with a bounded root history.

Each group keeps its admin, member count, current root and a ring buffer
of recently submitted roots. The ring buffer lets proofs generated against
a slightly stale root still verify while membership changes concurrently.
It is a usability allowance only: a root is silently evicted after
``capacity`` further mutations and is then indistinguishable from a root
that was never valid.

Mutations on the same group serialize on a per-group lock; different groups
proceed independently.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, Optional

from .config import ZERO_ROOT, resolve_root_history_size
from .events import EventLog, GroupCreated, MemberAdded, MemberRemoved
from .exceptions import (
    AlreadyExistsError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
)
from .storage import KeyedStore, SlotStore
from .types import GroupRecord, Principal, require_field, require_principal

logger = logging.getLogger(__name__)


class RootHistory:
    """Fixed-capacity ring buffer of roots per group."""

    def __init__(self, capacity: int = 0, store: Optional[SlotStore] = None) -> None:
        self._capacity = resolve_root_history_size(capacity)
        self._store = store if store is not None else SlotStore("root_history")

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, group_id: int, cursor: int, root: int) -> int:
        """Write ``root`` at ``cursor`` and return the advanced cursor."""
        self._store.put(group_id, cursor, root)
        return (cursor + 1) % self._capacity

    def contains(self, group_id: int, root: int) -> bool:
        if root == ZERO_ROOT:
            return False
        return any(
            value == root
            for value in self._store.row(group_id).values()
            if value != ZERO_ROOT
        )

    def roots(self, group_id: int, cursor: int) -> list[int]:
        """Non-empty roots, oldest first."""
        ordered = []
        for offset in range(self._capacity):
            value = self._store.get(group_id, (cursor + offset) % self._capacity)
            if value != ZERO_ROOT:
                ordered.append(value)
        return ordered


class GroupRegistry:
    """Group lifecycle and membership-root bookkeeping."""

    def __init__(
        self,
        history: Optional[RootHistory] = None,
        groups: Optional[KeyedStore] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self._history = history if history is not None else RootHistory()
        self._groups: KeyedStore[int, GroupRecord] = (
            groups if groups is not None else KeyedStore("groups")
        )
        self._events = events if events is not None else EventLog()
        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def history_capacity(self) -> int:
        return self._history.capacity

    @contextmanager
    def locked(self, group_id: int, *, create: bool = False) -> Iterator[None]:
        """
        Hold the per-group mutation lock.

        Locks exist only for groups that exist or are being created.

        Raises:
            NotFoundError: If the group does not exist and ``create`` is False
        """
        with self._locks_guard:
            lock = self._locks.get(group_id)
            if lock is None:
                if not create and group_id not in self._groups:
                    raise NotFoundError(f"group {group_id} not found")
                lock = self._locks[group_id] = threading.Lock()
        with lock:
            yield

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, group_id: int, *, caller: Principal) -> GroupRecord:
        require_field(group_id, "group_id")
        require_principal(caller, "caller")
        with self.locked(group_id, create=True):
            if group_id in self._groups:
                raise AlreadyExistsError(f"group {group_id} already exists")
            record = GroupRecord(group_id=group_id, admin=caller, current_root=ZERO_ROOT)
            self._groups.put(group_id, record)
            self._events.emit(GroupCreated(group_id=group_id, admin=caller))
        logger.debug("Created group %s with admin %s", group_id, caller)
        return record

    def add_member(
        self, group_id: int, member_ref: int, new_root: int, *, caller: Principal
    ) -> int:
        """
        Record a new member and the root that includes it.

        Returns:
            Index assigned to the member (count before the increment)
        """
        require_field(member_ref, "member_ref")
        require_field(new_root, "new_root")
        with self.locked(group_id):
            record = self._require_admin(group_id, caller)
            index = record.member_count
            cursor = self._history.push(group_id, record.cursor, new_root)
            self._groups.put(
                group_id,
                replace(
                    record,
                    member_count=index + 1,
                    current_root=new_root,
                    cursor=cursor,
                ),
            )
            self._events.emit(
                MemberAdded(
                    group_id=group_id, member_ref=member_ref, index=index, root=new_root
                )
            )
        logger.debug("Group %s: added member at index %d", group_id, index)
        return index

    def remove_member(
        self, group_id: int, member_ref: int, new_root: int, *, caller: Principal
    ) -> None:
        require_field(member_ref, "member_ref")
        require_field(new_root, "new_root")
        with self.locked(group_id):
            record = self._require_admin(group_id, caller)
            if record.member_count == 0:
                raise InvalidStateError(f"group {group_id} has no members to remove")
            cursor = self._history.push(group_id, record.cursor, new_root)
            self._groups.put(
                group_id,
                replace(
                    record,
                    member_count=record.member_count - 1,
                    current_root=new_root,
                    cursor=cursor,
                ),
            )
            self._events.emit(
                MemberRemoved(group_id=group_id, member_ref=member_ref, root=new_root)
            )
        logger.debug("Group %s: removed member", group_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def exists(self, group_id: int) -> bool:
        return group_id in self._groups

    def get(self, group_id: int) -> GroupRecord:
        record = self._groups.get(group_id)
        if record is None:
            raise NotFoundError(f"group {group_id} not found")
        return record

    def member_count(self, group_id: int) -> int:
        return self.get(group_id).member_count

    def current_root(self, group_id: int) -> int:
        return self.get(group_id).current_root

    def admin_of(self, group_id: int) -> Principal:
        return self.get(group_id).admin

    def root_history(self, group_id: int) -> list[int]:
        return self._history.roots(group_id, self.get(group_id).cursor)

    def is_valid_root(self, group_id: int, candidate: int) -> bool:
        require_field(candidate, "candidate")
        record = self._groups.get(group_id)
        if record is None:
            return False
        if candidate == record.current_root:
            return True
        return self._history.contains(group_id, candidate)

    # ------------------------------------------------------------------
    # Admin hooks (caller must hold ``locked(group_id)``)
    # ------------------------------------------------------------------

    def require_admin(self, group_id: int, caller: Principal) -> GroupRecord:
        return self._require_admin(group_id, caller)

    def set_admin(self, group_id: int, admin: Principal) -> None:
        record = self.get(group_id)
        self._groups.put(group_id, replace(record, admin=admin))

    def _require_admin(self, group_id: int, caller: Principal) -> GroupRecord:
        record = self.get(group_id)
        if caller != record.admin:
            raise UnauthorizedError(f"caller is not admin of group {group_id}")
        return record

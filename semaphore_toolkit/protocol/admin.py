"""
Two-step admin transfer.

The current admin proposes a successor, and the successor must accept
before the role moves. A transfer to a mistyped principal therefore never
strands the group. A new proposal silently replaces any proposal that has
not been accepted yet.
"""

from __future__ import annotations

import logging
from typing import Optional

from .events import AdminTransferAccepted, AdminTransferProposed, EventLog
from .exceptions import InvalidStateError, UnauthorizedError
from .registry import GroupRegistry
from .storage import KeyedStore
from .types import Principal, require_principal

logger = logging.getLogger(__name__)

# Returned by pending_of() when no transfer is in flight.
NO_PENDING_ADMIN: Optional[Principal] = None


class AdminAuthority:
    """Admin-transfer handshake layered on a GroupRegistry."""

    def __init__(
        self,
        registry: GroupRegistry,
        pending: Optional[KeyedStore] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self._registry = registry
        self._pending: KeyedStore[int, Principal] = (
            pending if pending is not None else KeyedStore("pending_admins")
        )
        self._events = events if events is not None else EventLog()

    def propose(self, group_id: int, candidate: Principal, *, caller: Principal) -> None:
        require_principal(candidate, "candidate")
        with self._registry.locked(group_id):
            record = self._registry.require_admin(group_id, caller)
            previous = self._pending.get(group_id)
            self._pending.put(group_id, candidate)
            self._events.emit(
                AdminTransferProposed(
                    group_id=group_id, from_admin=record.admin, to_admin=candidate
                )
            )
        if previous is not None and previous != candidate:
            logger.debug(
                "Group %s: proposal to %s replaced by %s", group_id, previous, candidate
            )

    def accept(self, group_id: int, *, caller: Principal) -> None:
        require_principal(caller, "caller")
        with self._registry.locked(group_id):
            self._registry.get(group_id)
            pending = self._pending.get(group_id)
            if pending is NO_PENDING_ADMIN:
                raise InvalidStateError(f"group {group_id} has no pending admin transfer")
            if caller != pending:
                raise UnauthorizedError(
                    f"caller is not the pending admin of group {group_id}"
                )
            self._registry.set_admin(group_id, caller)
            self._pending.delete(group_id)
            self._events.emit(AdminTransferAccepted(group_id=group_id, new_admin=caller))
        logger.debug("Group %s: admin transferred to %s", group_id, caller)

    def pending_of(self, group_id: int) -> Optional[Principal]:
        self._registry.get(group_id)
        return self._pending.get(group_id, NO_PENDING_ADMIN)

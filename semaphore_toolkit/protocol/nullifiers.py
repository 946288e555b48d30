"""
Global nullifier ledger.

A nullifier is recorded at most once per deployment, regardless of which
group or scope produced it. Uniqueness across groups relies on the scope
value giving the nullifier hash enough domain separation: two groups whose
(scope, identity) inputs collide would block each other's signals.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .exceptions import AlreadyUsedError
from .storage import KeyedStore
from .types import require_field

logger = logging.getLogger(__name__)

Guard = Callable[[], None]


class NullifierLedger:
    """Write-once set of consumed nullifiers."""

    def __init__(self, store: Optional[KeyedStore] = None) -> None:
        self._store: KeyedStore[int, bool] = (
            store if store is not None else KeyedStore("nullifiers")
        )
        self._lock = threading.Lock()

    def consume(self, nullifier: int, guard: Optional[Guard] = None) -> None:
        """
        Atomically check and record ``nullifier``.

        Args:
            nullifier: Value to consume
            guard: Optional check run under the ledger lock before the
                nullifier is tested; if it raises, nothing is recorded
                and the exception propagates

        Raises:
            AlreadyUsedError: If the nullifier was consumed before
        """
        require_field(nullifier, "nullifier")
        with self._lock:
            if guard is not None:
                guard()
            if self._store.get(nullifier, False):
                raise AlreadyUsedError(f"nullifier {nullifier:#x} already used")
            self._store.put(nullifier, True)
        logger.debug("Consumed nullifier %#x", nullifier)

    def is_used(self, nullifier: int) -> bool:
        require_field(nullifier, "nullifier")
        return bool(self._store.get(nullifier, False))

    def __len__(self) -> int:
        return len(self._store)

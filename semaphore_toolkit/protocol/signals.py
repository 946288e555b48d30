"""
Signal processing state machine.

A signal passes, in order: group existence, proof verification, public
output arity, root validity, nullifier consumption. Verification runs
without any lock held; the root check and nullifier consumption run
together under the ledger lock so two concurrent signals with the same
nullifier cannot both succeed.

The nullifier depends only on (identity, scope), not on the root the proof
was generated against. Once consumed under any valid root, the identity is
exhausted for that scope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import trio

from .config import FIELD_MAX, PUBLIC_OUTPUT_COUNT
from .events import EventLog, SignalAccepted
from .exceptions import (
    AlreadyUsedError,
    GroupNotFoundError,
    InvalidProofError,
    MalformedPublicInputsError,
    NullifierReusedError,
    RootMismatchError,
)
from .interfaces import Verifier
from .nullifiers import NullifierLedger
from .registry import GroupRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicOutputs:
    root: int
    nullifier: int
    message: int
    scope: int


class SignalProcessor:
    """Verifies signals and commits their nullifiers."""

    def __init__(
        self,
        registry: GroupRegistry,
        ledger: NullifierLedger,
        verifier: Verifier,
        events: Optional[EventLog] = None,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._verifier = verifier
        self._events = events if events is not None else EventLog()

    def send_signal(self, group_id: int, encoded_input: Sequence[Any]) -> SignalAccepted:
        """
        Process one signal.

        Raises:
            GroupNotFoundError: Unknown group
            InvalidProofError: Verifier rejected the input
            MalformedPublicInputsError: Fewer than four public outputs
            RootMismatchError: Root not current and not in root history
            NullifierReusedError: Nullifier already consumed
        """
        self._require_group(group_id)
        outputs = self._verify(encoded_input)
        return self._commit(group_id, outputs)

    async def send_signal_async(
        self, group_id: int, encoded_input: Sequence[Any]
    ) -> SignalAccepted:
        """Like send_signal, running the verifier in a worker thread."""
        self._require_group(group_id)
        outputs = await trio.to_thread.run_sync(self._verify, encoded_input)
        return self._commit(group_id, outputs)

    def _require_group(self, group_id: int) -> None:
        if not self._registry.exists(group_id):
            raise GroupNotFoundError(f"group {group_id} not found")

    def _verify(self, encoded_input: Sequence[Any]) -> PublicOutputs:
        try:
            raw = self._verifier.verify(encoded_input)
        except Exception as exc:  # noqa: BLE001
            logger.info("Verifier %s rejected proof", self._verifier.backend_name)
            raise InvalidProofError("invalid proof") from exc

        try:
            values = [int(value) for value in raw]
        except (TypeError, ValueError) as exc:
            raise MalformedPublicInputsError("public outputs must be integers") from exc
        if len(values) < PUBLIC_OUTPUT_COUNT:
            raise MalformedPublicInputsError(
                f"expected at least {PUBLIC_OUTPUT_COUNT} public outputs, got {len(values)}"
            )
        if any(value < 0 or value > FIELD_MAX for value in values[:PUBLIC_OUTPUT_COUNT]):
            raise MalformedPublicInputsError("public outputs must fit in 256 bits")
        return PublicOutputs(
            root=values[0], nullifier=values[1], message=values[2], scope=values[3]
        )

    def _commit(self, group_id: int, outputs: PublicOutputs) -> SignalAccepted:
        def _check_root() -> None:
            if not self._registry.is_valid_root(group_id, outputs.root):
                raise RootMismatchError(
                    f"root {outputs.root:#x} is not valid for group {group_id}"
                )

        try:
            self._ledger.consume(outputs.nullifier, guard=_check_root)
        except RootMismatchError:
            logger.info("Group %s: signal rejected, unknown root", group_id)
            raise
        except AlreadyUsedError as exc:
            logger.info("Group %s: signal rejected, nullifier reused", group_id)
            raise NullifierReusedError(str(exc)) from exc

        event = SignalAccepted(
            group_id=group_id,
            nullifier=outputs.nullifier,
            message=outputs.message,
            scope=outputs.scope,
        )
        self._events.emit(event)
        return event

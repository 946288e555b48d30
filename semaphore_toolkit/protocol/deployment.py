"""
Deployment composition root.

One Deployment owns one instance of every store (groups, root history,
nullifiers, pending admins) and the event log, and injects them into the
registry, ledger, admin authority and signal processor. There is exactly
one nullifier ledger per deployment.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from .admin import AdminAuthority
from .config import DeploymentConfig
from .events import EventLog, decode_events, encode_events
from .interfaces import Verifier
from .nullifiers import NullifierLedger
from .registry import GroupRegistry, RootHistory
from .signals import SignalProcessor
from .storage import KeyedStore, SlotStore, dumps, loads
from .types import GroupRecord

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class Deployment:
    """Wires the protocol components around a shared set of stores."""

    def __init__(
        self,
        verifier: Verifier,
        config: Optional[DeploymentConfig] = None,
    ) -> None:
        self.config = config if config is not None else DeploymentConfig()
        self.verifier = verifier

        self.group_store: KeyedStore[int, GroupRecord] = KeyedStore("groups")
        self.history_store = SlotStore("root_history")
        self.nullifier_store: KeyedStore[int, bool] = KeyedStore("nullifiers")
        self.pending_store: KeyedStore[int, str] = KeyedStore("pending_admins")
        self.events = EventLog()

        self.history = RootHistory(self.config.root_history_size, self.history_store)
        self.registry = GroupRegistry(self.history, self.group_store, self.events)
        self.ledger = NullifierLedger(self.nullifier_store)
        self.admin = AdminAuthority(self.registry, self.pending_store, self.events)
        self.signals = SignalProcessor(
            self.registry, self.ledger, self.verifier, self.events
        )

    def snapshot(self) -> bytes:
        """Serialize all durable state to CBOR."""
        payload = {
            "v": SNAPSHOT_VERSION,
            "root_history_size": self.history.capacity,
            "groups": self.group_store.to_list(lambda record: record.to_dict()),
            "root_history": self.history_store.to_list(),
            "nullifiers": self.nullifier_store.to_list(),
            "pending_admins": self.pending_store.to_list(),
            "events": encode_events(self.events.events()),
        }
        return dumps(payload)

    @classmethod
    def restore(
        cls,
        blob: bytes,
        verifier: Verifier,
        config: Optional[DeploymentConfig] = None,
    ) -> "Deployment":
        """
        Rebuild a deployment from ``snapshot()`` output.

        The root-history capacity recorded in the snapshot wins over the
        one in ``config``: capacity is fixed when the deployment is created.
        """
        payload = loads(blob)
        if payload.get("v") != SNAPSHOT_VERSION:
            raise ValueError(f"unsupported snapshot version: {payload.get('v')!r}")

        base = config if config is not None else DeploymentConfig()
        stored_size = int(payload["root_history_size"])
        if stored_size != base.root_history_size:
            logger.warning(
                "Snapshot root history size %d overrides configured %d",
                stored_size,
                base.root_history_size,
            )
        deployment = cls(verifier, replace(base, root_history_size=stored_size))
        deployment.group_store.load_list(payload.get("groups", []), GroupRecord.from_dict)
        deployment.history_store.load_list(payload.get("root_history", []))
        deployment.nullifier_store.load_list(payload.get("nullifiers", []), bool)
        deployment.pending_store.load_list(payload.get("pending_admins", []), str)
        events_blob = payload.get("events")
        if events_blob:
            deployment.events.load(decode_events(events_blob))
        logger.debug(
            "Restored deployment: %d groups, %d nullifiers",
            len(deployment.group_store),
            len(deployment.nullifier_store),
        )
        return deployment

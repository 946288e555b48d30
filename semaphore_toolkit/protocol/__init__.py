"""Public API for the signaling protocol core."""
from __future__ import annotations

from importlib import import_module

from .admin import NO_PENDING_ADMIN, AdminAuthority
from .config import DeploymentConfig
from .deployment import Deployment
from .events import (
    AdminTransferAccepted,
    AdminTransferProposed,
    EventLog,
    GroupCreated,
    MemberAdded,
    MemberRemoved,
    SignalAccepted,
)
from .exceptions import (
    AlreadyExistsError,
    AlreadyUsedError,
    GroupNotFoundError,
    InvalidProofError,
    InvalidStateError,
    MalformedPublicInputsError,
    NotFoundError,
    NullifierReusedError,
    RootMismatchError,
    SemaphoreError,
    UnauthorizedError,
)
from .indexer import GroupIndexer
from .interfaces import VerificationError, Verifier
from .nullifiers import NullifierLedger
from .registry import GroupRegistry, RootHistory
from .scope import assert_production_scope, compute_scope, hash_for_circuit
from .signals import SignalProcessor

__all__ = [
    "AdminAuthority",
    "AdminTransferAccepted",
    "AdminTransferProposed",
    "AlreadyExistsError",
    "AlreadyUsedError",
    "Deployment",
    "DeploymentConfig",
    "EventLog",
    "GroupCreated",
    "GroupIndexer",
    "GroupNotFoundError",
    "GroupRegistry",
    "InvalidProofError",
    "InvalidStateError",
    "MalformedPublicInputsError",
    "MemberAdded",
    "MemberRemoved",
    "MockVerifier",
    "NO_PENDING_ADMIN",
    "NotFoundError",
    "NullifierLedger",
    "NullifierReusedError",
    "RootHistory",
    "RootMismatchError",
    "SemaphoreError",
    "SignalAccepted",
    "SignalProcessor",
    "UnauthorizedError",
    "VerificationError",
    "Verifier",
    "assert_production_scope",
    "compute_scope",
    "hash_for_circuit",
]

_LAZY_EXPORTS = {
    "MockVerifier": "adapters.mock_verifier",
}


def __getattr__(name: str):
    if name in _LAZY_EXPORTS:
        module = import_module(f"{__name__}.{_LAZY_EXPORTS[name]}")
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

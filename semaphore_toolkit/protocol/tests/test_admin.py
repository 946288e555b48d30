"""
Unit tests for the two-step admin transfer.
"""

import pytest

from semaphore_toolkit.protocol.admin import NO_PENDING_ADMIN, AdminAuthority
from semaphore_toolkit.protocol.events import (
    AdminTransferAccepted,
    AdminTransferProposed,
    EventLog,
)
from semaphore_toolkit.protocol.exceptions import (
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
)
from semaphore_toolkit.protocol.registry import GroupRegistry

ADMIN = "0xadmin"
ALICE = "0xalice"
BOB = "0xbob"


@pytest.fixture
def events() -> EventLog:
    return EventLog()


@pytest.fixture
def registry(events: EventLog) -> GroupRegistry:
    registry = GroupRegistry(events=events)
    registry.create(1, caller=ADMIN)
    return registry


@pytest.fixture
def authority(registry: GroupRegistry, events: EventLog) -> AdminAuthority:
    return AdminAuthority(registry, events=events)


def test_no_pending_admin_initially(authority: AdminAuthority) -> None:
    assert authority.pending_of(1) is NO_PENDING_ADMIN


def test_propose_and_accept(authority: AdminAuthority, registry: GroupRegistry) -> None:
    authority.propose(1, ALICE, caller=ADMIN)
    assert authority.pending_of(1) == ALICE
    assert registry.admin_of(1) == ADMIN

    authority.accept(1, caller=ALICE)
    assert registry.admin_of(1) == ALICE
    assert authority.pending_of(1) is NO_PENDING_ADMIN


def test_old_admin_loses_rights(authority: AdminAuthority, registry: GroupRegistry) -> None:
    authority.propose(1, ALICE, caller=ADMIN)
    authority.accept(1, caller=ALICE)
    with pytest.raises(UnauthorizedError):
        registry.add_member(1, 0xC1, 0xAAA, caller=ADMIN)
    registry.add_member(1, 0xC1, 0xAAA, caller=ALICE)


def test_propose_requires_admin(authority: AdminAuthority) -> None:
    with pytest.raises(UnauthorizedError):
        authority.propose(1, ALICE, caller=BOB)
    assert authority.pending_of(1) is NO_PENDING_ADMIN


def test_accept_by_wrong_caller(authority: AdminAuthority, registry: GroupRegistry) -> None:
    authority.propose(1, ALICE, caller=ADMIN)
    with pytest.raises(UnauthorizedError):
        authority.accept(1, caller=BOB)
    assert authority.pending_of(1) == ALICE
    assert registry.admin_of(1) == ADMIN


def test_accept_without_proposal(authority: AdminAuthority) -> None:
    with pytest.raises(InvalidStateError):
        authority.accept(1, caller=ALICE)


def test_new_proposal_replaces_pending(authority: AdminAuthority) -> None:
    authority.propose(1, ALICE, caller=ADMIN)
    authority.propose(1, BOB, caller=ADMIN)
    with pytest.raises(UnauthorizedError):
        authority.accept(1, caller=ALICE)
    authority.accept(1, caller=BOB)


def test_unknown_group(authority: AdminAuthority) -> None:
    with pytest.raises(NotFoundError):
        authority.propose(9, ALICE, caller=ADMIN)
    with pytest.raises(NotFoundError):
        authority.accept(9, caller=ALICE)
    with pytest.raises(NotFoundError):
        authority.pending_of(9)


def test_transfer_emits_events(authority: AdminAuthority, events: EventLog) -> None:
    authority.propose(1, ALICE, caller=ADMIN)
    authority.accept(1, caller=ALICE)
    assert events.events(AdminTransferProposed) == (
        AdminTransferProposed(group_id=1, from_admin=ADMIN, to_admin=ALICE),
    )
    assert events.events(AdminTransferAccepted) == (
        AdminTransferAccepted(group_id=1, new_admin=ALICE),
    )

"""
Exceptions for the signaling protocol.

Registry, ledger and admin operations are all-or-nothing: when one of these
is raised, no store has been modified by the failing call.
"""


class SemaphoreError(Exception):
    """Base exception for signaling protocol errors."""

    pass


class ConfigurationError(SemaphoreError):
    """Invalid deployment configuration."""

    pass


class NotFoundError(SemaphoreError):
    """Referenced group does not exist."""

    pass


class GroupNotFoundError(NotFoundError):
    """Signal submitted for a group that does not exist."""

    pass


class AlreadyExistsError(SemaphoreError):
    """Group id is already taken."""

    pass


class UnauthorizedError(SemaphoreError):
    """Caller is not allowed to perform the operation."""

    pass


class InvalidStateError(SemaphoreError):
    """Operation not valid in the current state (no members, no pending transfer)."""

    pass


class AlreadyUsedError(SemaphoreError):
    """Nullifier has already been consumed."""

    pass


class SignalRejectedError(SemaphoreError):
    """Base exception for rejected signals."""

    pass


class InvalidProofError(SignalRejectedError):
    """Verifier rejected the proof."""

    pass


class MalformedPublicInputsError(SignalRejectedError):
    """Verifier returned fewer public outputs than required."""

    pass


class RootMismatchError(SignalRejectedError):
    """Proof root is neither current nor in the group's root history."""

    pass


class NullifierReusedError(SignalRejectedError, AlreadyUsedError):
    """Signal reuses a consumed nullifier."""

    pass

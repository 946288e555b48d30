"""
Verifier capability interface.

The verifier is the trust anchor of the deployment: it is trusted for
soundness, not only availability. It receives the encoded verifier input
and either returns the proof's public outputs or raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence


class VerificationError(Exception):
    """Raised by a verifier when the proof does not verify."""


class Verifier(ABC):
    """Checks an encoded proof and exposes its public outputs."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the verifier backend name."""

    @abstractmethod
    def verify(self, encoded_input: Sequence[Any]) -> Sequence[int]:
        """
        Verify an encoded proof.

        Args:
            encoded_input: Verifier input, e.g. Garaga calldata values

        Returns:
            Public outputs ``[root, nullifier, message_digest, scope_digest]``

        Raises:
            VerificationError: If the proof is invalid
        """

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Set

from ..interfaces import VerificationError, Verifier
from ..scope import to_int


class MockVerifier(Verifier):
    """
    Verifier that reads public outputs straight from the encoded input.

    Notes:
    - Outputs are taken from ``encoded_input[offset:offset + arity]``.
    - It does NOT check any proof; it exists for tests and demos.
    """

    _BACKEND_NAME = "MockVerifier"

    def __init__(
        self,
        offset: int = 0,
        arity: int = 4,
        rejected_nullifiers: Optional[Iterable[int]] = None,
    ) -> None:
        if offset < 0:
            raise ValueError("offset must be non-negative")
        if arity < 0:
            raise ValueError("arity must be non-negative")
        self._offset = offset
        self._arity = arity
        self._rejected: Set[int] = set(rejected_nullifiers or ())
        self.reject_all = False
        self.calls = 0

    @property
    def backend_name(self) -> str:
        return self._BACKEND_NAME

    def reject(self, nullifier: int) -> None:
        self._rejected.add(nullifier)

    def verify(self, encoded_input: Sequence[Any]) -> Sequence[int]:
        self.calls += 1
        if self.reject_all:
            raise VerificationError("mock verifier rejects all proofs")
        window = list(encoded_input)[self._offset : self._offset + self._arity]
        try:
            outputs = [to_int(value) for value in window]
        except (TypeError, ValueError) as exc:
            raise VerificationError(f"unparseable public output: {exc}") from exc
        if len(outputs) >= 2 and outputs[1] in self._rejected:
            raise VerificationError("mock verifier rejected nullifier")
        return outputs

"""
Proof-to-verifier-input encoder.

``ProofEncoder`` walks an ordered list of strategies until one produces
input that passes self-validation. Failures fall through silently (logged
at WARNING); with the manual strategy last in the list, ``encode`` always
returns, possibly with a diagnostic payload that callers must check
before submitting.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from ..protocol.config import DeploymentConfig
from .constants import EXPECTED_CALLDATA_LENGTH, LENGTH_WINDOWS
from .errors import EncodingUnavailableError, OutOfRangeError
from .factory import build_strategies
from .proof import SemaphoreProof, VerificationKey
from .strategies import EncodingStrategy
from .types import EncodedInput

logger = logging.getLogger(__name__)

ProofLike = Union[SemaphoreProof, Mapping[str, Any]]
VerificationKeyLike = Union[VerificationKey, Mapping[str, Any]]


def length_window(curve: str, proof_system: str, depth: int) -> tuple[int, int]:
    """Return the plausible (min, max) input length for a combination."""
    window = LENGTH_WINDOWS.get((curve, proof_system, depth))
    if window is None:
        raise OutOfRangeError(
            f"no documented length window for {curve}/{proof_system}/depth-{depth}"
        )
    return window


def validate_length(
    encoded: Sequence[Any],
    curve: str = "bn254",
    proof_system: str = "groth16",
    depth: int = 20,
) -> None:
    """
    Reject input whose length is implausible for the verifier.

    A cheap gate before an expensive submission, not a correctness proof.

    Raises:
        OutOfRangeError: If the length is outside the documented window
    """
    minimum, maximum = length_window(curve, proof_system, depth)
    length = len(encoded)
    if length < minimum or length > maximum:
        expected = EXPECTED_CALLDATA_LENGTH.get((curve, proof_system, depth))
        hint = f" Expected ~{expected} values." if expected else ""
        raise OutOfRangeError(
            f"Calldata length {length} is outside expected range "
            f"[{minimum}, {maximum}] for {curve}/{proof_system}/depth-{depth}. "
            f"This may indicate an encoder version mismatch.{hint}"
        )


class ProofEncoder:
    """Ordered fallback cascade over encoding strategies."""

    def __init__(
        self,
        strategies: Optional[Iterable[EncodingStrategy]] = None,
        config: Optional[DeploymentConfig] = None,
        *,
        strict: bool = True,
    ) -> None:
        self.config = config if config is not None else DeploymentConfig()
        if strategies is None:
            strategies = build_strategies(self.config)
        self.strategies: tuple[EncodingStrategy, ...] = tuple(strategies)
        if not self.strategies:
            raise ValueError("ProofEncoder needs at least one strategy")
        self._strict = strict

    @property
    def strategy_names(self) -> tuple[str, ...]:
        return tuple(strategy.name for strategy in self.strategies)

    def encode(self, proof: ProofLike, vk: VerificationKeyLike) -> EncodedInput:
        """
        Encode ``proof`` with the first strategy that succeeds.

        Raises:
            ProofFormatError: If the proof or key fails validation
            EncodingUnavailableError: If every strategy failed and none of
                them was the manual export
        """
        if not isinstance(proof, SemaphoreProof):
            proof = SemaphoreProof.from_dict(proof)
        if not isinstance(vk, VerificationKey):
            vk = VerificationKey.from_dict(vk)

        failures = []
        for strategy in self.strategies:
            try:
                encoded = strategy.encode(proof, vk)
                if self._strict and not encoded.diagnostic:
                    self.validate_length(encoded, depth=proof.merkle_tree_depth)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Encoder strategy %r failed: %s", strategy.name, exc)
                failures.append(f"{strategy.name}: {exc}")
                continue
            logger.debug(
                "Encoded proof with %r: %d values", strategy.name, len(encoded)
            )
            return encoded

        raise EncodingUnavailableError(
            "all encoder strategies failed (" + "; ".join(failures) + ")"
        )

    def validate_length(
        self, encoded: Sequence[Any], depth: Optional[int] = None
    ) -> None:
        validate_length(
            encoded,
            curve=self.config.curve,
            proof_system=self.config.proof_system,
            depth=self.config.tree_depth if depth is None else depth,
        )

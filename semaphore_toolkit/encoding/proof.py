"""
Proof and verification-key models.

Proofs arrive as loosely-typed JSON from the proving library. They are
validated eagerly into ``SemaphoreProof`` before any encoding work starts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..protocol.config import MAX_TREE_DEPTH, MIN_TREE_DEPTH
from ..protocol.scope import hash_for_circuit, to_int
from .constants import PROOF_POINT_COUNT
from .errors import ProofFormatError

_REQUIRED_PROOF_FIELDS = (
    "merkleTreeDepth",
    "merkleTreeRoot",
    "nullifier",
    "message",
    "scope",
    "points",
)

_REQUIRED_VK_FIELDS = ("vk_alpha_1", "vk_beta_2", "vk_gamma_2", "vk_delta_2", "IC")


def _field(value: Any, label: str) -> int:
    try:
        return to_int(value, label)
    except (TypeError, ValueError) as exc:
        raise ProofFormatError(str(exc)) from exc


@dataclass(frozen=True)
class SemaphoreProof:
    """
    Validated Semaphore proof.

    Attributes:
        merkle_tree_depth: Depth of the tree the proof was generated against
        merkle_tree_root: Root the proof attests membership in
        nullifier: Nullifier derived from (identity, scope)
        message: Raw message value (not yet reduced)
        scope: Raw scope value (not yet reduced)
        points: Eight Groth16 proof coordinates
    """

    merkle_tree_depth: int
    merkle_tree_root: int
    nullifier: int
    message: int
    scope: int
    points: Tuple[int, ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SemaphoreProof":
        if not isinstance(data, Mapping):
            raise ProofFormatError("proof must be a mapping")
        missing = [name for name in _REQUIRED_PROOF_FIELDS if name not in data]
        if missing:
            raise ProofFormatError(f"proof missing fields: {', '.join(missing)}")

        depth = data["merkleTreeDepth"]
        if isinstance(depth, bool) or not isinstance(depth, int):
            raise ProofFormatError("merkleTreeDepth must be int")
        if not MIN_TREE_DEPTH <= depth <= MAX_TREE_DEPTH:
            raise ProofFormatError(
                f"merkleTreeDepth must be in [{MIN_TREE_DEPTH}, {MAX_TREE_DEPTH}]"
            )

        points = data["points"]
        if not isinstance(points, (list, tuple)) or len(points) != PROOF_POINT_COUNT:
            raise ProofFormatError(f"points must hold {PROOF_POINT_COUNT} coordinates")

        return cls(
            merkle_tree_depth=depth,
            merkle_tree_root=_field(data["merkleTreeRoot"], "merkleTreeRoot"),
            nullifier=_field(data["nullifier"], "nullifier"),
            message=_field(data["message"], "message"),
            scope=_field(data["scope"], "scope"),
            points=tuple(_field(p, f"points[{i}]") for i, p in enumerate(points)),
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "SemaphoreProof":
        return cls.from_dict(_read_json(path, "proof"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "merkleTreeDepth": self.merkle_tree_depth,
            "merkleTreeRoot": str(self.merkle_tree_root),
            "nullifier": str(self.nullifier),
            "message": str(self.message),
            "scope": str(self.scope),
            "points": [str(p) for p in self.points],
        }

    def public_signals(self) -> List[int]:
        """[root, nullifier, hash(message), hash(scope)] as the circuit sees them."""
        return [
            self.merkle_tree_root,
            self.nullifier,
            hash_for_circuit(self.message),
            hash_for_circuit(self.scope),
        ]

    def to_snarkjs(self) -> Dict[str, Any]:
        p = [str(v) for v in self.points]
        return {
            "pi_a": [p[0], p[1], "1"],
            "pi_b": [[p[3], p[2]], [p[5], p[4]], ["1", "0"]],
            "pi_c": [p[6], p[7], "1"],
            "protocol": "groth16",
            "curve": "bn128",
        }

    def to_garaga(self) -> Dict[str, Any]:
        p = [str(v) for v in self.points]
        return {
            "a": {"x": p[0], "y": p[1]},
            "b": {"x": [p[3], p[2]], "y": [p[5], p[4]]},
            "c": {"x": p[6], "y": p[7]},
            "publicInputs": [str(v) for v in self.public_signals()],
        }


@dataclass(frozen=True)
class VerificationKey:
    """Depth-specific snarkjs Groth16 verification key."""

    protocol: str
    curve: str
    n_public: int
    alpha_1: Tuple[str, ...]
    beta_2: Tuple[Tuple[str, ...], ...]
    gamma_2: Tuple[Tuple[str, ...], ...]
    delta_2: Tuple[Tuple[str, ...], ...]
    ic: Tuple[Tuple[str, ...], ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VerificationKey":
        if not isinstance(data, Mapping):
            raise ProofFormatError("verification key must be a mapping")
        missing = [name for name in _REQUIRED_VK_FIELDS if name not in data]
        if missing:
            raise ProofFormatError(f"verification key missing fields: {', '.join(missing)}")

        ic = _nested(data["IC"], "IC")
        if not ic or any(len(point) < 2 for point in ic):
            raise ProofFormatError("IC must be a non-empty list of G1 points")
        n_public = data.get("nPublic", len(ic) - 1)
        if isinstance(n_public, bool) or not isinstance(n_public, int):
            raise ProofFormatError("nPublic must be int")
        if len(ic) != n_public + 1:
            raise ProofFormatError(f"IC must hold nPublic + 1 = {n_public + 1} points")

        return cls(
            protocol=str(data.get("protocol", "groth16")),
            curve=str(data.get("curve", "bn128")),
            n_public=n_public,
            alpha_1=tuple(str(v) for v in _flat(data["vk_alpha_1"], "vk_alpha_1")),
            beta_2=_g2_point(data["vk_beta_2"], "vk_beta_2"),
            gamma_2=_g2_point(data["vk_gamma_2"], "vk_gamma_2"),
            delta_2=_g2_point(data["vk_delta_2"], "vk_delta_2"),
            ic=ic,
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "VerificationKey":
        return cls.from_dict(_read_json(path, "verification key"))

    def to_snarkjs(self) -> Dict[str, Any]:
        return {
            "protocol": self.protocol,
            "curve": self.curve,
            "nPublic": self.n_public,
            "vk_alpha_1": list(self.alpha_1),
            "vk_beta_2": [list(row) for row in self.beta_2],
            "vk_gamma_2": [list(row) for row in self.gamma_2],
            "vk_delta_2": [list(row) for row in self.delta_2],
            "IC": [list(point) for point in self.ic],
        }

    def to_garaga(self) -> Dict[str, Any]:
        return {
            "alpha": {"x": self.alpha_1[0], "y": self.alpha_1[1]},
            "beta": _g2(self.beta_2),
            "gamma": _g2(self.gamma_2),
            "delta": _g2(self.delta_2),
            "ic": [{"x": point[0], "y": point[1]} for point in self.ic],
        }


def extract_verification_key(
    all_vks: Mapping[str, Any], depth: int
) -> VerificationKey:
    """
    Pick the depth-specific key out of Semaphore's combined key file.

    ``vk_alpha_1``, ``vk_beta_2`` and ``vk_gamma_2`` are shared;
    ``vk_delta_2`` and ``IC`` are lists indexed by ``depth - 1``.
    """
    if not isinstance(all_vks, Mapping):
        raise ProofFormatError("verification keys must be a mapping")
    deltas = all_vks.get("vk_delta_2")
    ics = all_vks.get("IC")
    if not isinstance(deltas, list) or not isinstance(ics, list):
        raise ProofFormatError("combined keys need per-depth vk_delta_2 and IC lists")
    idx = depth - 1
    if idx < 0 or idx >= len(deltas) or idx >= len(ics):
        raise ValueError(f"No verification key found for depth {depth}")
    return VerificationKey.from_dict(
        {
            "protocol": all_vks.get("protocol", "groth16"),
            "curve": all_vks.get("curve", "bn128"),
            "nPublic": all_vks.get("nPublic", 4),
            "vk_alpha_1": all_vks.get("vk_alpha_1"),
            "vk_beta_2": all_vks.get("vk_beta_2"),
            "vk_gamma_2": all_vks.get("vk_gamma_2"),
            "vk_delta_2": deltas[idx],
            "IC": ics[idx],
        }
    )


def load_verification_keys(path: str | Path) -> Dict[str, Any]:
    return _read_json(path, "verification keys")


def load_verification_key(path: str | Path, depth: int) -> VerificationKey:
    """Load either a depth-specific key or a combined per-depth key file."""
    data = load_verification_keys(path)
    deltas = data.get("vk_delta_2") if isinstance(data, dict) else None
    if isinstance(deltas, list) and deltas and _is_g2_list(deltas):
        return extract_verification_key(data, depth)
    return VerificationKey.from_dict(data)


def _is_g2_list(deltas: list) -> bool:
    # A combined file holds one G2 point (rows of 2 coordinates) per depth,
    # so its first element is a list of lists rather than a coordinate row.
    first = deltas[0]
    return isinstance(first, list) and bool(first) and isinstance(first[0], list)


def _read_json(path: str | Path, label: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ProofFormatError(f"{label} file is not valid JSON: {path}") from exc


def _flat(value: Any, label: str) -> Sequence[Any]:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise ProofFormatError(f"{label} must be a coordinate list")
    return value


def _nested(value: Any, label: str) -> Tuple[Tuple[str, ...], ...]:
    if not isinstance(value, (list, tuple)):
        raise ProofFormatError(f"{label} must be a list")
    rows = []
    for row in value:
        if not isinstance(row, (list, tuple)):
            raise ProofFormatError(f"{label} rows must be lists")
        rows.append(tuple(str(v) for v in row))
    return tuple(rows)


def _g2(rows: Tuple[Tuple[str, ...], ...]) -> Dict[str, List[str]]:
    return {"x": [rows[0][0], rows[0][1]], "y": [rows[1][0], rows[1][1]]}


def _g2_point(value: Any, label: str) -> Tuple[Tuple[str, ...], ...]:
    rows = _nested(value, label)
    if len(rows) < 2 or any(len(row) < 2 for row in rows[:2]):
        raise ProofFormatError(f"{label} must be a G2 point")
    return rows

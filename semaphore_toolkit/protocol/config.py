"""
Deployment configuration for the signaling protocol.

Module-level constants describe the field and circuit parameters every
deployment shares. ``DeploymentConfig`` carries the values fixed once per
deployment (root-history capacity, encoder settings) and can be loaded from
environment variables or a YAML file.
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ============================================================================
# FIELD PARAMETERS
# ============================================================================

# Roots, nullifiers and digests are carried as unsigned 256-bit integers.
FIELD_BITS = 256
FIELD_MAX = (1 << FIELD_BITS) - 1
FIELD_BYTES = FIELD_BITS // 8

# Current root of a freshly created group, and the marker of an empty
# root-history slot.
ZERO_ROOT = 0

# ============================================================================
# CIRCUIT PARAMETERS
# ============================================================================

# message and scope are hashed with keccak256 over their 32-byte big-endian
# encoding, then shifted right so the digest fits the BN254 scalar field.
CIRCUIT_HASH_SHIFT_BITS = 8

DEFAULT_CURVE = "bn254"
DEFAULT_PROOF_SYSTEM = "groth16"
DEFAULT_TREE_DEPTH = 20
MIN_TREE_DEPTH = 1
MAX_TREE_DEPTH = 32

# Number of public outputs the verifier must return:
# [root, nullifier, message digest, scope digest]
PUBLIC_OUTPUT_COUNT = 4

# Scopes below this look like raw test integers (scope = 1, 2, ...).
MIN_PRODUCTION_SCOPE = 1000

# ============================================================================
# DEPLOYMENT DEFAULTS
# ============================================================================

DEFAULT_ROOT_HISTORY_SIZE = 100
DEFAULT_ENCODER_TIMEOUT = 120.0
DEFAULT_ENCODER_STRATEGIES = ("native", "external", "manual")
DEFAULT_GARAGA_COMMAND = ("garaga",)

_ENV_PREFIX = "SEMAPHORE_"


def validate_config() -> bool:
    """
    Validate module-level parameters.

    Returns:
        True if configuration is valid

    Raises:
        AssertionError: If configuration is invalid
    """
    assert FIELD_BITS == 256, "Field width must be 256 bits"
    assert 0 < CIRCUIT_HASH_SHIFT_BITS < FIELD_BITS, "Invalid digest shift"
    assert MIN_TREE_DEPTH <= DEFAULT_TREE_DEPTH <= MAX_TREE_DEPTH, "Invalid depth"
    assert DEFAULT_ROOT_HISTORY_SIZE > 0, "Root history must hold at least one root"
    assert PUBLIC_OUTPUT_COUNT == 4, "Verifier arity is fixed at four outputs"
    return True


validate_config()


def resolve_root_history_size(value: int | None) -> int:
    """Map a creation-time capacity to its effective value (0 means default)."""
    if value is None:
        return DEFAULT_ROOT_HISTORY_SIZE
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"root_history_size must be an int, got {value!r}")
    if value < 0:
        raise ConfigurationError("root_history_size must not be negative")
    if value == 0:
        return DEFAULT_ROOT_HISTORY_SIZE
    return value


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Values fixed once per deployment.

    Attributes:
        root_history_size: Ring-buffer capacity shared by every group
            (0 means DEFAULT_ROOT_HISTORY_SIZE)
        encoder_timeout: Seconds the external encoder may run
        curve: Curve identifier used to pick a calldata length window
        proof_system: Proof system identifier (e.g. "groth16")
        tree_depth: Merkle tree depth of the verification key in use
        encoder_strategies: Encoder strategy names in fallback order
        garaga_command: argv prefix invoking the garaga CLI
    """

    root_history_size: int = DEFAULT_ROOT_HISTORY_SIZE
    encoder_timeout: float = DEFAULT_ENCODER_TIMEOUT
    curve: str = DEFAULT_CURVE
    proof_system: str = DEFAULT_PROOF_SYSTEM
    tree_depth: int = DEFAULT_TREE_DEPTH
    encoder_strategies: tuple[str, ...] = DEFAULT_ENCODER_STRATEGIES
    garaga_command: tuple[str, ...] = field(default=DEFAULT_GARAGA_COMMAND)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "root_history_size", resolve_root_history_size(self.root_history_size)
        )
        if self.encoder_timeout <= 0:
            raise ConfigurationError("encoder_timeout must be positive")
        if not MIN_TREE_DEPTH <= self.tree_depth <= MAX_TREE_DEPTH:
            raise ConfigurationError(
                f"tree_depth must be in [{MIN_TREE_DEPTH}, {MAX_TREE_DEPTH}]"
            )
        if not self.garaga_command:
            raise ConfigurationError("garaga_command must not be empty")
        object.__setattr__(self, "encoder_strategies", tuple(self.encoder_strategies))
        object.__setattr__(self, "garaga_command", tuple(self.garaga_command))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DeploymentConfig":
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )
        values = dict(data)
        if isinstance(values.get("encoder_strategies"), str):
            values["encoder_strategies"] = _split_names(values["encoder_strategies"])
        if isinstance(values.get("garaga_command"), str):
            values["garaga_command"] = tuple(shlex.split(values["garaga_command"]))
        try:
            return cls(**values)
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DeploymentConfig":
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: top level must be a mapping")
        logger.debug("Loaded deployment config from %s", path)
        return cls.from_mapping(data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DeploymentConfig":
        env = os.environ if environ is None else environ
        config = cls()
        overrides: dict[str, Any] = {}

        raw = env.get(f"{_ENV_PREFIX}ROOT_HISTORY_SIZE")
        if raw:
            overrides["root_history_size"] = _parse_int(raw, "ROOT_HISTORY_SIZE")
        raw = env.get(f"{_ENV_PREFIX}ENCODER_TIMEOUT")
        if raw:
            try:
                overrides["encoder_timeout"] = float(raw)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid ENCODER_TIMEOUT: {raw!r}") from exc
        raw = env.get(f"{_ENV_PREFIX}TREE_DEPTH")
        if raw:
            overrides["tree_depth"] = _parse_int(raw, "TREE_DEPTH")
        raw = env.get(f"{_ENV_PREFIX}CURVE")
        if raw:
            overrides["curve"] = raw
        raw = env.get(f"{_ENV_PREFIX}PROOF_SYSTEM")
        if raw:
            overrides["proof_system"] = raw
        raw = env.get(f"{_ENV_PREFIX}ENCODER_STRATEGIES")
        if raw:
            overrides["encoder_strategies"] = _split_names(raw)
        raw = env.get(f"{_ENV_PREFIX}GARAGA_COMMAND")
        if raw:
            overrides["garaga_command"] = tuple(shlex.split(raw))

        return replace(config, **overrides) if overrides else config


def _parse_int(raw: str, name: str) -> int:
    try:
        return int(raw, 0)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {name}: {raw!r}") from exc


def _split_names(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())

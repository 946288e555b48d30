"""Constants for proof encoding."""

from __future__ import annotations

# First value of a manual-export payload; never valid verifier input.
ENCODING_PENDING = "ENCODING_PENDING"

# Calldata format tested against this garaga release (BN254, Groth16).
GARAGA_VERSION = "1.0.1"

# garaga CurveId values
CURVE_IDS = {"bn254": 0}

# Semaphore proofs carry 8 coordinates: A (2), B (4), C (2).
PROOF_POINT_COUNT = 8

# Empirical calldata length window for a BN254 Groth16 proof. About 1977
# felt252 values for a depth-20 verification key; a materially different
# length usually means a garaga version mismatch.
CALLDATA_MIN_LENGTH = 100
CALLDATA_MAX_LENGTH = 10000
EXPECTED_CALLDATA_LENGTH = {("bn254", "groth16", 20): 1977}

LENGTH_WINDOWS = {
    ("bn254", "groth16", depth): (CALLDATA_MIN_LENGTH, CALLDATA_MAX_LENGTH)
    for depth in range(1, 33)
}

DEFAULT_NATIVE_TARGET = "garaga_rs:get_groth16_calldata"

PROOF_FILE = "proof.json"
PUBLIC_FILE = "public.json"
VK_FILE = "vk.json"

# Strategy name -> import path, in default fallback order.
STRATEGY_REGISTRY = {
    "native": "semaphore_toolkit.encoding.strategies.NativeEncoder",
    "external": "semaphore_toolkit.encoding.strategies.ExternalProcessEncoder",
    "manual": "semaphore_toolkit.encoding.strategies.ManualExportEncoder",
}

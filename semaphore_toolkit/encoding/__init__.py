"""Proof encoding for on-chain verifiers."""

from .constants import ENCODING_PENDING
from .encoder import ProofEncoder, length_window, validate_length
from .errors import (
    EncoderTimeoutError,
    EncodingError,
    EncodingUnavailableError,
    OutOfRangeError,
    ProofFormatError,
    StrategyFailedError,
)
from .proof import (
    SemaphoreProof,
    VerificationKey,
    extract_verification_key,
    load_verification_key,
    load_verification_keys,
)
from .strategies import (
    EncodingStrategy,
    ExternalProcessEncoder,
    ManualExportEncoder,
    NativeEncoder,
)
from .types import EncodedInput

__all__ = [
    "ENCODING_PENDING",
    "EncodedInput",
    "EncoderTimeoutError",
    "EncodingError",
    "EncodingStrategy",
    "EncodingUnavailableError",
    "ExternalProcessEncoder",
    "ManualExportEncoder",
    "NativeEncoder",
    "OutOfRangeError",
    "ProofEncoder",
    "ProofFormatError",
    "SemaphoreProof",
    "StrategyFailedError",
    "VerificationKey",
    "extract_verification_key",
    "length_window",
    "load_verification_key",
    "load_verification_keys",
    "validate_length",
]

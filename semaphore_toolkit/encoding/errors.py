"""Proof encoding error types."""


class EncodingError(Exception):
    """Base error for proof encoding."""


class ProofFormatError(EncodingError, ValueError):
    """Raised when a proof or verification key fails eager validation."""


class StrategyFailedError(EncodingError):
    """Raised by an encoding strategy that could not produce verifier input."""


class EncoderTimeoutError(StrategyFailedError):
    """Raised when the external encoder exceeds its timeout."""


class OutOfRangeError(EncodingError):
    """Raised when encoded input length falls outside the plausible window."""


class EncodingUnavailableError(EncodingError):
    """Raised when no strategy produced usable verifier input."""

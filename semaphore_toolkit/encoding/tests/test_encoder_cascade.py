"""
Tests for the ProofEncoder fallback cascade.
"""

import pytest

from semaphore_toolkit.encoding.encoder import ProofEncoder
from semaphore_toolkit.encoding.errors import (
    EncodingUnavailableError,
    ProofFormatError,
    StrategyFailedError,
)
from semaphore_toolkit.encoding.strategies import (
    EncodingStrategy,
    ManualExportEncoder,
    NativeEncoder,
)
from semaphore_toolkit.encoding.types import EncodedInput

GOOD_LENGTH = 1977


class FailingStrategy(EncodingStrategy):
    name = "failing"

    def __init__(self):
        self.calls = 0

    def encode(self, proof, vk):
        self.calls += 1
        raise StrategyFailedError("unavailable")


def _native(length: int) -> NativeEncoder:
    return NativeEncoder(lambda *_: [1] * length)


def test_first_success_wins(proof_data, vk_data):
    failing = FailingStrategy()
    encoder = ProofEncoder([failing, _native(GOOD_LENGTH), ManualExportEncoder()])
    encoded = encoder.encode(proof_data, vk_data)
    assert encoded.strategy == "native"
    assert len(encoded) == GOOD_LENGTH
    assert encoded.usable
    assert failing.calls == 1


def test_later_strategies_not_called(proof_data, vk_data):
    failing = FailingStrategy()
    ProofEncoder([_native(GOOD_LENGTH), failing]).encode(proof_data, vk_data)
    assert failing.calls == 0


def test_falls_back_to_manual(proof_data, vk_data, caplog):
    encoder = ProofEncoder([FailingStrategy(), ManualExportEncoder()])
    with caplog.at_level("WARNING"):
        encoded = encoder.encode(proof_data, vk_data)
    assert encoded.diagnostic
    assert "'failing' failed" in caplog.text
    with pytest.raises(EncodingUnavailableError):
        encoded.require_usable()


def test_implausible_length_falls_through(proof_data, vk_data):
    encoder = ProofEncoder([_native(50), ManualExportEncoder()])
    assert encoder.encode(proof_data, vk_data).strategy == "manual"


def test_non_strict_keeps_short_output(proof_data, vk_data):
    encoder = ProofEncoder([_native(50)], strict=False)
    assert len(encoder.encode(proof_data, vk_data)) == 50


def test_all_failed_raises(proof_data, vk_data):
    encoder = ProofEncoder([FailingStrategy(), _native(3)])
    with pytest.raises(EncodingUnavailableError, match="failing: unavailable"):
        encoder.encode(proof_data, vk_data)


def test_invalid_proof_fails_before_strategies(proof_data, vk_data):
    failing = FailingStrategy()
    del proof_data["scope"]
    with pytest.raises(ProofFormatError):
        ProofEncoder([failing]).encode(proof_data, vk_data)
    assert failing.calls == 0


def test_unexpected_strategy_error_is_caught(proof_data, vk_data):
    class Crashing(EncodingStrategy):
        name = "crashing"

        def encode(self, proof, vk):
            raise KeyError("x")

    encoder = ProofEncoder([Crashing(), ManualExportEncoder()])
    assert encoder.encode(proof_data, vk_data).strategy == "manual"


def test_needs_a_strategy():
    with pytest.raises(ValueError):
        ProofEncoder([])


def test_default_strategy_names():
    assert ProofEncoder().strategy_names == ("native", "external", "manual")


def test_encoded_input_json():
    encoded = EncodedInput(values=("1", "2"), strategy="native")
    assert encoded.to_json() == '["1", "2"]'
    assert list(encoded) == ["1", "2"]

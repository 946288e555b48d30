import pytest

from semaphore_toolkit.encoding import feature_flags

from proof_fixtures import make_proof, make_vk


@pytest.fixture
def proof_data() -> dict:
    return make_proof()


@pytest.fixture
def vk_data() -> dict:
    return make_vk()


@pytest.fixture(autouse=True)
def reset_encoder_flags(monkeypatch: pytest.MonkeyPatch):
    feature_flags.set_encoder_strategies(None)
    monkeypatch.delenv("SEMAPHORE_ENCODER_STRATEGIES", raising=False)
    yield
    feature_flags.set_encoder_strategies(None)

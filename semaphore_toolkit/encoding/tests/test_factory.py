"""
Unit tests for strategy factory selection and lazy imports.
"""

from __future__ import annotations

import pytest

from semaphore_toolkit.encoding import factory
from semaphore_toolkit.encoding.feature_flags import set_encoder_strategies
from semaphore_toolkit.encoding.strategies import (
    EncodingStrategy,
    ExternalProcessEncoder,
    ManualExportEncoder,
    NativeEncoder,
)
from semaphore_toolkit.protocol.config import DeploymentConfig


def test_default_strategies() -> None:
    built = factory.build_strategies()
    assert [type(s) for s in built] == [NativeEncoder, ExternalProcessEncoder, ManualExportEncoder]
    assert all(isinstance(s, EncodingStrategy) for s in built)


def test_config_order_and_settings() -> None:
    config = DeploymentConfig(
        encoder_strategies=("external", "manual"),
        encoder_timeout=7,
        garaga_command=("garaga-dev",),
    )
    built = factory.build_strategies(config)
    assert [s.name for s in built] == ["external", "manual"]
    assert built[0]._timeout == 7
    assert built[0]._command == ("garaga-dev",)


def test_prefer_wins_over_override() -> None:
    set_encoder_strategies("external")
    assert [s.name for s in factory.build_strategies(prefer="manual")] == ["manual"]


def test_override_wins_over_config() -> None:
    set_encoder_strategies("manual")
    config = DeploymentConfig(encoder_strategies=("external",))
    assert [s.name for s in factory.build_strategies(config)] == ["manual"]


def test_unknown_name() -> None:
    with pytest.raises(ValueError, match="Invalid encoder strategy"):
        factory._load_strategy_class("bogus")


def test_missing_module(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(
        factory.STRATEGY_REGISTRY, "native", "semaphore_toolkit.encoding.nope.NativeEncoder"
    )
    with pytest.raises(ImportError, match="Unable to import strategy module"):
        factory._load_strategy_class("native")


def test_missing_class(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(
        factory.STRATEGY_REGISTRY, "native", "semaphore_toolkit.encoding.strategies.Nope"
    )
    with pytest.raises(ImportError, match="not found"):
        factory._load_strategy_class("native")


def test_wrong_type(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(
        factory.STRATEGY_REGISTRY, "native", "semaphore_toolkit.encoding.types.EncodedInput"
    )
    with pytest.raises(TypeError, match="does not implement EncodingStrategy"):
        factory._load_strategy_class("native")

"""
Factory building encoder strategy lists.

Strategy names map to import paths so optional strategies can be added
without touching the encoder itself.
"""

from __future__ import annotations

import importlib
from typing import Iterable, Optional

from ..protocol.config import DeploymentConfig
from .constants import STRATEGY_REGISTRY
from .feature_flags import get_encoder_strategies
from .strategies import EncodingStrategy

__all__ = ["STRATEGY_REGISTRY", "build_strategies"]


def _format_valid_options() -> str:
    return ", ".join(sorted(STRATEGY_REGISTRY.keys()))


def _load_strategy_class(name: str) -> type[EncodingStrategy]:
    if name not in STRATEGY_REGISTRY:
        raise ValueError(
            f"Invalid encoder strategy: {name!r}. Valid options: {_format_valid_options()}"
        )
    import_path = STRATEGY_REGISTRY[name]
    module_path, _, class_name = import_path.rpartition(".")
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as exc:
        raise ImportError(
            f"Unable to import strategy module {module_path!r} for {name!r}"
        ) from exc

    try:
        strategy_cls = getattr(module, class_name)
    except AttributeError as exc:
        raise ImportError(
            f"Strategy class {class_name!r} not found in module {module_path!r}"
        ) from exc

    if not isinstance(strategy_cls, type) or not issubclass(
        strategy_cls, EncodingStrategy
    ):
        raise TypeError(f"{import_path!r} does not implement EncodingStrategy")

    return strategy_cls


def build_strategies(
    config: Optional[DeploymentConfig] = None,
    *,
    prefer: str | Iterable[str] | None = None,
) -> list[EncodingStrategy]:
    """
    Instantiate strategies in fallback order.

    Args:
        config: Deployment configuration passed to each strategy
        prefer: Optional explicit order; otherwise the feature flags
            decide, falling back to the configured order.

    Raises:
        ValueError: If a strategy name is invalid.
        ImportError: If a strategy class cannot be imported.
        TypeError: If a registry entry is not an EncodingStrategy.
    """
    config = config if config is not None else DeploymentConfig()
    names = get_encoder_strategies(prefer, default=config.encoder_strategies)
    return [_load_strategy_class(name).from_config(config) for name in names]

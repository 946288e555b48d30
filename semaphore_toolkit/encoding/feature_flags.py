"""
Feature flags selecting the encoder strategy order.

The order is resolved in precedence: explicit argument, in-memory override
(tests), SEMAPHORE_ENCODER_STRATEGIES, the deployment config, built-in order.
"""

from __future__ import annotations

import os
from typing import Final, Iterable

from .constants import STRATEGY_REGISTRY

_DEFAULT_STRATEGIES: Final[tuple[str, ...]] = tuple(STRATEGY_REGISTRY)
_ENV_VAR_NAME: Final[str] = "SEMAPHORE_ENCODER_STRATEGIES"

_strategies_override: tuple[str, ...] | None = None


def _format_valid_options() -> str:
    return ", ".join(STRATEGY_REGISTRY)


def _normalize_strategies(value: str | Iterable[str] | None) -> tuple[str, ...] | None:
    if value is None:
        return None

    if isinstance(value, str):
        names = [part.strip() for part in value.split(",") if part.strip()]
    else:
        names = list(value)

    if not names:
        return None

    for name in names:
        if not isinstance(name, str) or name not in STRATEGY_REGISTRY:
            raise ValueError(
                f"Invalid encoder strategy: {name!r}. "
                f"Valid options: {_format_valid_options()}"
            )
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate encoder strategy in {names!r}")

    return tuple(names)


def get_encoder_strategies(
    prefer: str | Iterable[str] | None = None,
    default: Iterable[str] | None = None,
) -> tuple[str, ...]:
    """
    Resolve the encoder strategy order.

    Args:
        prefer: Optional explicit order (names or comma-separated string).
        default: Order used when nothing else is set (e.g. from config).

    Returns:
        Strategy names in fallback order.

    Raises:
        ValueError: If a provided strategy name is invalid.
    """
    preferred = _normalize_strategies(prefer)
    if preferred is not None:
        return preferred

    if _strategies_override is not None:
        return _strategies_override

    env_strategies = _normalize_strategies(os.getenv(_ENV_VAR_NAME))
    if env_strategies is not None:
        return env_strategies

    configured = _normalize_strategies(default)
    if configured is not None:
        return configured

    return _DEFAULT_STRATEGIES


def set_encoder_strategies(value: str | Iterable[str] | None) -> None:
    """
    Set in-memory strategy override (testing only).

    Args:
        value: Strategy order to force, or None to clear the override.

    Raises:
        ValueError: If the value is invalid.
    """
    global _strategies_override
    _strategies_override = _normalize_strategies(value)

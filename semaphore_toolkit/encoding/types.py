"""Encoded verifier input."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Tuple

from .constants import ENCODING_PENDING
from .errors import EncodingUnavailableError, StrategyFailedError


@dataclass(frozen=True)
class EncodedInput:
    """
    Ordered verifier input produced by one encoding strategy.

    Attributes:
        values: Field-sized values as decimal strings
        strategy: Name of the strategy that produced the values
        diagnostic: True for a manual-export payload, which carries the
            proof data for offline encoding and is never valid input
    """

    values: Tuple[str, ...]
    strategy: str
    diagnostic: bool = False

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: Any) -> Any:
        return self.values[index]

    @property
    def usable(self) -> bool:
        return not self.diagnostic and (not self.values or self.values[0] != ENCODING_PENDING)

    def require_usable(self) -> "EncodedInput":
        if not self.usable:
            raise EncodingUnavailableError(
                "no encoder produced verifier input; proof exported for manual encoding"
            )
        return self

    def to_json(self) -> str:
        return json.dumps(list(self.values))


def normalize_felts(raw: Any, source: str) -> Tuple[str, ...]:
    """
    Check raw encoder output and return it as decimal strings.

    A leading span-length element (``raw[0] == len(raw) - 1``) is dropped:
    the submitting client adds it again when the parameter is declared as a
    span.
    """
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise StrategyFailedError(f"{source} returned {type(raw).__name__}, not a list")
    values = []
    for index, item in enumerate(raw):
        if isinstance(item, bool):
            raise StrategyFailedError(f"{source} value {index} is not a number")
        try:
            if isinstance(item, str):
                text = item.strip()
                base = 16 if text.lower().startswith("0x") else 10
                number = int(text, base)
            else:
                number = int(item)
        except (TypeError, ValueError) as exc:
            raise StrategyFailedError(f"{source} value {index} is not a number") from exc
        if number < 0:
            raise StrategyFailedError(f"{source} value {index} is negative")
        values.append(str(number))
    if not values:
        raise StrategyFailedError(f"{source} returned no values")
    if len(values) > 1 and values[0] == str(len(values) - 1):
        values = values[1:]
    return tuple(values)

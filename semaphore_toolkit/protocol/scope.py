"""
Scope construction and public-input reduction.

The scope binds a nullifier to one usage context. Unlinkability across
applications only holds when each application uses a distinct,
unpredictable scope: small integers such as ``scope = 1`` let an observer
of several nullifier registries correlate the same identity.

``hash_for_circuit`` is the single reduction applied to message and scope
before they become public inputs. The proving side applies it too; any
mismatch silently breaks verification, so every encoder goes through this
function.
"""

from __future__ import annotations

from typing import Union

from Crypto.Hash import keccak

from .config import CIRCUIT_HASH_SHIFT_BITS, FIELD_BYTES, FIELD_MAX, MIN_PRODUCTION_SCOPE

IntLike = Union[int, str]


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def to_int(value: IntLike, label: str = "value") -> int:
    """Parse an int, decimal string or 0x-prefixed hex string."""
    if isinstance(value, bool):
        raise TypeError(f"{label} must be int or numeric string")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            result = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError as exc:
            raise ValueError(f"{label} is not a number: {value!r}") from exc
    else:
        raise TypeError(f"{label} must be int or numeric string")
    if result < 0 or result > FIELD_MAX:
        raise ValueError(f"{label} must be an unsigned 256-bit value")
    return result


def to_be_bytes32(value: IntLike) -> bytes:
    return to_int(value).to_bytes(FIELD_BYTES, byteorder="big")


def hash_for_circuit(value: IntLike) -> int:
    """
    Reduce a message or scope to a field element.

    keccak256 over the 32-byte big-endian encoding, shifted right by
    CIRCUIT_HASH_SHIFT_BITS.

    Example:
        >>> hash_for_circuit(1) < 2 ** 248
        True
    """
    digest = keccak256(to_be_bytes32(value))
    return int.from_bytes(digest, "big") >> CIRCUIT_HASH_SHIFT_BITS


def compute_scope(contract_address: IntLike, domain_separator: str) -> int:
    """
    Derive a production scope: keccak256(address || domain) >> 8.

    Args:
        contract_address: Contract address (hex string or int)
        domain_separator: Application string, e.g. "anonymous-voting-v1"
    """
    if not isinstance(domain_separator, str) or not domain_separator:
        raise ValueError("domain_separator must be a non-empty string")
    data = to_be_bytes32(contract_address) + domain_separator.encode("utf-8")
    return int.from_bytes(keccak256(data), "big") >> CIRCUIT_HASH_SHIFT_BITS


def assert_production_scope(scope: IntLike) -> None:
    value = to_int(scope, "scope")
    if value < MIN_PRODUCTION_SCOPE:
        raise ValueError(
            f"Scope value {value} looks like a test placeholder. "
            "Use compute_scope(contract_address, domain_separator) to derive "
            "a production scope."
        )

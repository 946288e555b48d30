"""Records and value checks shared by the protocol components."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

from .config import FIELD_MAX

# A principal is the caller identity handed to us by the execution substrate
# (an account address as a hex string).
Principal = str


@dataclass(frozen=True)
class GroupRecord:
    """
    Persisted per-group state.

    Attributes:
        group_id: Group identifier
        admin: Principal allowed to mutate membership
        member_count: Members added minus members removed
        current_root: Root submitted by the latest mutation
        cursor: Next root-history slot to overwrite
    """

    group_id: int
    admin: Principal
    member_count: int = 0
    current_root: int = 0
    cursor: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroupRecord":
        return cls(
            group_id=int(data["group_id"]),
            admin=str(data["admin"]),
            member_count=int(data.get("member_count", 0)),
            current_root=int(data.get("current_root", 0)),
            cursor=int(data.get("cursor", 0)),
        )


def require_field(value: Any, label: str) -> int:
    """Return ``value`` if it is an unsigned 256-bit integer, else raise."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{label} must be int")
    if value < 0:
        raise ValueError(f"{label} must be non-negative")
    if value > FIELD_MAX:
        raise ValueError(f"{label} must fit in 256 bits")
    return value


def require_principal(value: Any, label: str) -> Principal:
    if not isinstance(value, str) or not value:
        raise TypeError(f"{label} must be a non-empty string")
    return value


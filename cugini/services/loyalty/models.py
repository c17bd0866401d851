"""
Loyalty domain records
======================

Plain dataclasses for rows read from the backend. Rows arrive as dicts from
supabase-py; every record is built through from_row so that legacy column
variants are resolved in one place and nothing downstream branches on them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import TypeAdapter, ValidationError

_DATETIME = TypeAdapter(datetime)


def _int_or_none(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Supabase returns ISO-8601 strings, with fractional seconds of any
    length up to microseconds. Naive values are taken as UTC; anything
    unparseable gives None.
    """
    if not value:
        return None
    try:
        dt = _DATETIME.validate_python(value.strip() if isinstance(value, str) else value)
    except ValidationError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class PointBalance:
    balance: int
    total_earned: Optional[int] = None

    @classmethod
    def from_row(cls, row: Optional[Dict[str, Any]]) -> "PointBalance":
        if not row:
            return cls(balance=0)
        return cls(
            balance=_int_or_none(row.get("balance")) or 0,
            total_earned=_int_or_none(row.get("total_earned")),
        )


@dataclass(frozen=True)
class PointTransaction:
    """
    Signed point delta. Older rows carry `change`, newer ones `points`;
    `amount` is whichever is present, preferring `points`.
    """
    id: Any
    type: str
    amount: int
    reason: Optional[str]
    created_at: Optional[str]
    user_id: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PointTransaction":
        raw = row.get("points")
        if raw is None:
            raw = row.get("change")
        return cls(
            id=row.get("id"),
            type=str(row.get("type") or ""),
            amount=_int_or_none(raw) or 0,
            reason=row.get("reason"),
            created_at=row.get("created_at"),
            user_id=row.get("user_id"),
            email=row.get("email"),
        )

    @property
    def kind(self) -> str:
        return self.type.upper()

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "type": self.type,
            "amount": self.amount,
            "reason": self.reason,
            "created_at": self.created_at,
        }
        if self.user_id is not None or self.email is not None:
            out["user_id"] = self.user_id
            out["email"] = self.email
        return out


@dataclass(frozen=True)
class Reward:
    id: int
    name: str
    points_cost: int
    description: Optional[str] = None
    is_active: bool = True
    image_url: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Reward":
        return cls(
            id=int(row["id"]),
            name=str(row.get("name") or ""),
            points_cost=_int_or_none(row.get("points_cost")) or 0,
            description=row.get("description"),
            # rows without the column count as active
            is_active=row.get("is_active") is not False,
            image_url=row.get("image_url"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "points_cost": self.points_cost,
            "is_active": self.is_active,
            "image_url": self.image_url,
        }


@dataclass(frozen=True)
class EarnCode:
    id: Any
    code: str
    points: int
    is_redeemed: bool
    redeemed_by: Optional[str] = None
    redeemed_at: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "EarnCode":
        return cls(
            id=row.get("id"),
            code=str(row.get("code") or ""),
            points=_int_or_none(row.get("points")) or 0,
            is_redeemed=bool(row.get("is_redeemed") or row.get("is_claimed")),
            redeemed_by=row.get("redeemed_by"),
            redeemed_at=row.get("redeemed_at"),
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "points": self.points,
            "is_redeemed": self.is_redeemed,
            "status": "USADO" if self.is_redeemed else "ACTIVO",
            "redeemed_by": self.redeemed_by,
            "redeemed_at": self.redeemed_at,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class Announcement:
    id: Any
    message: str
    title: Optional[str] = None
    link_url: Optional[str] = None
    is_active: bool = True
    starts_at: Optional[str] = None
    ends_at: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Announcement":
        return cls(
            id=row.get("id"),
            message=str(row.get("message") or ""),
            title=row.get("title"),
            link_url=row.get("link_url"),
            is_active=bool(row.get("is_active")),
            starts_at=row.get("starts_at"),
            ends_at=row.get("ends_at"),
            created_at=row.get("created_at"),
        )

    def in_window(self, now: datetime) -> bool:
        """
        Missing bounds are open; both ends are inclusive. A bound that is
        present but unparseable closes the window.
        """
        start = parse_timestamp(self.starts_at)
        end = parse_timestamp(self.ends_at)
        if (self.starts_at and start is None) or (self.ends_at and end is None):
            return False
        start_ok = start is None or start <= now
        end_ok = end is None or end >= now
        return start_ok and end_ok

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "link_url": self.link_url,
            "is_active": self.is_active,
            "starts_at": self.starts_at,
            "ends_at": self.ends_at,
            "created_at": self.created_at,
        }

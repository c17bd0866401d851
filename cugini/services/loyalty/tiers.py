"""
Tier Resolver
=============

Tiers are unlocked by lifetime points only. The ladder is static and
recomputed from `total_earned` on every read; nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Tier:
    name: str
    min: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "min": self.min}


TIERS: Tuple[Tier, ...] = (
    Tier("Bronce", 0),
    Tier("Plata", 600),
    Tier("Oro", 1000),
    Tier("Diamante", 1500),
)


def _ascending(tiers: Sequence[Tier]) -> Sequence[Tier]:
    if not tiers:
        raise ValueError("tier ladder is empty")
    return sorted(tiers, key=lambda t: t.min)


def resolve_tier(total_earned: int, tiers: Sequence[Tier] = TIERS) -> Tier:
    """
    Highest tier whose minimum does not exceed total_earned.
    Anything below the first minimum (including negatives) stays on the lowest tier.
    """
    ladder = _ascending(tiers)
    current = ladder[0]
    for t in ladder:
        if total_earned >= t.min:
            current = t
    return current


def next_tier(total_earned: int, tiers: Sequence[Tier] = TIERS) -> Optional[Tier]:
    for t in _ascending(tiers):
        if t.min > total_earned:
            return t
    return None

"""
Progress Calculator
===================

Maps a progress base (net balance or lifetime points) onto a ladder of
reward goals. Percentages are local to the segment the base sits in, so
reaching a goal restarts the bar at 0% for the next one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

GOALS: Tuple[int, ...] = (300, 600, 1000, 1500, 2000, 3000)

# span of the virtual goal synthesized past the last real one
OPEN_ENDED_SPAN = 1000


@dataclass(frozen=True)
class Progress:
    pct: int
    goal: int
    remain: int

    def to_dict(self) -> Dict[str, Any]:
        return {"pct": self.pct, "goal": self.goal, "remain": self.remain}


def _round_half_up(value: float) -> int:
    # x.5 goes up, including for negatives (-0.5 -> 0)
    return int(math.floor(value + 0.5))


def compute_progress(base: int, goals: Sequence[int] = GOALS) -> Progress:
    ordered = sorted(goals)
    if not ordered:
        return Progress(pct=0, goal=0, remain=0)

    first = ordered[0]
    if base < first:
        return Progress(
            pct=_round_half_up(base / first * 100) if first > 0 else 0,
            goal=first,
            remain=first - base,
        )

    for prev, goal in zip(ordered, ordered[1:]):
        if base < goal:
            span = goal - prev
            return Progress(
                pct=_round_half_up((base - prev) / span * 100),
                goal=goal,
                remain=goal - base,
            )

    last = ordered[-1]
    virtual_goal = last + OPEN_ENDED_SPAN
    pct = _round_half_up((base - last) / OPEN_ENDED_SPAN * 100)
    return Progress(pct=min(100, pct), goal=virtual_goal, remain=virtual_goal - base)

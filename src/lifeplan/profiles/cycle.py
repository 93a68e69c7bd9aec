"""Menstrual cycle phase lookup."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Optional

from lifeplan.tracking.models import Profile


@dataclass(frozen=True)
class CyclePhase:
    name: str
    first_day: int
    last_day: int
    tdee_adjust: int
    notes: str


# Day ranges for a 28-day cycle; scaled for other lengths
CYCLE_PHASES = MappingProxyType({
    "menstrual": CyclePhase("menstrual", 1, 5, 0, "Lower energy is normal, lighter workouts OK"),
    "follicular": CyclePhase("follicular", 6, 13, 0, "Best phase for intense training and PRs"),
    "ovulation": CyclePhase("ovulation", 14, 16, 50, "Peak performance, slightly higher metabolism"),
    "luteal": CyclePhase("luteal", 17, 28, 100, "Higher hunger is normal, water retention expected"),
})


def cycle_day(last_period: date, on: date, cycle_length: int = 28) -> int:
    """Day within the current cycle, 1-based."""
    elapsed = (on - last_period).days
    return (elapsed % cycle_length) + 1


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def current_phase(profile: Profile, on: date) -> Optional[CyclePhase]:
    """Return the cycle phase for ``on``, or None when not tracked."""
    if not profile.tracks_cycle or profile.sex != "female" or profile.last_period_date is None:
        return None

    length = profile.cycle_length or 28
    day = cycle_day(profile.last_period_date, on, length)
    ratio = length / 28

    for phase in CYCLE_PHASES.values():
        if _round_half_up(phase.first_day * ratio) <= day <= _round_half_up(phase.last_day * ratio):
            return phase

    return CYCLE_PHASES["luteal"]

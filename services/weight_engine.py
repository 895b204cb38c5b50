"""Weight Engine - recall weighting for revisit scheduling.

Maps a problem's state and the current time to a :class:`WeightInfo`.
Pure: no database access, no clock reads. The same ``(problem, now, tz)``
always yields the same result.

The model:

- Recall decays along an exponential saturation curve
  ``decay = 1 - exp(-ln2 * days / half_life)``: half of the "freshness" is
  gone after ``half_life`` days, and decay approaches 1 as days grow.
- Harder problems have a shorter half-life (they are forgotten faster) and a
  slightly higher difficulty factor.
- Every completed revisit shrinks the weight with diminishing returns
  ``1 / (1 + 0.3 * times_revisited)``; the problem never becomes unschedulable.
- After a revisit a problem cools down for ``cooldown(times_revisited)`` days,
  following the classic growing spaced-repetition intervals.
"""

import math
from dataclasses import dataclass, asdict
from datetime import datetime, timezone, tzinfo
from typing import Optional

from models.problem import (
    STATUS_ACTIVE,
    DIFFICULTY_EASY,
    DIFFICULTY_MEDIUM,
    DIFFICULTY_HARD,
)
from services.clock import as_utc, calendar_day

# Priority bands
PRIORITY_HIGH = 'high'
PRIORITY_MEDIUM = 'medium'
PRIORITY_LOW = 'low'

# Lower bounds (inclusive) of the high and medium bands
HIGH_PRIORITY_THRESHOLD = 6.0
MEDIUM_PRIORITY_THRESHOLD = 3.0

# Weight of a fully decayed, never revisited, medium problem
MAX_WEIGHT = 10.0

BASE_HALF_LIFE_DAYS = 7.0

DIFFICULTY_HALF_LIFE = {
    DIFFICULTY_EASY: 1.25,
    DIFFICULTY_MEDIUM: 1.0,
    DIFFICULTY_HARD: 0.75,
}

DIFFICULTY_FACTOR = {
    DIFFICULTY_EASY: 0.9,
    DIFFICULTY_MEDIUM: 1.0,
    DIFFICULTY_HARD: 1.15,
}

REPETITION_PENALTY = 0.3

# Minimum days between revisits, indexed by times_revisited (capped at the last)
COOLDOWN_DAYS = (1, 2, 4, 7, 14, 30)


@dataclass(frozen=True)
class WeightInfo:
    """Derived scheduling metadata for one problem; never persisted"""
    problem_id: str
    weight: float
    priority: str
    revisit_decay: float
    days_since_last_revisit: Optional[int]
    days_since_added: int
    times_revisited: int
    cooldown_days: int
    is_eligible: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        data['weight'] = round(self.weight, 2)
        data['revisit_decay'] = round(self.revisit_decay, 2)
        return data


def cooldown(times_revisited: int) -> int:
    """Minimum days since the last revisit before the problem is eligible again"""
    index = min(max(times_revisited or 0, 0), len(COOLDOWN_DAYS) - 1)
    return COOLDOWN_DAYS[index]


def half_life_days(difficulty: Optional[str]) -> float:
    return BASE_HALF_LIFE_DAYS * DIFFICULTY_HALF_LIFE.get(difficulty, 1.0)


def decay(days: float, difficulty: Optional[str] = None) -> float:
    """Fraction of recall lost after ``days`` without a revisit, in [0, 1]"""
    if days <= 0:
        return 0.0
    rate = math.log(2) / half_life_days(difficulty)
    # exp underflows to 0.0 for very large inputs, so this saturates at 1.0
    return min(1.0, max(0.0, 1.0 - math.exp(-rate * days)))


def calculate_weight(revisit_decay: float, times_revisited: int, difficulty: Optional[str] = None) -> float:
    """Urgency of a revisit; finite and never negative"""
    repetition_factor = 1.0 / (1.0 + REPETITION_PENALTY * max(times_revisited or 0, 0))
    difficulty_factor = DIFFICULTY_FACTOR.get(difficulty, 1.0)
    return MAX_WEIGHT * revisit_decay * repetition_factor * difficulty_factor


def classify_priority(weight: float) -> str:
    if weight >= HIGH_PRIORITY_THRESHOLD:
        return PRIORITY_HIGH
    if weight >= MEDIUM_PRIORITY_THRESHOLD:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole elapsed days from ``earlier`` to ``later``, never negative"""
    elapsed = as_utc(later) - as_utc(earlier)
    return max(elapsed.days, 0)


def calendar_days_between(earlier: datetime, later: datetime, tz: tzinfo = timezone.utc) -> int:
    """Number of calendar-day boundaries crossed in ``tz``, never negative"""
    delta = calendar_day(later, tz) - calendar_day(earlier, tz)
    return max(delta.days, 0)


def score(problem, now: datetime, tz: tzinfo = timezone.utc) -> WeightInfo:
    """
    Compute the WeightInfo of a problem at ``now``.

    Args:
        problem: Any object with id, status, difficulty, created_at,
            last_revisited_at and times_revisited attributes
        now: Current time (naive values are read as UTC)
        tz: Timezone that defines calendar days

    Returns:
        WeightInfo for the problem

    Example:
        >>> info = score(problem, now)
        >>> info.priority
        'high'
    """
    times_revisited = problem.times_revisited or 0
    days_since_added = days_between(problem.created_at, now)

    if problem.last_revisited_at is None:
        days_since_last_revisit = None
        # An unrevisited problem has been decaying since it was added
        elapsed = days_since_added
    else:
        days_since_last_revisit = calendar_days_between(problem.last_revisited_at, now, tz)
        elapsed = days_since_last_revisit

    revisit_decay = decay(elapsed, problem.difficulty)
    weight = calculate_weight(revisit_decay, times_revisited, problem.difficulty)
    required_gap = cooldown(times_revisited)

    is_eligible = problem.status == STATUS_ACTIVE and (
        days_since_last_revisit is None or days_since_last_revisit >= required_gap
    )

    return WeightInfo(
        problem_id=str(problem.id),
        weight=weight,
        priority=classify_priority(weight),
        revisit_decay=revisit_decay,
        days_since_last_revisit=days_since_last_revisit,
        days_since_added=days_since_added,
        times_revisited=times_revisited,
        cooldown_days=required_gap,
        is_eligible=is_eligible
    )

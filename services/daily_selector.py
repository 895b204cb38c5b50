"""
Daily Selector - builds "Today's Focus" for a user.

The selection is a deterministic ranking, not a random draw: for a fixed
problem set and ``now`` the same problems come back in the same order.

Rules:
- Only active problems are considered.
- Problems already revisited today always stay in the list, marked complete.
- The remaining slots (daily_problems minus completed, never below zero) are
  filled with eligible, not yet revisited problems ranked by weight desc, then
  older additions first, then id.
- With skip_weekends on, no new problems are nominated on Saturday/Sunday.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import List

from models.problem import Problem
from models.user import User, DEFAULT_DAILY_PROBLEMS
from models import db
from services.clock import as_utc, calendar_day, is_weekend
from services.errors import NotFoundError
from services.problem_service import get_active_problems, problem_ids_revisited_on
from services.weight_engine import WeightInfo, score

logger = logging.getLogger(__name__)


@dataclass
class FocusItem:
    problem: Problem
    weight: WeightInfo
    revisited_today: bool


@dataclass
class TodaysFocus:
    day: date
    items: List[FocusItem] = field(default_factory=list)
    rest_day: bool = False

    @property
    def total_focus(self) -> int:
        return len(self.items)

    @property
    def completed(self) -> int:
        return sum(1 for item in self.items if item.revisited_today)

    @property
    def remaining(self) -> int:
        return self.total_focus - self.completed

    def summary(self) -> dict:
        return {
            'total_focus': self.total_focus,
            'completed': self.completed,
            'remaining': self.remaining
        }


def rank_key(item: FocusItem):
    """Weight desc, then older additions first, then id for a total order"""
    return (-item.weight.weight, -item.weight.days_since_added, as_utc(item.problem.created_at), str(item.problem.id))


def build_focus(
    problems: List[Problem],
    revisited_ids: set,
    now: datetime,
    daily_problems: int = DEFAULT_DAILY_PROBLEMS,
    skip_weekends: bool = False,
    tz: tzinfo = timezone.utc
) -> TodaysFocus:
    """
    Select and order the focus set from already loaded data.

    Args:
        problems: The user's active problems
        revisited_ids: IDs of problems with a revisit entry for today
        now: Current time
        daily_problems: Target size of the focus set
        skip_weekends: Nominate nothing new on Saturday/Sunday
        tz: Timezone that defines the calendar day

    Returns:
        TodaysFocus with items in display order
    """
    today = calendar_day(now, tz)
    rest_day = bool(skip_weekends) and is_weekend(today)

    completed = []
    pending = []
    for problem in problems:
        info = score(problem, now, tz)
        if problem.id in revisited_ids:
            completed.append(FocusItem(problem=problem, weight=info, revisited_today=True))
        elif info.is_eligible:
            pending.append(FocusItem(problem=problem, weight=info, revisited_today=False))

    open_slots = 0 if rest_day else max((daily_problems or DEFAULT_DAILY_PROBLEMS) - len(completed), 0)
    pending.sort(key=rank_key)

    selected = completed + pending[:open_slots]
    selected.sort(key=rank_key)

    logger.debug(
        f"Focus for {today}: active={len(problems)}, eligible={len(pending)}, "
        f"completed={len(completed)}, open_slots={open_slots}, rest_day={rest_day}"
    )

    return TodaysFocus(day=today, items=selected, rest_day=rest_day)


def select_today(user_id: int, now: datetime, tz: tzinfo = timezone.utc) -> TodaysFocus:
    """
    Build today's focus for a user. Read-only.

    Args:
        user_id: The ID of the authenticated user
        now: Current time from the injected clock
        tz: Timezone that defines the calendar day

    Returns:
        TodaysFocus (empty with a zero summary when the user has no active problems)

    Raises:
        NotFoundError: Unknown user
    """
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')

    problems = get_active_problems(user_id)
    if not problems:
        return TodaysFocus(day=calendar_day(now, tz))

    revisited_ids = problem_ids_revisited_on(user_id, calendar_day(now, tz))

    return build_focus(
        problems,
        revisited_ids,
        now,
        daily_problems=user.daily_problems,
        skip_weekends=user.skip_weekends,
        tz=tz
    )

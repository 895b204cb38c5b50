"""Revisit Service - records revisits exactly once per problem per calendar day.

This is the only writer of ``times_revisited`` and ``last_revisited_at``.
The unique constraint on ``(problem_id, revisit_day)`` arbitrates concurrent
requests: the ledger insert and the counter update share one transaction, and
a request that loses the race gets an IntegrityError, rolls back, and surfaces
:class:`AlreadyRevisitedToday`. There is no separate "check, then write" step.
"""
import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.problem import Problem, STATUS_ACTIVE
from models.revisit_entry import RevisitEntry
from services.clock import calendar_day, to_storage
from services.errors import AlreadyRevisitedToday, NotFoundError, UnavailableError, ValidationError
from services.problem_service import format_validation_error
from services.request_models import RevisitRequest

logger = logging.getLogger(__name__)


def parse_revisit_request(data: Optional[dict]) -> Optional[str]:
    """Extract validated notes from an optional revisit body"""
    try:
        payload = RevisitRequest.model_validate(data or {})
    except PydanticValidationError as e:
        raise ValidationError(format_validation_error(e))
    return payload.notes


def record_revisit(
    problem_id: str,
    user_id: int,
    now: datetime,
    notes: Optional[str] = None,
    tz: tzinfo = timezone.utc
) -> dict:
    """
    Record a revisit of a problem for the calendar day containing ``now``.

    Atomically:
    1. inserts a RevisitEntry for (problem_id, day)
    2. increments problems.times_revisited
    3. sets problems.last_revisited_at = now

    Args:
        problem_id: The ID of the problem
        user_id: The ID of the authenticated owner
        now: Time of the revisit from the injected clock
        notes: Optional free-text notes stored on the entry
        tz: Timezone that defines the calendar day

    Returns:
        dict: {
            'created': True,
            'entry': RevisitEntry,
            'problem': Problem (refreshed)
        }

    Raises:
        NotFoundError: Missing, foreign or retired problem
        AlreadyRevisitedToday: An entry for this calendar day already exists
        UnavailableError: The store failed; nothing was written
    """
    problem = Problem.query.filter_by(id=problem_id, user_id=user_id).first()
    if not problem or problem.status != STATUS_ACTIVE:
        logger.warning(
            f"Revisit rejected, problem not found or not active: "
            f"problem_id={problem_id}, user_id={user_id}"
        )
        raise NotFoundError()

    day = calendar_day(now, tz)
    stored_now = to_storage(now)

    entry = RevisitEntry(
        problem_id=problem.id,
        revisited_at=stored_now,
        revisit_day=day,
        notes=notes
    )

    try:
        db.session.add(entry)
        db.session.flush()

        # Single UPDATE expression so concurrent writers cannot lose increments
        Problem.query.filter_by(id=problem.id).update(
            {
                Problem.times_revisited: Problem.times_revisited + 1,
                Problem.last_revisited_at: stored_now,
            },
            synchronize_session=False
        )
        db.session.commit()

    except IntegrityError:
        db.session.rollback()
        logger.warning(
            f"Duplicate revisit for today: problem_id={problem_id}, user_id={user_id}, day={day}"
        )
        raise AlreadyRevisitedToday()

    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(
            f"Failed to record revisit: problem_id={problem_id}, user_id={user_id}: {str(e)}",
            exc_info=True
        )
        raise UnavailableError()

    db.session.refresh(problem)

    logger.info(
        f"Recorded revisit: problem_id={problem_id}, user_id={user_id}, day={day}, "
        f"times_revisited={problem.times_revisited}"
    )

    return {
        'created': True,
        'entry': entry,
        'problem': problem
    }

"""Problem Service - owner-scoped problem store access and lifecycle (active -> retired)"""
import logging
from datetime import date, datetime
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.problem import Problem, STATUS_ACTIVE, STATUS_RETIRED, VALID_STATUSES, DEFAULT_SOURCE
from models.revisit_entry import RevisitEntry
from services.clock import to_storage
from services.errors import NotFoundError, UnavailableError, ValidationError
from services.request_models import ProblemCreate, ProblemUpdate

logger = logging.getLogger(__name__)

# Fields a user may edit; counters and status have their own writers
EDITABLE_FIELDS = ('title', 'link', 'difficulty', 'source', 'topic', 'notes', 'tags')


def format_validation_error(error: PydanticValidationError) -> str:
    """Flatten a pydantic error into a single readable message"""
    messages = []
    for detail in error.errors():
        location = '.'.join(str(part) for part in detail.get('loc', ())) or 'body'
        messages.append(f"{location}: {detail.get('msg')}")
    return '; '.join(messages)


def get_problem(problem_id: str, user_id: int) -> Problem:
    """
    Get a problem owned by a user.

    Raises:
        NotFoundError: If the problem does not exist or belongs to someone else
    """
    problem = Problem.query.filter_by(id=problem_id, user_id=user_id).first()
    if not problem:
        logger.warning(f"Problem lookup failed: problem_id={problem_id}, user_id={user_id}")
        raise NotFoundError()
    return problem


def list_problems(user_id: int, status: Optional[str] = None) -> List[Problem]:
    """
    List a user's problems, newest first.

    Args:
        user_id: The ID of the owner
        status: 'active', 'retired' or None for all

    Raises:
        ValidationError: If status is not a known value
    """
    query = Problem.query.filter_by(user_id=user_id)
    if status:
        if status not in VALID_STATUSES:
            raise ValidationError(f'Invalid status filter. Must be one of: {VALID_STATUSES}')
        query = query.filter_by(status=status)
    return query.order_by(Problem.created_at.desc(), Problem.id).all()


def get_active_problems(user_id: int) -> List[Problem]:
    """All schedulable problems of a user, oldest first"""
    return (Problem.query
            .filter_by(user_id=user_id, status=STATUS_ACTIVE)
            .order_by(Problem.created_at, Problem.id)
            .all())


def create_problem(user_id: int, data: dict, now: datetime) -> Problem:
    """
    Create an active problem for a user.

    Args:
        user_id: The ID of the owner
        data: Raw request body
        now: Creation time from the injected clock

    Returns:
        The newly created Problem

    Raises:
        ValidationError: If the body is malformed
    """
    try:
        payload = ProblemCreate.model_validate(data or {})
    except PydanticValidationError as e:
        raise ValidationError(format_validation_error(e))

    problem = Problem(
        user_id=user_id,
        title=payload.title,
        link=payload.link,
        difficulty=payload.difficulty,
        source=payload.source or DEFAULT_SOURCE,
        topic=payload.topic,
        notes=payload.notes,
        tags=payload.tags,
        status=STATUS_ACTIVE,
        times_revisited=0,
        last_revisited_at=None,
        created_at=to_storage(now)
    )

    try:
        db.session.add(problem)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to create problem for user_id={user_id}: {str(e)}", exc_info=True)
        raise UnavailableError()

    logger.info(f"Created problem: problem_id={problem.id}, user_id={user_id}, title={problem.title!r}")
    return problem


def update_problem(problem_id: str, user_id: int, data: dict) -> Problem:
    """
    Update the editable fields of a problem.

    Only fields present in the body change. title and link cannot be cleared.

    Raises:
        ValidationError: If the body is malformed
        NotFoundError: If the problem is missing or foreign
    """
    try:
        payload = ProblemUpdate.model_validate(data or {})
    except PydanticValidationError as e:
        raise ValidationError(format_validation_error(e))

    changes = payload.model_dump(exclude_unset=True)
    for required in ('title', 'link'):
        if required in changes and changes[required] is None:
            raise ValidationError(f'{required} cannot be empty')

    problem = get_problem(problem_id, user_id)

    try:
        for field in EDITABLE_FIELDS:
            if field in changes:
                setattr(problem, field, changes[field])
        db.session.commit()
    except ValueError as e:
        db.session.rollback()
        raise ValidationError(str(e))
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to update problem_id={problem_id}: {str(e)}", exc_info=True)
        raise UnavailableError()

    logger.info(f"Updated problem_id={problem_id} fields={sorted(changes)}")
    return problem


def retire_problem(problem_id: str, user_id: int) -> Problem:
    """
    Retire a problem so it is never scheduled again.

    Retirement is terminal; history is kept for display. Retiring an already
    retired problem is a no-op.

    Raises:
        NotFoundError: If the problem is missing or foreign
    """
    problem = get_problem(problem_id, user_id)

    if problem.status == STATUS_RETIRED:
        logger.debug(f"Problem already retired: problem_id={problem_id}")
        return problem

    try:
        problem.status = STATUS_RETIRED
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to retire problem_id={problem_id}: {str(e)}", exc_info=True)
        raise UnavailableError()

    logger.info(f"Retired problem: problem_id={problem_id}, user_id={user_id}")
    return problem


def delete_problem(problem_id: str, user_id: int) -> None:
    """
    Permanently delete a problem together with its revisit history.

    Raises:
        NotFoundError: If the problem is missing or foreign
    """
    problem = get_problem(problem_id, user_id)

    try:
        deleted_entries = RevisitEntry.query.filter_by(problem_id=problem.id).delete()
        db.session.delete(problem)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to delete problem_id={problem_id}: {str(e)}", exc_info=True)
        raise UnavailableError()

    logger.info(
        f"Deleted problem: problem_id={problem_id}, user_id={user_id}, "
        f"revisit_entries={deleted_entries}"
    )


def get_revisit_history(problem_id: str) -> List[RevisitEntry]:
    """Revisit entries of a problem, newest first"""
    return (RevisitEntry.query
            .filter_by(problem_id=problem_id)
            .order_by(RevisitEntry.revisited_at.desc())
            .all())


def revisited_on(problem_id: str, day: date) -> bool:
    """Whether the problem has a ledger entry for the given calendar day"""
    return RevisitEntry.query.filter_by(problem_id=problem_id, revisit_day=day).first() is not None


def problem_ids_revisited_on(user_id: int, day: date) -> set:
    """IDs of a user's problems with a ledger entry for the given calendar day"""
    rows = (db.session.query(RevisitEntry.problem_id)
            .join(Problem, Problem.id == RevisitEntry.problem_id)
            .filter(Problem.user_id == user_id, RevisitEntry.revisit_day == day)
            .all())
    return {row[0] for row in rows}

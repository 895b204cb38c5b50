"""Settings Service - reads and validates per-user scheduling preferences"""
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.user import User
from services.errors import NotFoundError, UnavailableError, ValidationError
from services.problem_service import format_validation_error
from services.request_models import SettingsUpdate

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ('daily_problems', 'skip_weekends', 'email_time', 'ai_encouragement')


def _get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')
    return user


def serialize_settings(user: User) -> dict:
    return {field: getattr(user, field) for field in SETTINGS_FIELDS}


def get_settings(user_id: int) -> dict:
    """
    Get a user's settings.

    Returns:
        dict: {
            'daily_problems': int,
            'skip_weekends': bool,
            'email_time': str,
            'ai_encouragement': bool
        }
    """
    return serialize_settings(_get_user(user_id))


def update_settings(user_id: int, data: dict) -> dict:
    """
    Validate and store a full or partial settings update.

    Raises:
        ValidationError: daily_problems outside 1-5, bad email_time, wrong types,
            or an empty body
        NotFoundError: Unknown user
    """
    if not data:
        raise ValidationError('Missing request body')

    try:
        payload = SettingsUpdate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(format_validation_error(e))

    changes = {key: value for key, value in payload.model_dump(exclude_unset=True).items()
               if value is not None}
    if not changes:
        raise ValidationError('No valid settings provided')

    user = _get_user(user_id)

    try:
        for field, value in changes.items():
            setattr(user, field, value)
        db.session.commit()
    except ValueError as e:
        db.session.rollback()
        raise ValidationError(str(e))
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to update settings for user_id={user_id}: {str(e)}", exc_info=True)
        raise UnavailableError()

    logger.info(f"Updated settings for user_id={user_id}: {changes}")
    return serialize_settings(user)

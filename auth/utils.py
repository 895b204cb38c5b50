from models import db
from models.user import User
from flask import current_app
from flask_login import current_user
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


def get_or_create_user(google_id, email, name):
    """
    Get or create a user from a verified Google identity.

    New users start with the configured default focus size and weekend
    scheduling on.

    Args:
        google_id: Google OAuth identifier
        email: User's email from Google
        name: User's name from Google

    Returns:
        User object or None if database operation fails
    """
    try:
        user = User.query.filter_by(google_id=google_id).first()

        if user:
            user.last_active_at = datetime.utcnow()
            # Keep the stored email in sync with the identity provider
            if email and email != user.email:
                logger.info(f'Synced email for user {user.id}: {user.email} -> {email}')
                user.email = email
            db.session.commit()
            return user

        user = User(
            google_id=google_id,
            email=email,
            name=name,
            daily_problems=current_app.config.get('DEFAULT_DAILY_PROBLEMS', 3),
            skip_weekends=False,
            last_active_at=datetime.utcnow()
        )

        db.session.add(user)
        db.session.commit()

        logger.info(f'Created new user: {email}')
        return user

    except Exception as e:
        db.session.rollback()
        logger.error(f'Failed to create/update user {email}: {str(e)}')
        return None


def get_current_user():
    """
    Get the current authenticated user.

    Returns:
        User object or None if not authenticated
    """
    if current_user.is_authenticated:
        return current_user
    return None

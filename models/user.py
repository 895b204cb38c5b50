from models import db
from datetime import datetime
from flask_login import UserMixin
from sqlalchemy.orm import validates
import re

DAILY_PROBLEMS_MIN = 1
DAILY_PROBLEMS_MAX = 5
DEFAULT_DAILY_PROBLEMS = 3


class User(UserMixin, db.Model):
    """User model - stores identity and revisit scheduling preferences"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)

    # Google OAuth identifier
    google_id = db.Column(db.String, unique=True, nullable=False)

    email = db.Column(db.String, nullable=False, index=True)
    name = db.Column(db.String)

    # Size of the "Today's Focus" set
    daily_problems = db.Column(db.Integer, nullable=False, default=DEFAULT_DAILY_PROBLEMS)

    # No new nominations on Saturday/Sunday
    skip_weekends = db.Column(db.Boolean, nullable=False, default=False)

    # Stored for the reminder e-mail, not used by the scheduler
    email_time = db.Column(db.String(5), nullable=False, default='09:00')
    ai_encouragement = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_active_at = db.Column(db.DateTime)

    # Relationships
    problems = db.relationship('Problem', back_populates='user', lazy='dynamic')

    @validates('email')
    def validate_email(self, key, email):
        if not email:
            raise ValueError('Email is required')
        # Basic email format validation
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(pattern, email):
            raise ValueError(f'Invalid email format: {email}')
        return email

    @validates('daily_problems')
    def validate_daily_problems(self, key, value):
        if value is None:
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError('daily_problems must be an integer')
        if value < DAILY_PROBLEMS_MIN or value > DAILY_PROBLEMS_MAX:
            raise ValueError(
                f'daily_problems must be between {DAILY_PROBLEMS_MIN} and {DAILY_PROBLEMS_MAX}'
            )
        return value

    def __repr__(self):
        return f'<User {self.email}>'

from models import db
from datetime import datetime
from sqlalchemy.orm import validates
import uuid

STATUS_ACTIVE = 'active'
STATUS_RETIRED = 'retired'
VALID_STATUSES = [STATUS_ACTIVE, STATUS_RETIRED]

DIFFICULTY_EASY = 'easy'
DIFFICULTY_MEDIUM = 'medium'
DIFFICULTY_HARD = 'hard'
VALID_DIFFICULTIES = [DIFFICULTY_EASY, DIFFICULTY_MEDIUM, DIFFICULTY_HARD]

DEFAULT_SOURCE = 'LeetCode'


class Problem(db.Model):
    """Problem model - a practice problem tracked for spaced revisits"""
    __tablename__ = 'problems'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    title = db.Column(db.String, nullable=False)
    link = db.Column(db.String, nullable=False)

    # easy, medium, hard (optional)
    difficulty = db.Column(db.String(10))
    source = db.Column(db.String, default=DEFAULT_SOURCE)
    topic = db.Column(db.String)
    notes = db.Column(db.Text)

    # e.g. ["graphs", "bfs"]
    tags = db.Column(db.JSON)

    # active, retired
    status = db.Column(db.String(10), nullable=False, default=STATUS_ACTIVE)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Written only by the revisit recorder
    times_revisited = db.Column(db.Integer, nullable=False, default=0)
    last_revisited_at = db.Column(db.DateTime)

    # Relationships
    user = db.relationship('User', back_populates='problems')
    revisits = db.relationship(
        'RevisitEntry',
        back_populates='problem',
        lazy='dynamic',
        passive_deletes=True
    )

    __table_args__ = (
        db.Index('idx_problem_user_status', 'user_id', 'status'),
    )

    @validates('title', 'link')
    def validate_required_text(self, key, value):
        if not value or not value.strip():
            raise ValueError(f'Problem {key} cannot be empty or whitespace')
        return value.strip()

    @validates('difficulty')
    def validate_difficulty(self, key, difficulty):
        if difficulty in (None, ''):
            return None
        difficulty = difficulty.lower()
        if difficulty not in VALID_DIFFICULTIES:
            raise ValueError(f'Invalid difficulty: {difficulty}. Must be one of {VALID_DIFFICULTIES}')
        return difficulty

    @validates('status')
    def validate_status(self, key, status):
        if status not in VALID_STATUSES:
            raise ValueError(f'Invalid status: {status}. Must be one of {VALID_STATUSES}')
        return status

    @property
    def is_active(self):
        return self.status == STATUS_ACTIVE

    def __repr__(self):
        return f'<Problem {self.id} {self.title!r} status={self.status}>'

from models import db
import uuid


class RevisitEntry(db.Model):
    """RevisitEntry model - append-only ledger of completed revisits"""
    __tablename__ = 'revisit_entries'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    problem_id = db.Column(
        db.String(36),
        db.ForeignKey('problems.id', ondelete='CASCADE'),
        nullable=False
    )

    revisited_at = db.Column(db.DateTime, nullable=False)

    # Calendar day of revisited_at in the scheduler timezone
    revisit_day = db.Column(db.Date, nullable=False)

    notes = db.Column(db.Text)

    # Relationships
    problem = db.relationship('Problem', back_populates='revisits')

    # At most one revisit per problem per calendar day
    __table_args__ = (
        db.UniqueConstraint('problem_id', 'revisit_day', name='uq_revisit_problem_day'),
        db.Index('idx_revisit_day', 'revisit_day'),
    )

    def __repr__(self):
        return f'<RevisitEntry problem_id={self.problem_id} day={self.revisit_day}>'

"""Server-held training runs."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.types import JSON

from ..db_instance import db


class TrainingSessionRecord(db.Model):
    """
    One training run of a user. The state machine value lives in ``state``;
    the browser only carries ``session_id``.
    """

    __tablename__ = 'training_sessions'

    STATUS_ACTIVE = 'active'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'

    session_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    status = db.Column(db.String(20), default=STATUS_ACTIVE, nullable=False, index=True)
    state = db.Column(JSON, nullable=False)

    start_time = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    last_activity = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    end_time = db.Column(db.DateTime(timezone=True))

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def close(self, status: str) -> None:
        self.status = status
        self.end_time = datetime.now(timezone.utc)

"""Per-user progress on words and cards."""

from __future__ import annotations

from ..db_instance import db


class Progress(db.Model):
    """Cumulative drill results of a user on a word."""

    __tablename__ = 'progress'

    MIN_STRENGTH = 0
    MAX_STRENGTH = 100

    progress_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    word_id = db.Column(db.Integer, db.ForeignKey('words.word_id'), nullable=False, index=True)
    strength = db.Column(db.Integer, default=0, nullable=False)
    success_count = db.Column(db.Integer, default=0, nullable=False)
    fail_count = db.Column(db.Integer, default=0, nullable=False)
    last_seen = db.Column(db.DateTime(timezone=True), nullable=True)

    word = db.relationship('Word', backref=db.backref('progress_records', lazy='dynamic'), lazy=True)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'word_id', name='_user_word_progress_uc'),
        db.CheckConstraint('strength >= 0 AND strength <= 100', name='ck_progress_strength_bounds'),
    )

    def to_dict(self) -> dict[str, object]:
        return {
            'word_id': self.word_id,
            'strength': self.strength,
            'success_count': self.success_count,
            'fail_count': self.fail_count,
            'last_seen': self.last_seen.isoformat() if self.last_seen else None,
        }


class CardProgress(db.Model):
    """Cumulative drill results of a user on a card. Cards carry no strength."""

    __tablename__ = 'card_progress'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    card_id = db.Column(db.Integer, db.ForeignKey('cards.card_id'), nullable=False, index=True)
    success_count = db.Column(db.Integer, default=0, nullable=False)
    fail_count = db.Column(db.Integer, default=0, nullable=False)
    last_seen = db.Column(db.DateTime(timezone=True), nullable=True)

    __table_args__ = (db.UniqueConstraint('user_id', 'card_id', name='_user_card_progress_uc'),)

    def to_dict(self) -> dict[str, object]:
        return {
            'card_id': self.card_id,
            'success_count': self.success_count,
            'fail_count': self.fail_count,
            'last_seen': self.last_seen.isoformat() if self.last_seen else None,
        }

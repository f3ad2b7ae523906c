"""Per-user visibility overrides on global content.

A row exists only when a user has forced a global entity on or off; the absence
of a row means the entity inherits its global ``active`` flag.
"""

from __future__ import annotations

import enum

from sqlalchemy.orm import declared_attr

from ..db_instance import db


class OverrideState(str, enum.Enum):
    """Tri-state of a user's view on a global entity."""

    INHERIT = 'inherit'
    FORCE_ON = 'force_on'
    FORCE_OFF = 'force_off'

    @classmethod
    def from_active(cls, active: bool | None) -> 'OverrideState':
        if active is None:
            return cls.INHERIT
        return cls.FORCE_ON if active else cls.FORCE_OFF


class OverrideMixin:
    """Columns shared by every override table."""

    id = db.Column(db.Integer, primary_key=True)
    active = db.Column(db.Boolean, nullable=False)

    @declared_attr
    def user_id(cls):
        return db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)

    @property
    def state(self) -> OverrideState:
        return OverrideState.from_active(self.active)


class WordOverride(OverrideMixin, db.Model):
    __tablename__ = 'user_word_overrides'

    word_id = db.Column(db.Integer, db.ForeignKey('words.word_id'), nullable=False, index=True)

    __table_args__ = (db.UniqueConstraint('user_id', 'word_id', name='_user_word_override_uc'),)


class ThemeOverride(OverrideMixin, db.Model):
    __tablename__ = 'user_theme_overrides'

    theme_id = db.Column(db.Integer, db.ForeignKey('themes.theme_id'), nullable=False, index=True)

    __table_args__ = (db.UniqueConstraint('user_id', 'theme_id', name='_user_theme_override_uc'),)


class SetOverride(OverrideMixin, db.Model):
    __tablename__ = 'user_set_overrides'

    set_id = db.Column(db.Integer, db.ForeignKey('card_sets.set_id'), nullable=False, index=True)

    __table_args__ = (db.UniqueConstraint('user_id', 'set_id', name='_user_set_override_uc'),)


class CardOverride(OverrideMixin, db.Model):
    __tablename__ = 'user_card_overrides'

    card_id = db.Column(db.Integer, db.ForeignKey('cards.card_id'), nullable=False, index=True)

    __table_args__ = (db.UniqueConstraint('user_id', 'card_id', name='_user_card_override_uc'),)

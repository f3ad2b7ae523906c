"""Vocabulary content models: themes, levels, words, card sets and cards.

Rows with ``user_id`` set to ``None`` are global content shared by every user and
edited by admins; rows with an owner are private to that user.
"""

from __future__ import annotations

from sqlalchemy.sql import func

from ..db_instance import db


class OwnedContentMixin:
    """Helpers shared by content rows that may be global or owned."""

    @property
    def owner_id(self):
        return self.user_id

    @property
    def is_global(self) -> bool:
        return self.owner_id is None

    def is_owned_by(self, user_id: int) -> bool:
        return self.owner_id is not None and self.owner_id == user_id


class Theme(OwnedContentMixin, db.Model):
    """Named grouping of words, optionally nested under a parent theme."""

    __tablename__ = 'themes'

    theme_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    parent_id = db.Column(db.Integer, db.ForeignKey('themes.theme_id'), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=True, index=True)
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    parent = db.relationship('Theme', remote_side=[theme_id], backref='children', lazy=True)
    levels = db.relationship(
        'Level',
        backref='theme',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='Level.level_order',
    )

    def to_dict(self) -> dict[str, object]:
        return {
            'theme_id': self.theme_id,
            'name': self.name,
            'parent_id': self.parent_id,
            'user_id': self.user_id,
            'is_global': self.is_global,
            'active': self.active,
        }


class Level(OwnedContentMixin, db.Model):
    """Ordered subdivision within a theme. Ownership follows the theme."""

    __tablename__ = 'levels'

    level_id = db.Column(db.Integer, primary_key=True)
    theme_id = db.Column(db.Integer, db.ForeignKey('themes.theme_id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    level_order = db.Column(db.Integer, default=0, nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)

    @property
    def owner_id(self):
        return self.theme.user_id if self.theme else None

    def to_dict(self) -> dict[str, object]:
        return {
            'level_id': self.level_id,
            'theme_id': self.theme_id,
            'name': self.name,
            'level_order': self.level_order,
            'active': self.active,
        }


class Word(OwnedContentMixin, db.Model):
    """A hebrew / transliteration / french triple."""

    __tablename__ = 'words'

    DIFFICULTIES = (1, 2, 3)

    word_id = db.Column(db.Integer, primary_key=True)
    hebrew = db.Column(db.String(255), nullable=False)
    transliteration = db.Column(db.String(255), nullable=True)
    french = db.Column(db.String(255), nullable=False)
    theme_id = db.Column(db.Integer, db.ForeignKey('themes.theme_id'), nullable=True, index=True)
    level_id = db.Column(db.Integer, db.ForeignKey('levels.level_id'), nullable=True, index=True)
    difficulty = db.Column(db.Integer, default=1, nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    theme = db.relationship('Theme', backref='words', lazy=True)
    level = db.relationship('Level', backref='words', lazy=True)

    def to_dict(self) -> dict[str, object]:
        return {
            'word_id': self.word_id,
            'hebrew': self.hebrew,
            'transliteration': self.transliteration,
            'french': self.french,
            'theme_id': self.theme_id,
            'level_id': self.level_id,
            'difficulty': self.difficulty,
            'active': self.active,
            'user_id': self.user_id,
            'is_global': self.is_global,
        }


class CardSet(OwnedContentMixin, db.Model):
    """A named collection of cards, independent of themes."""

    __tablename__ = 'card_sets'

    set_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    cards = db.relationship(
        'Card',
        backref='card_set',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='Card.position',
    )

    def to_dict(self) -> dict[str, object]:
        return {
            'set_id': self.set_id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'active': self.active,
            'is_global': self.is_global,
            'card_count': len(self.cards),
        }


class Card(OwnedContentMixin, db.Model):
    """A vocabulary pair inside a card set. Ownership follows the set."""

    __tablename__ = 'cards'

    card_id = db.Column(db.Integer, primary_key=True)
    set_id = db.Column(db.Integer, db.ForeignKey('card_sets.set_id'), nullable=False, index=True)
    hebrew = db.Column(db.String(255), nullable=False)
    transliteration = db.Column(db.String(255), nullable=True)
    french = db.Column(db.String(255), nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)
    favorite = db.Column(db.Boolean, default=False, nullable=False)
    memorized = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    @property
    def owner_id(self):
        return self.card_set.user_id if self.card_set else None

    def to_dict(self) -> dict[str, object]:
        return {
            'card_id': self.card_id,
            'set_id': self.set_id,
            'hebrew': self.hebrew,
            'transliteration': self.transliteration,
            'french': self.french,
            'position': self.position,
            'active': self.active,
            'favorite': self.favorite,
            'memorized': self.memorized,
        }

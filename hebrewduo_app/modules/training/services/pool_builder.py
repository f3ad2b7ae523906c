# File: hebrewduo_app/modules/training/services/pool_builder.py
# Pool builders - SQLAlchemy queries producing the eligible word or card ids of a session.

from __future__ import annotations

from typing import List, Sequence

from flask import current_app
from sqlalchemy import and_, false, or_

from ....core.error_handlers import AuthorizationError, ConfigurationError
from ....extensions import db
from ....models import (
    Card,
    CardOverride,
    CardProgress,
    CardSet,
    Favorite,
    Level,
    Progress,
    SetOverride,
    Theme,
    ThemeOverride,
    Word,
    WordOverride,
)
from ..schemas import ItemSource, PoolItem, ReviewMode, Scope, SessionConfig


def _not_suppressed(owner_column, override_model):
    """Owned rows ignore overrides; shared rows pass unless forced off."""
    return or_(
        owner_column.isnot(None),
        override_model.id.is_(None),
        override_model.active.is_(True),
    )


class WordPoolQueryBuilder:
    """
    Builder pattern for the themed-word pool.
    Every word returned is active, in an active theme and level, visible to the
    user and not suppressed by one of the user's overrides.
    """

    def __init__(self, user_id: int):
        self.user_id = user_id
        self._query = (
            db.session.query(Word.word_id)
            .join(Theme, Word.theme_id == Theme.theme_id)
            .outerjoin(Level, Word.level_id == Level.level_id)
            .outerjoin(
                WordOverride,
                and_(WordOverride.word_id == Word.word_id, WordOverride.user_id == user_id),
            )
            .outerjoin(
                ThemeOverride,
                and_(ThemeOverride.theme_id == Theme.theme_id, ThemeOverride.user_id == user_id),
            )
            .filter(
                Word.active.is_(True),
                Theme.active.is_(True),
                or_(Theme.user_id.is_(None), Theme.user_id == user_id),
                or_(Word.level_id.is_(None), Level.active.is_(True)),
                _not_suppressed(Word.user_id, WordOverride),
                _not_suppressed(Theme.user_id, ThemeOverride),
            )
        )

    def filter_by_themes(self, theme_ids: Sequence[int]):
        if not theme_ids:
            self._query = self._query.filter(false())
        else:
            self._query = self._query.filter(Word.theme_id.in_(list(theme_ids)))
        return self

    def filter_by_level(self, level_id):
        if level_id is not None:
            self._query = self._query.filter(Word.level_id == level_id)
        return self

    def filter_by_difficulty(self, difficulty):
        if difficulty is not None:
            self._query = self._query.filter(Word.difficulty == difficulty)
        return self

    def filter_by_scope(self, scope: Scope):
        if scope is Scope.GLOBAL:
            self._query = self._query.filter(Word.user_id.is_(None))
        elif scope is Scope.MINE:
            self._query = self._query.filter(Word.user_id == self.user_id)
        elif scope is Scope.NONE:
            self._query = self._query.filter(false())
        else:
            self._query = self._query.filter(or_(Word.user_id.is_(None), Word.user_id == self.user_id))
        return self

    def filter_favorites(self):
        self._query = self._query.join(
            Favorite,
            and_(Favorite.word_id == Word.word_id, Favorite.user_id == self.user_id),
        )
        return self

    def ids(self) -> List[int]:
        return [row[0] for row in self._query.distinct().order_by(Word.word_id).all()]


class CardPoolQueryBuilder:
    """Builder for the card pool of one or more sets."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        self._query = (
            db.session.query(Card.card_id)
            .join(CardSet, Card.set_id == CardSet.set_id)
            .outerjoin(
                SetOverride,
                and_(SetOverride.set_id == CardSet.set_id, SetOverride.user_id == user_id),
            )
            .outerjoin(
                CardOverride,
                and_(CardOverride.card_id == Card.card_id, CardOverride.user_id == user_id),
            )
            .filter(
                Card.active.is_(True),
                CardSet.active.is_(True),
                or_(CardSet.user_id.is_(None), CardSet.user_id == user_id),
                _not_suppressed(CardSet.user_id, SetOverride),
                _not_suppressed(CardSet.user_id, CardOverride),
            )
        )

    def filter_by_sets(self, set_ids: Sequence[int]):
        if not set_ids:
            self._query = self._query.filter(false())
        else:
            self._query = self._query.filter(Card.set_id.in_(list(set_ids)))
        return self

    def ids(self) -> List[int]:
        return [row[0] for row in self._query.order_by(Card.card_id).all()]


class PoolBuilder:
    """Validates a session configuration and resolves its pool."""

    @staticmethod
    def resolve_config(user_id: int, config: SessionConfig) -> SessionConfig:
        """Check access to the selected content and drop an out-of-scope level.

        Raises:
            ConfigurationError: nothing selected, or a selected theme/set does not exist.
            AuthorizationError: a selected set or theme belongs to another user.
        """

        if not config.theme_ids and not config.set_ids:
            raise ConfigurationError('Choisis au moins un thème ou un ensemble de cartes.')

        if config.source is ItemSource.CARDS:
            sets = CardSet.query.filter(CardSet.set_id.in_(config.set_ids)).all()
            PoolBuilder._check_owned(user_id, sets, 'set_id', config.set_ids, 'ensemble')
            return config

        themes = Theme.query.filter(Theme.theme_id.in_(config.theme_ids)).all()
        PoolBuilder._check_owned(user_id, themes, 'theme_id', config.theme_ids, 'thème')

        if config.level_id is not None:
            level = db.session.get(Level, config.level_id)
            if level is None or level.theme_id not in config.theme_ids:
                current_app.logger.warning(
                    "Level %s ignored: not part of themes %s", config.level_id, config.theme_ids
                )
                config.level_id = None
        return config

    @staticmethod
    def _check_owned(user_id: int, entities, key: str, requested_ids: Sequence[int], label: str) -> None:
        found = {getattr(entity, key) for entity in entities}
        missing = [entity_id for entity_id in requested_ids if entity_id not in found]
        if missing:
            raise ConfigurationError(f"{label.capitalize()} introuvable : {', '.join(map(str, missing))}")
        for entity in entities:
            if not entity.is_global and not entity.is_owned_by(user_id):
                raise AuthorizationError(f"Cet {label} ne t'appartient pas.")

    @staticmethod
    def build_pool(user_id: int, config: SessionConfig) -> List[int]:
        """Eligible ids ordered by id: words for themed sessions, cards when sets are selected."""

        if config.source is ItemSource.CARDS:
            return CardPoolQueryBuilder(user_id).filter_by_sets(config.set_ids).ids()

        builder = (
            WordPoolQueryBuilder(user_id)
            .filter_by_themes(config.theme_ids)
            .filter_by_level(config.level_id)
            .filter_by_difficulty(config.difficulty)
            .filter_by_scope(config.scope)
        )
        if config.review_mode is ReviewMode.FAVORITES:
            builder.filter_favorites()
        return builder.ids()

    @staticmethod
    def load_items(user_id: int, source: ItemSource, ids: Sequence[int]) -> List[PoolItem]:
        """Snapshots of the pool members with the user's progress, in id order."""

        if not ids:
            return []
        if source is ItemSource.CARDS:
            rows = (
                db.session.query(Card, CardProgress)
                .outerjoin(
                    CardProgress,
                    and_(CardProgress.card_id == Card.card_id, CardProgress.user_id == user_id),
                )
                .filter(Card.card_id.in_(list(ids)))
                .order_by(Card.card_id)
                .all()
            )
            return [
                PoolItem(
                    item_id=card.card_id,
                    hebrew=card.hebrew,
                    transliteration=card.transliteration,
                    french=card.french,
                    last_seen=progress.last_seen if progress else None,
                    has_progress=progress is not None,
                    created_at=card.created_at,
                )
                for card, progress in rows
            ]

        rows = (
            db.session.query(Word, Progress)
            .outerjoin(Progress, and_(Progress.word_id == Word.word_id, Progress.user_id == user_id))
            .filter(Word.word_id.in_(list(ids)))
            .order_by(Word.word_id)
            .all()
        )
        return [
            PoolItem(
                item_id=word.word_id,
                hebrew=word.hebrew,
                transliteration=word.transliteration,
                french=word.french,
                strength=progress.strength if progress else 0,
                last_seen=progress.last_seen if progress else None,
                has_progress=progress is not None,
                created_at=word.created_at,
            )
            for word, progress in rows
        ]


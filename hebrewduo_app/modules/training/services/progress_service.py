# File: hebrewduo_app/modules/training/services/progress_service.py
# ProgressService - Atomic per-row updates of word and card progress.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from flask import current_app
from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError

from ....extensions import db
from ....models import Card, CardProgress, Progress, Word
from ...shared.utils import store_transaction
from ..config import TrainingModuleDefaultConfig
from ..schemas import ItemSource


def clamp_strength(value: int) -> int:
    return max(
        TrainingModuleDefaultConfig.TRAINING_MIN_STRENGTH,
        min(TrainingModuleDefaultConfig.TRAINING_MAX_STRENGTH, value),
    )


def next_strength(previous: int, is_correct: bool) -> int:
    step = TrainingModuleDefaultConfig.TRAINING_STRENGTH_STEP
    return clamp_strength(previous + step if is_correct else previous - step)


class ProgressService:
    """
    Progress rows are updated with a single UPDATE statement so concurrent
    answers on the same (user, item) never lose an increment. The first answer
    inserts the row inside a savepoint and falls back to the UPDATE when a
    parallel request inserted it first.
    """

    @staticmethod
    def _word_update(user_id: int, word_id: int, is_correct: bool, now: datetime):
        cfg = TrainingModuleDefaultConfig
        if is_correct:
            raised = Progress.strength + cfg.TRAINING_STRENGTH_STEP
            strength = case((raised > cfg.TRAINING_MAX_STRENGTH, cfg.TRAINING_MAX_STRENGTH), else_=raised)
            counters = {'success_count': Progress.success_count + 1}
        else:
            lowered = Progress.strength - cfg.TRAINING_STRENGTH_STEP
            strength = case((lowered < cfg.TRAINING_MIN_STRENGTH, cfg.TRAINING_MIN_STRENGTH), else_=lowered)
            counters = {'fail_count': Progress.fail_count + 1}
        return (
            update(Progress)
            .where(Progress.user_id == user_id, Progress.word_id == word_id)
            .values(strength=strength, last_seen=now, **counters)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _card_update(user_id: int, card_id: int, is_correct: bool, now: datetime):
        if is_correct:
            counters = {'success_count': CardProgress.success_count + 1}
        else:
            counters = {'fail_count': CardProgress.fail_count + 1}
        return (
            update(CardProgress)
            .where(CardProgress.user_id == user_id, CardProgress.card_id == card_id)
            .values(last_seen=now, **counters)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _upsert(statement, new_row) -> None:
        if db.session.execute(statement).rowcount:
            return
        try:
            with db.session.begin_nested():
                db.session.add(new_row)
        except IntegrityError:
            db.session.execute(statement)

    @staticmethod
    def apply_word_answer(user_id: int, word_id: int, is_correct: bool) -> int:
        """Write one scored answer to a word and return the new strength.

        Runs inside the caller's transaction; nothing is committed here.
        """

        now = datetime.now(timezone.utc)
        new_row = Progress(
            user_id=user_id,
            word_id=word_id,
            strength=next_strength(0, is_correct),
            success_count=1 if is_correct else 0,
            fail_count=0 if is_correct else 1,
            last_seen=now,
        )
        ProgressService._upsert(ProgressService._word_update(user_id, word_id, is_correct, now), new_row)
        strength = db.session.execute(
            select(Progress.strength).where(Progress.user_id == user_id, Progress.word_id == word_id)
        ).scalar_one()
        current_app.logger.debug("User %s word %s strength -> %s", user_id, word_id, strength)
        return strength

    @staticmethod
    def apply_card_answer(user_id: int, card_id: int, is_correct: bool) -> None:
        now = datetime.now(timezone.utc)
        new_row = CardProgress(
            user_id=user_id,
            card_id=card_id,
            success_count=1 if is_correct else 0,
            fail_count=0 if is_correct else 1,
            last_seen=now,
        )
        ProgressService._upsert(ProgressService._card_update(user_id, card_id, is_correct, now), new_row)

    @staticmethod
    def apply_answer(user_id: int, source: ItemSource, item_id: int, is_correct: bool) -> Optional[int]:
        """Word answers return the new strength; card answers return ``None``."""
        if source is ItemSource.CARDS:
            ProgressService.apply_card_answer(user_id, item_id, is_correct)
            return None
        return ProgressService.apply_word_answer(user_id, item_id, is_correct)

    @staticmethod
    def record_word_answer(user_id: int, word_id: int, is_correct: bool) -> int:
        """Commit one scored answer to a word and return the new strength.

        Raises:
            StoreError: the update could not be persisted; nothing was written.
        """
        with store_transaction(db.session, f"progress word {word_id}"):
            return ProgressService.apply_word_answer(user_id, word_id, is_correct)

    @staticmethod
    def record_card_answer(user_id: int, card_id: int, is_correct: bool) -> None:
        with store_transaction(db.session, f"progress card {card_id}"):
            ProgressService.apply_card_answer(user_id, card_id, is_correct)

    @staticmethod
    def get_word_progress(user_id: int, word_id: int) -> Optional[Progress]:
        return Progress.query.filter_by(user_id=user_id, word_id=word_id).first()

    @staticmethod
    def purge_history(
        user_id: int,
        theme_ids: Sequence[int] = (),
        set_ids: Sequence[int] = (),
    ) -> int:
        """Delete the user's progress on the words of ``theme_ids`` and cards of ``set_ids``."""

        deleted = 0
        with store_transaction(db.session, f"purge history of user {user_id}"):
            if theme_ids:
                word_ids = select(Word.word_id).where(Word.theme_id.in_(list(theme_ids)))
                deleted += (
                    Progress.query.filter(Progress.user_id == user_id, Progress.word_id.in_(word_ids))
                    .delete(synchronize_session=False)
                )
            if set_ids:
                card_ids = select(Card.card_id).where(Card.set_id.in_(list(set_ids)))
                deleted += (
                    CardProgress.query.filter(CardProgress.user_id == user_id, CardProgress.card_id.in_(card_ids))
                    .delete(synchronize_session=False)
                )
        current_app.logger.info(
            "Purged %s progress rows of user %s (themes=%s, sets=%s)", deleted, user_id, list(theme_ids), list(set_ids)
        )
        return deleted

    @staticmethod
    def reset_user(user_id: int) -> int:
        """Delete every word and card progress row of a user."""
        with store_transaction(db.session, f"reset progress of user {user_id}"):
            deleted = Progress.query.filter_by(user_id=user_id).delete(synchronize_session=False)
            deleted += CardProgress.query.filter_by(user_id=user_id).delete(synchronize_session=False)
        current_app.logger.info("Reset %s progress rows of user %s", deleted, user_id)
        return deleted

# File: hebrewduo_app/modules/training/services/session_manager.py
# TrainingSessionManager - Drives the training state machine and persists it in the Flask session.

from __future__ import annotations

import random
from typing import Any, Dict, Mapping, Optional

from flask import current_app, session

from ....core.error_handlers import EmptyPoolError, StaleSessionError, ValidationError
from ....core.signals import answer_scored, session_completed
from ....extensions import db
from ....models import TrainingSessionRecord
from ...shared.utils import store_transaction
from ..config import TrainingModuleDefaultConfig
from ..engine import ItemPicker, SessionPhase, TrainingSession, check_written_answer
from ..logics.setup_parser import parse_session_config
from ..schemas import ItemSource
from .pool_builder import PoolBuilder
from .progress_service import ProgressService

RNG_EXTENSION_KEY = 'hebrewduo_training_rng'


def get_rng() -> random.Random:
    """The application's single randomness source for training."""
    rng = current_app.extensions.get(RNG_EXTENSION_KEY)
    if rng is None:
        rng = random.Random(current_app.config.get('TRAINING_RANDOM_SEED'))
        current_app.extensions[RNG_EXTENSION_KEY] = rng
    return rng


class TrainingSessionManager:
    """
    Manages the state of a training run.
    The state is a :class:`TrainingSession` kept in a :class:`TrainingSessionRecord`
    row bound to the user that created it; the Flask session only holds the row id.
    """

    SESSION_KEY = TrainingModuleDefaultConfig.TRAINING_SESSION_KEY

    # ------------------------------------------------------------------ storage

    @classmethod
    def _record(cls, user_id: int) -> Optional[TrainingSessionRecord]:
        """The active record referenced by the browser session, if it is the user's."""
        session_id = session.get(cls.SESSION_KEY)
        if not isinstance(session_id, int):
            return None
        record = db.session.get(TrainingSessionRecord, session_id)
        if record is None or not record.is_active or record.user_id != user_id:
            return None
        return record

    @classmethod
    def load(cls, user_id: int) -> Optional[TrainingSession]:
        record = cls._record(user_id)
        if record is None:
            return None
        try:
            return TrainingSession.from_dict(record.state)
        except (KeyError, TypeError, ValueError) as exc:
            current_app.logger.warning("Discarding unreadable training session %s: %s", record.session_id, exc)
            cls.discard(user_id)
            return None

    @classmethod
    def save(cls, state: TrainingSession, new: bool = False) -> None:
        record = None if new else cls._record(state.user_id)
        with store_transaction(db.session, f"training session of user {state.user_id}"):
            if record is None:
                for previous in TrainingSessionRecord.query.filter_by(
                    user_id=state.user_id, status=TrainingSessionRecord.STATUS_ACTIVE
                ).all():
                    previous.close(TrainingSessionRecord.STATUS_CANCELLED)
                record = TrainingSessionRecord(user_id=state.user_id, state=state.to_dict())
                db.session.add(record)
            else:
                record.state = state.to_dict()
        session[cls.SESSION_KEY] = record.session_id

    @classmethod
    def discard(cls, user_id: int, status: str = TrainingSessionRecord.STATUS_CANCELLED) -> None:
        record = cls._record(user_id)
        session.pop(cls.SESSION_KEY, None)
        if record is None:
            return
        with store_transaction(db.session, f"close training session {record.session_id}"):
            record.close(status)

    @classmethod
    def require(cls, user_id: int) -> TrainingSession:
        state = cls.load(user_id)
        if state is None:
            raise StaleSessionError('Aucune session en cours.')
        return state

    @staticmethod
    def picker() -> ItemPicker:
        return ItemPicker(get_rng(), option_count=TrainingModuleDefaultConfig.TRAINING_OPTION_COUNT)

    # ------------------------------------------------------------------ transitions

    @classmethod
    def setup(cls, user_id: int, data: Mapping[str, Any]) -> TrainingSession:
        """Validate a submission, build its pool and start a READY session.

        Raises:
            ConfigurationError: nothing selected, unknown mode, or an empty pool
                (:class:`EmptyPoolError`).
            AuthorizationError: a selected set or theme belongs to someone else.
        """

        config = PoolBuilder.resolve_config(user_id, parse_session_config(data))
        pool = PoolBuilder.build_pool(user_id, config)
        if not pool:
            current_app.logger.warning("User %s setup rejected: empty pool for %s", user_id, config.to_dict())
            raise EmptyPoolError()

        state = TrainingSession.start(user_id, config, len(pool))
        cls.save(state, new=True)
        current_app.logger.info(
            "User %s started a %s session: total=%s pool=%s modes=%s",
            user_id,
            config.source.value,
            state.total,
            len(pool),
            [mode.value for mode in config.modes],
        )
        return state

    @classmethod
    def deal_next(cls, user_id: int) -> Dict[str, Any]:
        """Deal the next item, or report that the run is complete or has no items left."""

        state = cls.require(user_id)
        if state.phase is SessionPhase.ANSWERING:
            raise StaleSessionError('Une question attend déjà une réponse.')

        if state.finish_if_exhausted():
            cls._complete(state)
            return {'status': 'complete', 'counters': state.counters()}

        pool_ids = PoolBuilder.build_pool(user_id, state.config)
        if not pool_ids:
            cls.discard(user_id)
            current_app.logger.warning("User %s session ended: no eligible items left", user_id)
            return {
                'status': 'empty',
                'message': 'Aucun élément ne correspond à ces critères.',
                'counters': state.counters(),
            }

        picker = cls.picker()
        items = PoolBuilder.load_items(user_id, state.source, pool_ids)
        mode = picker.pick_mode(state.config.modes)
        result = picker.pick(items, state.used_ids, mode, state.source, state.config.review_mode)
        state.record_deal(result.item.item_id, mode, result.used_reset)
        cls.save(state)

        item = result.item
        shows_hebrew = item.prompt(mode) == item.hebrew
        return {
            'status': 'question',
            'source': state.source.value,
            'mode': mode.value,
            'item': {
                'id': item.item_id,
                'prompt': item.prompt(mode),
                'transliteration': item.transliteration if shows_hebrew else None,
            },
            'options': [option.to_dict() for option in result.options] if result.options is not None else None,
            'counters': state.counters(),
        }

    @classmethod
    def score_answer(
        cls,
        user_id: int,
        item_id: Any,
        chosen_id: Any = None,
        response: Any = None,
    ) -> Dict[str, Any]:
        """Score the answer to the item last dealt.

        Progress and the session row are committed together, so a
        :class:`StoreError` leaves the session exactly as it was and the same
        answer can be posted again.
        """

        state = cls.require(user_id)
        state.check_current(_as_int(item_id, 'item_id'))
        item_id = state.current_item_id
        mode = state.current_mode

        if mode.has_options:
            if chosen_id is None or str(chosen_id).strip() == '':
                raise ValidationError(errors={'chosen_id': 'Choisis une réponse.'})
            is_correct = _as_int(chosen_id, 'chosen_id') == item_id
        else:
            if response is None:
                raise ValidationError(errors={'response': 'Réponse manquante.'})
            if not isinstance(response, str):
                raise ValidationError(errors={'response': 'La réponse doit être un texte.'})

        items = PoolBuilder.load_items(user_id, state.source, [item_id])
        if not items:
            state.resume()
            cls.save(state)
            raise StaleSessionError("Cet élément n'existe plus.")
        item = items[0]
        if not mode.has_options:
            is_correct = check_written_answer(response, item.french)

        record = cls._record(user_id)
        with store_transaction(db.session, f"answer of user {user_id} on {state.source.value} {item_id}"):
            new_strength = ProgressService.apply_answer(user_id, state.source, item_id, is_correct)
            state.record_answer(item_id, is_correct)
            record.state = state.to_dict()
            if state.is_done:
                record.close(TrainingSessionRecord.STATUS_COMPLETED)

        answer_scored.send(
            current_app._get_current_object(),
            user_id=user_id,
            source=state.source.value,
            item_id=item_id,
            mode=mode.value,
            is_correct=is_correct,
            new_strength=new_strength,
        )

        if state.is_done:
            cls._complete(state)

        return {
            'status': 'complete' if state.is_done else 'answered',
            'correct': is_correct,
            'item': item.reveal(),
            'strength': new_strength,
            'counters': state.counters(),
        }

    @classmethod
    def resume(cls, user_id: int, restart: bool = False) -> Dict[str, Any]:
        state = cls.require(user_id)
        if restart:
            state.restart()
            current_app.logger.info("User %s restarted the training session", user_id)
        else:
            state.resume()
        cls.save(state)
        return cls.deal_next(user_id)

    @classmethod
    def clear(cls, user_id: int, purge: bool = True) -> Dict[str, Any]:
        """End the session; with ``purge`` also wipe progress on its content."""

        state = cls.require(user_id)
        purged = 0
        if purge:
            if state.source is ItemSource.CARDS:
                purged = ProgressService.purge_history(user_id, set_ids=state.config.set_ids)
            else:
                purged = ProgressService.purge_history(user_id, theme_ids=state.config.theme_ids)
        cls.discard(user_id)
        current_app.logger.info("User %s cleared the training session (purged=%s)", user_id, purged)
        return {'status': 'cleared', 'purged': purged}

    @classmethod
    def summary(cls, user_id: int) -> Optional[Dict[str, Any]]:
        state = cls.load(user_id)
        if state is None:
            return None
        return {
            'phase': state.phase.value,
            'source': state.source.value,
            'config': state.config.to_dict(),
            'counters': state.counters(),
        }

    @classmethod
    def _complete(cls, state: TrainingSession) -> None:
        cls.discard(state.user_id, TrainingSessionRecord.STATUS_COMPLETED)
        session_completed.send(
            current_app._get_current_object(),
            user_id=state.user_id,
            total=state.total,
            answered=state.answered,
            correct=state.correct,
        )


def _as_int(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(errors={field: 'Identifiant invalide.'}) from None

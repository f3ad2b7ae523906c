import pytest

from hebrewduo_app.core.error_handlers import (
    ConfigurationError,
    StaleSessionError,
    UnknownModeError,
    ValidationError,
)
from hebrewduo_app.modules.training.engine import SessionPhase, TrainingSession
from hebrewduo_app.modules.training.logics.modes import normalize_modes, normalize_review_mode, normalize_scope
from hebrewduo_app.modules.training.logics.setup_parser import parse_session_config
from hebrewduo_app.modules.training.schemas import DrillMode, ItemSource, ReviewMode, Scope, SessionConfig


def _session(size=3, set_ids=None):
    config = SessionConfig(theme_ids=[1], set_ids=set_ids or [], size=size)
    return TrainingSession.start(7, config, pool_size=10)


class TestTransitions:
    def test_start_is_ready_with_full_budget(self):
        state = _session(size=3)
        assert state.phase is SessionPhase.READY
        assert state.total == state.remaining == 3
        assert state.answered == 0

    def test_size_all_uses_pool_size(self):
        state = _session(size='all')
        assert state.total == 10

    def test_deal_then_answer_cycle(self):
        state = _session(size=2)

        state.record_deal(4, DrillMode.FLASHCARDS)
        assert state.phase is SessionPhase.ANSWERING
        assert state.used_word_ids == [4]

        state.record_answer(4, True)
        assert state.phase is SessionPhase.READY
        assert state.counters() == {'total': 2, 'remaining': 1, 'answered': 1, 'correct': 1}

        state.record_deal(5, DrillMode.WRITTEN)
        state.record_answer(5, False)
        assert state.phase is SessionPhase.DONE
        assert state.answered + state.remaining == state.total
        assert state.correct == 1

    def test_card_sessions_track_card_ids(self):
        state = _session(set_ids=[2])
        assert state.source is ItemSource.CARDS
        state.record_deal(9, DrillMode.FLASHCARDS)
        assert state.used_card_ids == [9]
        assert state.used_word_ids == []

    def test_used_ids_reset_when_pool_exhausted(self):
        state = _session(size=5)
        state.used_word_ids = [1, 2, 3]
        state.record_deal(2, DrillMode.FLASHCARDS, used_reset=True)
        assert state.used_word_ids == [2]

    def test_answer_without_deal_is_stale(self):
        state = _session()
        with pytest.raises(StaleSessionError):
            state.record_answer(1, True)

    def test_deal_while_answering_is_stale(self):
        state = _session()
        state.record_deal(1, DrillMode.FLASHCARDS)
        with pytest.raises(StaleSessionError):
            state.record_deal(2, DrillMode.FLASHCARDS)

    def test_answer_for_another_item_leaves_state_untouched(self):
        state = _session()
        state.record_deal(1, DrillMode.FLASHCARDS)
        before = state.to_dict()
        with pytest.raises(StaleSessionError):
            state.record_answer(2, True)
        assert state.to_dict() == before

    def test_finish_if_exhausted(self):
        state = _session(size=1)
        assert state.finish_if_exhausted() is False
        state.record_deal(1, DrillMode.FLASHCARDS)
        state.record_answer(1, True)
        assert state.is_done

    def test_restart_keeps_configuration(self):
        state = _session(size=2)
        state.record_deal(1, DrillMode.FLASHCARDS)
        state.record_answer(1, True)
        state.record_deal(2, DrillMode.FLASHCARDS)

        state.restart()

        assert state.phase is SessionPhase.READY
        assert state.counters() == {'total': 2, 'remaining': 2, 'answered': 0, 'correct': 0}
        assert state.used_word_ids == []
        assert state.config.theme_ids == [1]

    def test_resume_drops_pending_item(self):
        state = _session(size=2)
        state.record_deal(1, DrillMode.FLASHCARDS)
        state.resume()
        assert state.phase is SessionPhase.READY
        assert state.current_item_id is None
        assert state.remaining == 2

    def test_serialized_session_restores(self):
        state = _session(size='all')
        state.record_deal(3, DrillMode.FLASHCARDS_REVERSE)

        restored = TrainingSession.from_dict(state.to_dict())

        assert restored == state
        assert restored.current_mode is DrillMode.FLASHCARDS_REVERSE


class TestModes:
    def test_comma_string_and_aliases(self):
        assert normalize_modes('flashcard, reverse,quiz') == [
            DrillMode.FLASHCARDS,
            DrillMode.FLASHCARDS_REVERSE,
            DrillMode.WRITTEN,
        ]

    def test_duplicates_collapse(self):
        assert normalize_modes(['written', 'write', 'WRITTEN']) == [DrillMode.WRITTEN]

    def test_empty_defaults_to_flashcards(self):
        assert normalize_modes(None) == [DrillMode.FLASHCARDS]
        assert normalize_modes([]) == [DrillMode.FLASHCARDS]

    def test_unknown_mode(self):
        with pytest.raises(UnknownModeError) as excinfo:
            normalize_modes('dictation')
        assert excinfo.value.mode == 'dictation'
        assert isinstance(excinfo.value, ConfigurationError)

    def test_review_mode_and_scope(self):
        assert normalize_review_mode(None) is ReviewMode.WEAK
        assert normalize_review_mode('Favorite') is ReviewMode.FAVORITES
        assert normalize_scope('') is Scope.ALL
        with pytest.raises(UnknownModeError):
            normalize_scope('friends')


class TestSetupParser:
    def test_nothing_selected(self):
        with pytest.raises(ConfigurationError):
            parse_session_config({'modes': ['flashcards']})

    def test_full_payload(self):
        config = parse_session_config({
            'theme_ids': ['3', '4', '3'],
            'modes': 'flashcards,written',
            'rev_mode': 'new',
            'size': '5',
            'difficulty': '2',
            'scope': 'mine',
            'level_id': '8',
        })
        assert config.theme_ids == [3, 4]
        assert config.modes == [DrillMode.FLASHCARDS, DrillMode.WRITTEN]
        assert config.review_mode is ReviewMode.NEW
        assert config.size == 5
        assert config.difficulty == 2
        assert config.scope is Scope.MINE
        assert config.level_id == 8
        assert config.source is ItemSource.WORDS

    def test_defaults(self):
        config = parse_session_config({'set_id': 2})
        assert config.set_ids == [2]
        assert config.size == 10
        assert config.modes == [DrillMode.FLASHCARDS]
        assert config.source is ItemSource.CARDS

    def test_size_all(self):
        assert parse_session_config({'theme_id': 1, 'size': 'ALL'}).size == 'all'

    @pytest.mark.parametrize('payload', [
        {'theme_id': 1, 'size': 0},
        {'theme_id': 1, 'size': 'lots'},
        {'theme_id': 1, 'difficulty': 4},
        {'theme_ids': ['x']},
    ])
    def test_malformed_values(self, payload):
        with pytest.raises(ValidationError):
            parse_session_config(payload)

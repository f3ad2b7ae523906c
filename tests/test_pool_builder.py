import pytest

from hebrewduo_app import db
from hebrewduo_app.core.error_handlers import AuthorizationError, ConfigurationError
from hebrewduo_app.models import Favorite, Word, WordOverride
from hebrewduo_app.modules.training.schemas import ReviewMode, Scope, SessionConfig
from hebrewduo_app.modules.training.services import PoolBuilder


def _pool(user, **kwargs):
    config = PoolBuilder.resolve_config(user.user_id, SessionConfig(**kwargs))
    return PoolBuilder.build_pool(user.user_id, config)


def test_inactive_words_and_levels_are_excluded(user, make_theme, make_words):
    theme = make_theme(levels=('Niveau 1', 'Niveau 2'))
    first, second = theme.levels
    words = make_words(theme, 3, level=first)
    make_words(theme, 2, level=second, prefix='autre')
    words[0].active = False
    second.active = False
    db.session.commit()

    ids = _pool(user, theme_ids=[theme.theme_id])

    assert ids == sorted(word.word_id for word in words[1:])


def test_inactive_theme_yields_empty_pool(user, make_theme, make_words):
    theme = make_theme(active=False)
    make_words(theme, 3)
    assert _pool(user, theme_ids=[theme.theme_id]) == []


def test_scope_filters_ownership(user, make_theme, make_words):
    theme = make_theme()
    shared = make_words(theme, 2)
    mine = make_words(theme, 2, owner=user, prefix='perso')

    assert _pool(user, theme_ids=[theme.theme_id], scope=Scope.GLOBAL) == [w.word_id for w in shared]
    assert _pool(user, theme_ids=[theme.theme_id], scope=Scope.MINE) == [w.word_id for w in mine]
    assert len(_pool(user, theme_ids=[theme.theme_id], scope=Scope.ALL)) == 4
    assert _pool(user, theme_ids=[theme.theme_id], scope=Scope.NONE) == []


def test_other_users_words_never_appear(user, make_user, make_theme, make_words):
    other = make_user('yossi')
    theme = make_theme()
    make_words(theme, 2, owner=other)
    assert _pool(user, theme_ids=[theme.theme_id]) == []


def test_difficulty_and_level_filters(user, make_theme, make_words):
    theme = make_theme(levels=('Niveau 1',))
    level = theme.levels[0]
    easy = make_words(theme, 2, level=level, difficulty=1)
    make_words(theme, 2, difficulty=3, prefix='dur')

    assert _pool(user, theme_ids=[theme.theme_id], difficulty=1) == [w.word_id for w in easy]
    assert _pool(user, theme_ids=[theme.theme_id], level_id=level.level_id) == [w.word_id for w in easy]


def test_level_outside_selected_themes_is_cleared(user, make_theme, make_words):
    theme = make_theme()
    other = make_theme('Voyage', levels=('Niveau 1',))
    make_words(theme, 3)

    config = PoolBuilder.resolve_config(
        user.user_id, SessionConfig(theme_ids=[theme.theme_id], level_id=other.levels[0].level_id)
    )

    assert config.level_id is None
    assert len(PoolBuilder.build_pool(user.user_id, config)) == 3


def test_user_override_hides_shared_word(user, make_theme, make_words):
    theme = make_theme()
    words = make_words(theme, 3)
    db.session.add(WordOverride(user_id=user.user_id, word_id=words[0].word_id, active=False))
    db.session.commit()

    assert words[0].word_id not in _pool(user, theme_ids=[theme.theme_id])


def test_favorites_review_mode(user, make_theme, make_words):
    theme = make_theme()
    words = make_words(theme, 4)
    db.session.add(Favorite(user_id=user.user_id, word_id=words[2].word_id))
    db.session.commit()

    assert _pool(user, theme_ids=[theme.theme_id], review_mode=ReviewMode.FAVORITES) == [words[2].word_id]


def test_card_pool(user, make_set):
    card_set = make_set(owner=user, cards=5)
    card_set.cards[0].active = False
    db.session.commit()

    ids = _pool(user, set_ids=[card_set.set_id])

    assert ids == [card.card_id for card in card_set.cards[1:]]


def test_foreign_set_is_forbidden(user, make_user, make_set):
    card_set = make_set(owner=make_user('yossi'))
    with pytest.raises(AuthorizationError):
        _pool(user, set_ids=[card_set.set_id])


def test_foreign_theme_is_forbidden(user, make_user, make_theme):
    theme = make_theme(owner=make_user('yossi'))
    with pytest.raises(AuthorizationError):
        _pool(user, theme_ids=[theme.theme_id])


def test_missing_theme_is_a_configuration_error(user):
    with pytest.raises(ConfigurationError):
        _pool(user, theme_ids=[999])


def test_load_items_carries_progress(user, make_theme, make_words):
    from hebrewduo_app.modules.training.schemas import ItemSource
    from hebrewduo_app.modules.training.services import ProgressService

    theme = make_theme()
    words = make_words(theme, 2)
    ProgressService.record_word_answer(user.user_id, words[1].word_id, True)

    items = PoolBuilder.load_items(user.user_id, ItemSource.WORDS, [w.word_id for w in words])

    assert [item.has_progress for item in items] == [False, True]
    assert items[1].strength == 10
    assert Word.query.count() == 2

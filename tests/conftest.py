import os
import sys

import pytest
from flask import g

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hebrewduo_app import create_app, db
from hebrewduo_app.config import Config
from hebrewduo_app.models import Card, CardSet, Level, Theme, User, Word


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    SEED_BASE_THEMES = False
    TRAINING_RANDOM_SEED = 1234
    LOG_LEVEL = 'WARNING'


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login_client(client, user):
    with client.session_transaction() as session:
        session['_user_id'] = str(user.user_id)
        session['_fresh'] = True
    # requests share the fixture's app context, so drop the cached user
    g.pop('_login_user', None)


@pytest.fixture
def admin(app):
    return User.query.filter_by(user_role=User.ROLE_ADMIN).first()


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make(display_name=None, role=User.ROLE_USER):
        counter['n'] += 1
        name = display_name or f"user{counter['n']}"
        user = User(email=f"{name}@example.com", display_name=name, user_role=role)
        user.set_password('password')
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user('dana')


@pytest.fixture
def make_theme(app):
    def _make(name='Salutations', owner=None, active=True, levels=()):
        theme = Theme(name=name, user_id=owner.user_id if owner else None, active=active)
        db.session.add(theme)
        db.session.flush()
        for order, level_name in enumerate(levels, start=1):
            db.session.add(Level(theme_id=theme.theme_id, name=level_name, level_order=order))
        db.session.commit()
        return theme

    return _make


@pytest.fixture
def make_words(app):
    def _make(theme, count, owner=None, level=None, difficulty=1, prefix='mot'):
        words = [
            Word(
                hebrew=f"{prefix}-he-{index}",
                transliteration=f"{prefix}-tr-{index}",
                french=f"{prefix}-{index}",
                theme_id=theme.theme_id,
                level_id=level.level_id if level else None,
                difficulty=difficulty,
                user_id=owner.user_id if owner else None,
            )
            for index in range(count)
        ]
        db.session.add_all(words)
        db.session.commit()
        return words

    return _make


@pytest.fixture
def make_set(app):
    def _make(owner=None, cards=5, name='Ensemble'):
        card_set = CardSet(name=name, user_id=owner.user_id if owner else None)
        db.session.add(card_set)
        db.session.flush()
        for index in range(cards):
            db.session.add(Card(
                set_id=card_set.set_id,
                hebrew=f"carte-he-{index}",
                french=f"carte-{index}",
                position=index,
            ))
        db.session.commit()
        return card_set

    return _make

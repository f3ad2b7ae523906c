from hebrewduo_app import db
from hebrewduo_app.models import Card, Favorite, Theme, Word, WordOverride

from conftest import login_client


def test_user_creates_personal_theme_and_word(client, user):
    login_client(client, user)

    response = client.post('/content/themes', json={'name': 'Famille'})
    assert response.status_code == 201
    theme = response.get_json()['data']
    assert theme['user_id'] == user.user_id
    assert theme['is_global'] is False

    response = client.post('/content/themes/%s/levels' % theme['theme_id'], json={'name': 'Niveau 1'})
    level = response.get_json()['data']
    assert level['level_order'] == 1

    response = client.post('/content/words', json={
        'hebrew': 'אמא',
        'transliteration': 'ima',
        'french': 'maman',
        'theme_id': theme['theme_id'],
        'level_id': level['level_id'],
        'difficulty': 2,
    })
    assert response.status_code == 201
    word = response.get_json()['data']
    assert word['user_id'] == user.user_id
    assert word['difficulty'] == 2

    listed = client.get('/content/words?theme_id=%s' % theme['theme_id']).get_json()['data']
    assert [item['word_id'] for item in listed] == [word['word_id']]
    assert listed[0]['can_edit'] is True


def test_word_level_must_belong_to_theme(client, user, make_theme):
    theme = make_theme(owner=user)
    other = make_theme('Autre', owner=user, levels=('Niveau 1',))
    login_client(client, user)

    response = client.post('/content/words', json={
        'hebrew': 'כן', 'french': 'oui', 'theme_id': theme.theme_id, 'level_id': other.levels[0].level_id,
    })

    assert response.status_code == 400
    assert 'level_id' in response.get_json()['details']['errors']


def test_missing_fields_are_rejected(client, user):
    login_client(client, user)
    response = client.post('/content/words', json={'hebrew': 'כן'})
    assert response.status_code == 400
    assert response.get_json()['code'] == 'VALIDATION_ERROR'


def test_only_admins_publish_shared_content(client, user, admin):
    login_client(client, user)
    assert client.post('/content/themes', json={'name': 'Partagé', 'shared': True}).status_code == 403

    login_client(client, admin)
    response = client.post('/content/themes', json={'name': 'Partagé', 'shared': True})
    assert response.status_code == 201
    assert response.get_json()['data']['is_global'] is True


def test_users_cannot_edit_shared_or_foreign_words(client, user, make_user, make_theme, make_words):
    theme = make_theme()
    shared = make_words(theme, 1)[0]
    foreign = make_words(theme, 1, owner=make_user('yossi'), prefix='autre')[0]
    login_client(client, user)

    assert client.put('/content/words/%s' % shared.word_id, json={'french': 'x'}).status_code == 403
    assert client.delete('/content/words/%s' % foreign.word_id).status_code == 403


def test_delete_theme_detaches_words(client, user, make_theme, make_words):
    parent = make_theme('Parent', owner=user)
    child = make_theme('Enfant', owner=user)
    child.parent_id = parent.theme_id
    db.session.commit()
    word_ids = [word.word_id for word in make_words(parent, 2, owner=user)]
    parent_id, child_id = parent.theme_id, child.theme_id
    login_client(client, user)

    assert client.delete('/content/themes/%s' % parent_id).status_code == 200

    assert db.session.get(Theme, parent_id) is None
    assert Word.query.filter(Word.word_id.in_(word_ids)).count() == 2
    assert all(word.theme_id is None for word in Word.query.all())
    assert db.session.get(Theme, child_id).parent_id is None


def test_toggle_favorite(client, user, make_theme, make_words):
    word = make_words(make_theme(), 1)[0]
    login_client(client, user)

    first = client.post('/content/words/%s/favorite' % word.word_id).get_json()['data']
    second = client.post('/content/words/%s/favorite' % word.word_id).get_json()['data']

    assert first['favorite'] is True
    assert second['favorite'] is False
    assert Favorite.query.count() == 0


def test_card_set_editing(client, user):
    login_client(client, user)
    card_set = client.post('/content/sets', json={'name': 'Cuisine'}).get_json()['data']
    set_id = card_set['set_id']

    added = client.post('/content/sets/%s/cards' % set_id, json={'hebrew': 'לחם', 'french': 'pain'}).get_json()['data']
    response = client.put('/content/sets/%s/cards' % set_id, json={'cards': [
        {'hebrew': 'מים', 'french': 'eau'},
        {'card_id': added['card_id'], 'hebrew': 'לחם', 'french': 'le pain'},
    ]})

    saved = response.get_json()['data']
    assert [card['position'] for card in saved] == [0, 1]
    assert saved[1]['card_id'] == added['card_id']
    assert saved[1]['french'] == 'le pain'

    detail = client.get('/content/sets/%s' % set_id).get_json()['data']
    assert detail['card_count'] == 2

    flag = client.post('/content/cards/%s/flags/memorized' % added['card_id']).get_json()['data']
    assert flag['memorized'] is True
    assert client.post('/content/cards/%s/flags/unknown' % added['card_id']).status_code == 400


def test_bulk_save_removes_missing_cards(client, user, make_set):
    card_set = make_set(owner=user, cards=3)
    keep = card_set.cards[1]
    login_client(client, user)

    client.put('/content/sets/%s/cards' % card_set.set_id, json={'cards': [
        {'card_id': keep.card_id, 'hebrew': keep.hebrew, 'french': keep.french},
    ]})

    assert [card.card_id for card in Card.query.all()] == [keep.card_id]


def test_personal_visibility_endpoint(client, user, make_theme, make_words):
    theme = make_theme()
    word = make_words(theme, 1)[0]
    login_client(client, user)

    response = client.post('/content/words/%s/visibility' % word.word_id, json={'active': False})
    assert response.get_json()['data']['override'] == 'force_off'
    assert WordOverride.query.count() == 1

    response = client.post('/content/words/%s/visibility' % word.word_id)
    assert response.get_json()['data']['override'] == 'inherit'
    assert WordOverride.query.count() == 0

    hidden = client.post('/content/themes/%s/visibility' % theme.theme_id, json={'active': False})
    assert hidden.status_code == 200
    themes = client.get('/content/themes').get_json()['data']
    assert themes[0]['effective_active'] is False


def test_owner_toggles_active_flag(client, user, make_theme):
    theme = make_theme(owner=user)
    login_client(client, user)

    response = client.post('/content/themes/%s/active' % theme.theme_id, json={'active': False})

    assert response.get_json()['data']['active'] is False
    assert client.post('/content/themes/%s/visibility' % theme.theme_id, json={'active': False}).status_code == 400


def test_unknown_kind(client, user):
    login_client(client, user)
    assert client.post('/content/books/1/visibility', json={'active': False}).status_code == 404

from sqlalchemy.exc import OperationalError

from hebrewduo_app import db
from hebrewduo_app.models import CardProgress, Progress, TrainingSessionRecord, Word
from hebrewduo_app.modules.training.config import TrainingModuleDefaultConfig

from conftest import login_client

SETUP_URL = '/learn/train/setup'
NEXT_URL = '/learn/train/next'
ANSWER_URL = '/learn/train/answer'


def _deal(client):
    response = client.get(NEXT_URL)
    assert response.status_code == 200
    return response.get_json()['data']


def _answer(client, question, correct=True):
    item_id = question['item']['id']
    if correct:
        chosen = item_id
    else:
        chosen = next(option['id'] for option in question['options'] if option['id'] != item_id)
    response = client.post(ANSWER_URL, json={'item_id': item_id, 'chosen_id': chosen})
    assert response.status_code == 200
    return response.get_json()['data']


def test_themed_session_runs_to_completion(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 10)
    login_client(client, user)

    response = client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'size': 3, 'modes': ['flashcards']})
    assert response.status_code == 201
    assert response.get_json()['data']['counters'] == {'total': 3, 'remaining': 3, 'answered': 0, 'correct': 0}

    seen = []
    results = []
    for correct in (True, True, False):
        question = _deal(client)
        assert question['status'] == 'question'
        option_ids = [option['id'] for option in question['options']]
        assert len(option_ids) == TrainingModuleDefaultConfig.TRAINING_OPTION_COUNT
        assert question['item']['id'] in option_ids
        seen.append(question['item']['id'])
        results.append(_answer(client, question, correct))

    assert len(set(seen)) == 3
    assert [result['correct'] for result in results] == [True, True, False]
    assert results[-1]['status'] == 'complete'
    assert results[-1]['counters'] == {'total': 3, 'remaining': 0, 'answered': 3, 'correct': 2}

    response = client.get(NEXT_URL)
    assert response.status_code == 302
    assert response.headers['Location'].endswith(SETUP_URL)

    rows = Progress.query.filter_by(user_id=user.user_id).all()
    assert sorted(row.strength for row in rows) == [0, 10, 10]
    assert sum(row.fail_count for row in rows) == 1


def test_set_session_with_size_all(client, user, make_set):
    card_set = make_set(owner=user, cards=5)
    login_client(client, user)

    response = client.post(SETUP_URL, json={'set_ids': [card_set.set_id], 'size': 'all'})
    data = response.get_json()['data']
    assert data['source'] == 'cards'
    assert data['counters']['total'] == 5

    dealt = set()
    for _ in range(5):
        question = _deal(client)
        assert question['source'] == 'cards'
        dealt.add(question['item']['id'])
        result = _answer(client, question)

    assert dealt == {card.card_id for card in card_set.cards}
    assert result['status'] == 'complete'
    assert result['strength'] is None
    assert CardProgress.query.filter_by(user_id=user.user_id).count() == 5


def test_written_answer_ignores_case(client, user, make_theme, make_words):
    theme = make_theme()
    words = make_words(theme, 1)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'modes': 'written', 'size': 1})

    question = _deal(client)
    assert question['mode'] == 'written'
    assert question['options'] is None
    assert question['item']['prompt'] == words[0].hebrew

    response = client.post(ANSWER_URL, json={'item_id': question['item']['id'], 'response': '  MOT-0 '})
    data = response.get_json()['data']
    assert data['correct'] is True
    assert data['item']['french'] == 'mot-0'


def test_form_submission_with_repeated_fields(client, user, make_theme, make_words):
    first = make_theme('Salutations')
    second = make_theme('Voyage')
    make_words(first, 2)
    make_words(second, 2, prefix='voyage')
    login_client(client, user)

    response = client.post(SETUP_URL, data={
        'theme_ids': [str(first.theme_id), str(second.theme_id)],
        'modes': ['flashcards', 'flashcards_reverse'],
        'size': 'all',
    })

    data = response.get_json()['data']
    assert data['config']['theme_ids'] == [first.theme_id, second.theme_id]
    assert data['counters']['total'] == 4


def test_answer_for_wrong_item_redirects_and_keeps_question(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 5)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'size': 2})
    question = _deal(client)
    wrong_id = next(option['id'] for option in question['options'] if option['id'] != question['item']['id'])

    response = client.post(ANSWER_URL, json={'item_id': wrong_id, 'chosen_id': wrong_id})
    assert response.status_code == 302

    result = _answer(client, question)
    assert result['counters']['answered'] == 1


def test_dealing_twice_is_stale(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 5)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id]})
    _deal(client)

    assert client.get(NEXT_URL).status_code == 302


def test_resume_and_restart(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 6)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'size': 4})
    _answer(client, _deal(client))
    _deal(client)

    resumed = client.post('/learn/train/resume', json={'choice': 'resume'}).get_json()['data']
    assert resumed['status'] == 'question'
    assert resumed['counters']['answered'] == 1

    restarted = client.post('/learn/train/resume', json={'choice': 'restart'}).get_json()['data']
    assert restarted['status'] == 'question'
    assert restarted['counters'] == {'total': 4, 'remaining': 4, 'answered': 0, 'correct': 0}


def test_clear_purges_session_history(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 4)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'size': 2})
    _answer(client, _deal(client))

    response = client.post('/learn/train/clear', json={})
    assert response.get_json()['data'] == {'status': 'cleared', 'purged': 1}
    assert Progress.query.count() == 0
    assert client.get(NEXT_URL).status_code == 302


def test_clear_without_purge_keeps_progress(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 4)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'size': 2})
    _answer(client, _deal(client))

    client.post('/learn/train/clear', json={'purge': False})
    assert Progress.query.count() == 1


def test_setup_errors_return_setup_options(client, user, make_theme, make_user, make_set):
    empty_theme = make_theme('Vide')
    foreign_set = make_set(owner=make_user('yossi'))
    login_client(client, user)

    response = client.post(SETUP_URL, json={'modes': ['flashcards']})
    assert response.status_code == 400
    body = response.get_json()
    assert body['code'] == 'CONFIGURATION_ERROR'
    assert 'setup' in body

    response = client.post(SETUP_URL, json={'theme_ids': [empty_theme.theme_id]})
    assert response.status_code == 400
    assert response.get_json()['code'] == 'NO_ELIGIBLE_ITEMS'

    response = client.post(SETUP_URL, json={'theme_ids': [empty_theme.theme_id], 'modes': 'dictation'})
    assert response.get_json()['code'] == 'UNKNOWN_MODE'

    response = client.post(SETUP_URL, json={'set_ids': [foreign_set.set_id]})
    assert response.status_code == 403


def test_setup_page_lists_visible_content(client, user, make_theme, make_words):
    visible = make_theme('Salutations')
    make_theme('Archive', active=False)
    login_client(client, user)

    data = client.get(SETUP_URL).get_json()['data']

    assert [theme['theme_id'] for theme in data['themes']] == [visible.theme_id]
    assert 'written' in data['modes']
    assert data['active_session'] is None


def test_training_requires_login(client):
    assert client.get(NEXT_URL).status_code == 401


def test_browser_only_carries_the_session_id(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 6)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'size': 2})
    question = _deal(client)
    first = question['item']['id']

    with client.session_transaction() as stored:
        session_id = stored[TrainingModuleDefaultConfig.TRAINING_SESSION_KEY]
    assert isinstance(session_id, int)
    record = db.session.get(TrainingSessionRecord, session_id)
    assert record.user_id == user.user_id
    assert record.state['used_word_ids'] == [first]
    assert record.state['phase'] == 'answering'

    _answer(client, question)
    _answer(client, _deal(client))

    assert db.session.get(TrainingSessionRecord, session_id).status == TrainingSessionRecord.STATUS_COMPLETED
    with client.session_transaction() as stored:
        assert TrainingModuleDefaultConfig.TRAINING_SESSION_KEY not in stored


def test_new_setup_cancels_the_previous_run(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 4)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id]})
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id]})

    statuses = sorted(record.status for record in TrainingSessionRecord.query.all())
    assert statuses == [TrainingSessionRecord.STATUS_ACTIVE, TrainingSessionRecord.STATUS_CANCELLED]


def test_store_failure_keeps_the_question_open(client, user, make_theme, make_words, monkeypatch):
    theme = make_theme()
    make_words(theme, 4)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'size': 2})
    question = _deal(client)

    def failing_commit():
        raise OperationalError('COMMIT', {}, Exception('disk I/O error'))

    monkeypatch.setattr(db.session, 'commit', failing_commit)
    response = client.post(ANSWER_URL, json={'item_id': question['item']['id'], 'chosen_id': question['item']['id']})
    monkeypatch.undo()

    assert response.status_code == 503
    assert response.get_json()['code'] == 'STORE_ERROR'
    assert Progress.query.count() == 0

    result = _answer(client, question)
    assert result['counters']['answered'] == 1
    assert result['strength'] == 10


def test_pool_emptied_mid_session(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 4)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'size': 3})
    _answer(client, _deal(client))

    Word.query.update({Word.active: False})
    db.session.commit()

    data = _deal(client)
    assert data['status'] == 'empty'
    assert data['counters']['answered'] == 1
    assert client.get(NEXT_URL).status_code == 302


def test_written_answer_must_be_text(client, user, make_theme, make_words):
    theme = make_theme()
    make_words(theme, 1)
    login_client(client, user)
    client.post(SETUP_URL, json={'theme_ids': [theme.theme_id], 'modes': 'written', 'size': 1})
    question = _deal(client)

    response = client.post(ANSWER_URL, json={'item_id': question['item']['id'], 'response': 5})
    assert response.status_code == 400
    assert 'response' in response.get_json()['details']['errors']

    response = client.post(ANSWER_URL, json={'item_id': question['item']['id'], 'response': 'mot-0'})
    assert response.get_json()['data']['correct'] is True

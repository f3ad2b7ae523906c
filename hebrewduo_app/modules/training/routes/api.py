# File: hebrewduo_app/modules/training/routes/api.py
# Training API - setup, deal, answer, resume and clear.

from flask import current_app, jsonify, redirect, request, url_for
from flask_login import current_user, login_required

from .. import training_bp
from ....core.error_handlers import ConfigurationError, StaleSessionError, success_response
from ...content.interface import list_visible_sets, list_visible_themes
from ..config import TrainingModuleDefaultConfig
from ..schemas import DrillMode, ReviewMode, Scope
from ..services import TrainingSessionManager

LIST_FIELDS = ('theme_ids', 'set_ids', 'modes')


def _payload():
    data = request.get_json(silent=True)
    if data is not None:
        return data
    form = {key: value for key, value in request.form.items()}
    for key in LIST_FIELDS:
        values = request.form.getlist(key)
        if len(values) > 1:
            form[key] = values
    return form


def _setup_options():
    return {
        'themes': list_visible_themes(current_user),
        'sets': list_visible_sets(current_user),
        'modes': [mode.value for mode in DrillMode],
        'review_modes': [mode.value for mode in ReviewMode],
        'scopes': [scope.value for scope in Scope],
        'defaults': {
            'modes': [DrillMode.FLASHCARDS.value],
            'review_mode': ReviewMode.WEAK.value,
            'scope': Scope.ALL.value,
            'size': TrainingModuleDefaultConfig.TRAINING_DEFAULT_SIZE,
        },
        'active_session': TrainingSessionManager.summary(current_user.user_id),
    }


@training_bp.errorhandler(StaleSessionError)
def handle_stale_session(error):
    current_app.logger.warning("Stale training request from user %s: %s", current_user.get_id(), error.message)
    return redirect(url_for('training.setup'))


@training_bp.errorhandler(ConfigurationError)
def handle_configuration_error(error):
    current_app.logger.warning("Training setup rejected (%s): %s", error.code, error.message)
    body = error.to_dict()
    body['setup'] = _setup_options()
    return jsonify(body), error.status_code


@training_bp.route('/setup', methods=['GET'])
@login_required
def setup():
    return jsonify(success_response(_setup_options()))


@training_bp.route('/setup', methods=['POST'])
@login_required
def submit_setup():
    state = TrainingSessionManager.setup(current_user.user_id, _payload())
    data = {
        'source': state.source.value,
        'config': state.config.to_dict(),
        'counters': state.counters(),
        'next_url': url_for('training.next_item'),
    }
    return jsonify(success_response(data, 'Session prête.')), 201


@training_bp.route('/next', methods=['GET'])
@login_required
def next_item():
    return jsonify(success_response(TrainingSessionManager.deal_next(current_user.user_id)))


@training_bp.route('/answer', methods=['POST'])
@login_required
def answer():
    data = _payload()
    result = TrainingSessionManager.score_answer(
        current_user.user_id,
        item_id=data.get('item_id'),
        chosen_id=data.get('chosen_id'),
        response=data.get('response'),
    )
    return jsonify(success_response(result))


@training_bp.route('/resume', methods=['POST'])
@login_required
def resume():
    choice = str(_payload().get('choice', 'resume')).strip().lower()
    if choice not in ('resume', 'restart'):
        choice = 'resume'
    result = TrainingSessionManager.resume(current_user.user_id, restart=choice == 'restart')
    return jsonify(success_response(result))


@training_bp.route('/clear', methods=['POST'])
@login_required
def clear():
    data = _payload()
    purge = data.get('purge', True)
    if isinstance(purge, str):
        purge = purge.strip().lower() not in ('0', 'false', 'off', 'no')
    result = TrainingSessionManager.clear(current_user.user_id, purge=bool(purge))
    return jsonify(success_response(result, 'Session terminée.'))

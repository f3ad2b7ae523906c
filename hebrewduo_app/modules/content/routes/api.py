# File: hebrewduo_app/modules/content/routes/api.py
# Content API - JSON endpoints for personal and shared vocabulary.

from flask import jsonify, request
from flask_login import current_user, login_required

from .. import content_bp
from ....core.error_handlers import success_response
from ..services import ContentService, VisibilityService
from ..services.content_service import parse_flag


def _payload():
    return request.get_json(silent=True) or request.form.to_dict()


def _shared(data) -> bool:
    return parse_flag(data, 'shared', default=False)


# ---------------------------------------------------------------- themes

@content_bp.route('/themes', methods=['GET'])
@login_required
def list_themes():
    return jsonify(success_response(ContentService.list_themes(current_user)))


@content_bp.route('/themes', methods=['POST'])
@login_required
def create_theme():
    data = _payload()
    theme = ContentService.create_theme(current_user, data, shared=_shared(data))
    return jsonify(success_response(theme.to_dict(), 'Thème créé.')), 201


@content_bp.route('/themes/<int:theme_id>', methods=['PUT', 'PATCH'])
@login_required
def update_theme(theme_id):
    theme = ContentService.update_theme(current_user, theme_id, _payload())
    return jsonify(success_response(theme.to_dict()))


@content_bp.route('/themes/<int:theme_id>', methods=['DELETE'])
@login_required
def delete_theme(theme_id):
    ContentService.delete_theme(current_user, theme_id)
    return jsonify(success_response(message='Thème supprimé.'))


@content_bp.route('/themes/<int:theme_id>/levels', methods=['POST'])
@login_required
def create_level(theme_id):
    level = ContentService.create_level(current_user, theme_id, _payload())
    return jsonify(success_response(level.to_dict(), 'Niveau créé.')), 201


@content_bp.route('/levels/<int:level_id>', methods=['PUT', 'PATCH'])
@login_required
def update_level(level_id):
    level = ContentService.update_level(current_user, level_id, _payload())
    return jsonify(success_response(level.to_dict()))


@content_bp.route('/levels/<int:level_id>', methods=['DELETE'])
@login_required
def delete_level(level_id):
    ContentService.delete_level(current_user, level_id)
    return jsonify(success_response(message='Niveau supprimé.'))


# ---------------------------------------------------------------- words

@content_bp.route('/words', methods=['GET'])
@login_required
def list_words():
    theme_id = request.args.get('theme_id', type=int)
    return jsonify(success_response(ContentService.list_words(current_user, theme_id=theme_id)))


@content_bp.route('/words', methods=['POST'])
@login_required
def create_word():
    data = _payload()
    word = ContentService.create_word(current_user, data, shared=_shared(data))
    return jsonify(success_response(word.to_dict(), 'Mot ajouté.')), 201


@content_bp.route('/words/<int:word_id>', methods=['PUT', 'PATCH'])
@login_required
def update_word(word_id):
    word = ContentService.update_word(current_user, word_id, _payload())
    return jsonify(success_response(word.to_dict()))


@content_bp.route('/words/<int:word_id>', methods=['DELETE'])
@login_required
def delete_word(word_id):
    ContentService.delete_word(current_user, word_id)
    return jsonify(success_response(message='Mot supprimé.'))


@content_bp.route('/words/<int:word_id>/favorite', methods=['POST'])
@login_required
def toggle_favorite(word_id):
    is_favorite = ContentService.toggle_favorite(current_user, word_id)
    return jsonify(success_response({'word_id': word_id, 'favorite': is_favorite}))


# ---------------------------------------------------------------- sets & cards

@content_bp.route('/sets', methods=['GET'])
@login_required
def list_sets():
    return jsonify(success_response(ContentService.list_sets(current_user)))


@content_bp.route('/sets', methods=['POST'])
@login_required
def create_set():
    data = _payload()
    card_set = ContentService.create_set(current_user, data, shared=_shared(data))
    return jsonify(success_response(card_set.to_dict(), 'Ensemble créé.')), 201


@content_bp.route('/sets/<int:set_id>', methods=['GET'])
@login_required
def get_set(set_id):
    return jsonify(success_response(ContentService.get_set(current_user, set_id)))


@content_bp.route('/sets/<int:set_id>', methods=['PUT', 'PATCH'])
@login_required
def update_set(set_id):
    card_set = ContentService.update_set(current_user, set_id, _payload())
    return jsonify(success_response(card_set.to_dict()))


@content_bp.route('/sets/<int:set_id>', methods=['DELETE'])
@login_required
def delete_set(set_id):
    ContentService.delete_set(current_user, set_id)
    return jsonify(success_response(message='Ensemble supprimé.'))


@content_bp.route('/sets/<int:set_id>/cards', methods=['POST'])
@login_required
def add_card(set_id):
    card = ContentService.add_card(current_user, set_id, _payload())
    return jsonify(success_response(card.to_dict(), 'Carte ajoutée.')), 201


@content_bp.route('/sets/<int:set_id>/cards', methods=['PUT'])
@login_required
def save_cards(set_id):
    data = request.get_json(silent=True) or {}
    cards = ContentService.save_cards(current_user, set_id, data.get('cards'))
    return jsonify(success_response([card.to_dict() for card in cards], 'Ensemble enregistré.'))


@content_bp.route('/cards/<int:card_id>', methods=['PUT', 'PATCH'])
@login_required
def update_card(card_id):
    card = ContentService.update_card(current_user, card_id, _payload())
    return jsonify(success_response(card.to_dict()))


@content_bp.route('/cards/<int:card_id>', methods=['DELETE'])
@login_required
def delete_card(card_id):
    ContentService.delete_card(current_user, card_id)
    return jsonify(success_response(message='Carte supprimée.'))


@content_bp.route('/cards/<int:card_id>/flags/<flag>', methods=['POST'])
@login_required
def toggle_card_flag(card_id, flag):
    value = ContentService.toggle_card_flag(current_user, card_id, flag)
    return jsonify(success_response({'card_id': card_id, flag: value}))


# ---------------------------------------------------------------- visibility

@content_bp.route('/<kind>/<int:entity_id>/visibility', methods=['POST'])
@login_required
def set_visibility(kind, entity_id):
    """Hide or show shared content for the current user only."""
    data = _payload()
    if 'active' in data:
        state = VisibilityService.set_user_visibility(current_user, kind, entity_id, parse_flag(data, 'active'))
    else:
        state = VisibilityService.toggle_user_visibility(current_user, kind, entity_id)
    return jsonify(success_response({'kind': kind, 'id': entity_id, 'override': state.value}))


@content_bp.route('/<kind>/<int:entity_id>/active', methods=['POST'])
@login_required
def set_active(kind, entity_id):
    """Change the entity's own flag (owner, or admin for shared content)."""
    data = _payload()
    entity = VisibilityService.set_entity_active(current_user, kind, entity_id, parse_flag(data, 'active'))
    return jsonify(success_response({'kind': kind, 'id': entity_id, 'active': entity.active}))

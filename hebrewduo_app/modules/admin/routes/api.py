# File: hebrewduo_app/modules/admin/routes/api.py
# Admin endpoints. Every view requires the admin role.

from flask import jsonify, request
from flask_login import current_user

from .. import admin_bp
from ....core.error_handlers import ValidationError, success_response
from ...auth.decorators import admin_required
from ...auth.forms import UserForm
from ...auth.services import AuthService
from ...content.services.content_service import parse_flag
from ..services import AdminService


@admin_bp.route('/', methods=['GET'])
@admin_bp.route('/dashboard', methods=['GET'])
@admin_required
def dashboard():
    return jsonify(success_response(AdminService.get_counts()))


@admin_bp.route('/users', methods=['GET'])
@admin_required
def list_users():
    return jsonify(success_response(AdminService.list_users()))


@admin_bp.route('/users', methods=['POST'])
@admin_required
def create_user():
    form = UserForm()
    if not form.validate_on_submit():
        raise ValidationError('Utilisateur invalide.', errors=form.errors)
    user = AdminService.create_user(form)
    return jsonify(success_response(user.to_dict(), 'Utilisateur créé.')), 201


@admin_bp.route('/users/<int:user_id>', methods=['PUT', 'POST'])
@admin_required
def update_user(user_id):
    user = AuthService.get_user(user_id)
    form = UserForm()
    form.user = user
    if not form.validate_on_submit():
        raise ValidationError('Utilisateur invalide.', errors=form.errors)
    user = AdminService.update_user(user, form)
    return jsonify(success_response(user.to_dict(), 'Utilisateur mis à jour.'))


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id):
    AdminService.delete_user(current_user, user_id)
    return jsonify(success_response(message='Utilisateur supprimé.'))


@admin_bp.route('/users/<int:user_id>/reset', methods=['POST'])
@admin_required
def reset_progress(user_id):
    deleted = AdminService.reset_progress(user_id)
    return jsonify(success_response({'deleted': deleted}, 'Progression réinitialisée.'))


@admin_bp.route('/words', methods=['GET'])
@admin_required
def list_words():
    return jsonify(success_response(AdminService.list_global_words()))


@admin_bp.route('/themes', methods=['GET'])
@admin_required
def list_themes():
    return jsonify(success_response(AdminService.list_global_themes()))


@admin_bp.route('/<kind>/<int:entity_id>/active', methods=['POST'])
@admin_required
def set_active(kind, entity_id):
    """Activate or deactivate shared content for everyone."""
    data = request.get_json(silent=True) or request.form.to_dict()
    entity = AdminService.set_global_active(current_user, kind, entity_id, parse_flag(data, 'active'))
    return jsonify(success_response({'kind': kind, 'id': entity_id, 'active': entity.active}))

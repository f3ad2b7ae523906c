# File: hebrewduo_app/modules/auth/routes/views.py
# Registration, login and logout endpoints.

from flask import current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from .. import auth_bp
from ....core.error_handlers import ValidationError, error_response, success_response
from ..forms import LoginForm, RegistrationForm
from ..services import AuthService


@auth_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    return jsonify(success_response({'csrf_token': generate_csrf()}))


@auth_bp.route('/register', methods=['POST'])
def register():
    form = RegistrationForm()
    if not form.validate_on_submit():
        raise ValidationError('Inscription invalide.', errors=form.errors)
    user = AuthService.register_user(form.email.data, form.display_name.data, form.password.data)
    login_user(user)
    return jsonify(success_response(user.to_dict(), 'Bienvenue !')), 201


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    form = LoginForm()
    if not form.is_submitted():
        return error_response('Connexion requise.', 'UNAUTHORIZED', 401)
    if not form.validate():
        raise ValidationError('Connexion invalide.', errors=form.errors)
    user = AuthService.authenticate_user(form.email.data, form.password.data)
    if user is None:
        current_app.logger.warning("Failed login for %s", form.email.data)
        return error_response('Email ou mot de passe incorrect.', 'INVALID_CREDENTIALS', 401)
    login_user(user, remember=form.remember_me.data)
    current_app.logger.info("User %s logged in", user.user_id)
    return jsonify(success_response(user.to_dict(), 'Connecté.'))


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify(success_response(message='Déconnecté.'))


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(success_response(current_user.to_dict()))

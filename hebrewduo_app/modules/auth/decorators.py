from functools import wraps

from flask import abort
from flask_login import current_user

from ...core.error_handlers import AuthorizationError


def admin_required(view):
    """Anonymous callers get a 401, authenticated non-admins an AuthorizationError."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not current_user.is_admin:
            raise AuthorizationError('Accès réservé aux administrateurs.')
        return view(*args, **kwargs)

    return wrapped

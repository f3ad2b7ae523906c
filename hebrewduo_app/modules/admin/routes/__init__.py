from .. import admin_bp
from . import api  # noqa: E402,F401

__all__ = ['admin_bp']

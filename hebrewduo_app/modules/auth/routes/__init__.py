from .. import auth_bp
from . import views  # noqa: E402,F401

__all__ = ['auth_bp']

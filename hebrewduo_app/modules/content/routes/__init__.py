from .. import content_bp
from . import api  # noqa: E402,F401

__all__ = ['content_bp']

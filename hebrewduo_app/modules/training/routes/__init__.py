from .. import training_bp
from . import api  # noqa: E402,F401

__all__ = ['training_bp']

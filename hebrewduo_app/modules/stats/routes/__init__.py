from .. import stats_bp
from .. import events  # noqa: E402,F401
from . import api  # noqa: E402,F401

__all__ = ['stats_bp']

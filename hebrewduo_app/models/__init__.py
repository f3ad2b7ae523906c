"""Database models."""

from .content import Card, CardSet, Level, Theme, Word
from .overrides import CardOverride, OverrideState, SetOverride, ThemeOverride, WordOverride
from .progress import CardProgress, Progress
from .training_session import TrainingSessionRecord
from .user import Favorite, User

__all__ = [
    'Card',
    'CardOverride',
    'CardProgress',
    'CardSet',
    'Favorite',
    'Level',
    'OverrideState',
    'Progress',
    'SetOverride',
    'Theme',
    'ThemeOverride',
    'TrainingSessionRecord',
    'User',
    'Word',
    'WordOverride',
]

"""
Normalization of user-supplied drill and review mode names.
Pure logic, no Database access.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from ....core.error_handlers import UnknownModeError
from ..schemas import DrillMode, ReviewMode, Scope

DRILL_MODE_ALIASES = {
    'flashcards': DrillMode.FLASHCARDS,
    'flashcard': DrillMode.FLASHCARDS,
    'flashcards_reverse': DrillMode.FLASHCARDS_REVERSE,
    'flashcards-reverse': DrillMode.FLASHCARDS_REVERSE,
    'reverse_flashcards': DrillMode.FLASHCARDS_REVERSE,
    'reverse': DrillMode.FLASHCARDS_REVERSE,
    'written': DrillMode.WRITTEN,
    'write': DrillMode.WRITTEN,
    'quiz': DrillMode.WRITTEN,
    'ecrit': DrillMode.WRITTEN,
}

REVIEW_MODE_ALIASES = {
    'weak': ReviewMode.WEAK,
    'new': ReviewMode.NEW,
    'random': ReviewMode.RANDOM,
    'favorites': ReviewMode.FAVORITES,
    'favorite': ReviewMode.FAVORITES,
}


def _split(raw: Union[None, str, Iterable[str]]) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(',')
    return [str(part).strip().lower() for part in raw if part is not None and str(part).strip()]


def normalize_modes(raw: Union[None, str, Iterable[str]]) -> List[DrillMode]:
    """Parse one mode, a comma separated string or a list into unique drill modes.

    Legacy names are mapped onto their current mode. An empty input yields the
    default ``[DrillMode.FLASHCARDS]``; an unrecognised name raises
    :class:`UnknownModeError`.
    """

    modes: List[DrillMode] = []
    for name in _split(raw):
        mode = DRILL_MODE_ALIASES.get(name)
        if mode is None:
            raise UnknownModeError(name)
        if mode not in modes:
            modes.append(mode)
    return modes or [DrillMode.FLASHCARDS]


def normalize_review_mode(raw: Optional[str]) -> ReviewMode:
    name = (raw or '').strip().lower()
    if not name:
        return ReviewMode.WEAK
    mode = REVIEW_MODE_ALIASES.get(name)
    if mode is None:
        raise UnknownModeError(name)
    return mode


def normalize_scope(raw: Optional[str]) -> Scope:
    name = (raw or '').strip().lower()
    if not name:
        return Scope.ALL
    try:
        return Scope(name)
    except ValueError:
        raise UnknownModeError(name) from None

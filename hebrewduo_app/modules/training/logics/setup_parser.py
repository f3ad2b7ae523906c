"""
Parsing of a session setup submission into a :class:`SessionConfig`.
Pure logic, no Database access.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Union

from ....core.error_handlers import ConfigurationError, ValidationError
from ..config import TrainingModuleDefaultConfig
from ..schemas import SIZE_ALL, SessionConfig
from .modes import normalize_modes, normalize_review_mode, normalize_scope

NO_CONTENT_MESSAGE = 'Choisis au moins un thème ou un ensemble de cartes.'


def _int_list(raw: Any, field_name: str) -> List[int]:
    if raw is None or raw == '':
        return []
    if isinstance(raw, (str, int)):
        raw = str(raw).split(',')
    values: List[int] = []
    for part in raw:
        text = str(part).strip()
        if not text:
            continue
        try:
            value = int(text)
        except ValueError:
            raise ValidationError(errors={field_name: f"Identifiant invalide : {text}"}) from None
        if value not in values:
            values.append(value)
    return values


def _optional_int(raw: Any, field_name: str) -> Optional[int]:
    if raw is None or str(raw).strip() == '':
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationError(errors={field_name: f"Valeur invalide : {raw}"}) from None


def parse_size(raw: Any) -> Union[int, str]:
    """Return a positive integer size or ``'all'``."""
    if raw is None or str(raw).strip() == '':
        return TrainingModuleDefaultConfig.TRAINING_DEFAULT_SIZE
    text = str(raw).strip().lower()
    if text == SIZE_ALL:
        return SIZE_ALL
    try:
        size = int(text)
    except ValueError:
        raise ValidationError(errors={'size': 'La taille doit être un nombre ou "all".'}) from None
    if size <= 0:
        raise ValidationError(errors={'size': 'La taille doit être positive.'})
    return size


def parse_session_config(data: Mapping[str, Any]) -> SessionConfig:
    """Build a validated configuration from a form or JSON payload.

    Raises:
        ConfigurationError: when neither themes nor sets are selected, or a mode
            name is unknown.
        ValidationError: when an identifier, difficulty or size is malformed.
    """

    theme_ids = _int_list(data.get('theme_ids', data.get('theme_id')), 'theme_ids')
    set_ids = _int_list(data.get('set_ids', data.get('set_id')), 'set_ids')
    if not theme_ids and not set_ids:
        raise ConfigurationError(NO_CONTENT_MESSAGE)

    difficulty = _optional_int(data.get('difficulty'), 'difficulty')
    if difficulty is not None and difficulty not in (1, 2, 3):
        raise ValidationError(errors={'difficulty': 'La difficulté doit être 1, 2 ou 3.'})

    return SessionConfig(
        modes=normalize_modes(data.get('modes', data.get('mode'))),
        theme_ids=theme_ids,
        set_ids=set_ids,
        level_id=_optional_int(data.get('level_id'), 'level_id'),
        difficulty=difficulty,
        scope=normalize_scope(data.get('scope')),
        review_mode=normalize_review_mode(data.get('review_mode', data.get('rev_mode'))),
        size=parse_size(data.get('size', data.get('requested_size'))),
    )

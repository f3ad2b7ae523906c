"""Effective visibility of content for a given user.

Owned content is visible to its owner exactly when its own ``active`` flag is
set. Shared (global) content is visible when its flag is set and the user has
not forced it off with an override row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import current_app

from ....core.error_handlers import AuthorizationError, NotFoundError, ValidationError
from ....core.signals import content_deactivated
from ....extensions import db
from ....models import (
    Card,
    CardOverride,
    CardSet,
    Level,
    OverrideState,
    SetOverride,
    Theme,
    ThemeOverride,
    User,
    Word,
    WordOverride,
)
from ...shared.utils import store_transaction


@dataclass(frozen=True)
class ContentKind:
    name: str
    model: type
    override_model: Optional[type]
    key: str


CONTENT_KINDS = {
    'word': ContentKind('word', Word, WordOverride, 'word_id'),
    'theme': ContentKind('theme', Theme, ThemeOverride, 'theme_id'),
    'set': ContentKind('set', CardSet, SetOverride, 'set_id'),
    'card': ContentKind('card', Card, CardOverride, 'card_id'),
    'level': ContentKind('level', Level, None, 'level_id'),
}


def resolve_kind(name: str) -> ContentKind:
    kind = CONTENT_KINDS.get((name or '').lower().rstrip('s'))
    if kind is None:
        raise NotFoundError(f"Type de contenu inconnu : {name}", resource=name)
    return kind


def can_manage(entity, user: User) -> bool:
    """Owners manage their content; admins manage shared content."""
    if entity.is_global:
        return bool(user.is_admin)
    return entity.is_owned_by(user.user_id)


def can_view(entity, user_id: int) -> bool:
    return entity.is_global or entity.is_owned_by(user_id)


class VisibilityService:
    """Resolves and mutates per-user visibility of content."""

    @staticmethod
    def get_entity(kind: ContentKind, entity_id: int):
        entity = db.session.get(kind.model, entity_id)
        if entity is None:
            raise NotFoundError(f"{kind.name} {entity_id} introuvable", resource=kind.name)
        return entity

    @staticmethod
    def _override_row(kind: ContentKind, user_id: int, entity_id: int):
        if kind.override_model is None:
            return None
        return kind.override_model.query.filter_by(user_id=user_id, **{kind.key: entity_id}).first()

    @staticmethod
    def get_state(kind: ContentKind, user_id: int, entity_id: int) -> OverrideState:
        row = VisibilityService._override_row(kind, user_id, entity_id)
        return row.state if row is not None else OverrideState.INHERIT

    @staticmethod
    def effective_active(entity, user_id: int) -> bool:
        """Own flag, combined with the user's override for shared content."""
        if not entity.active:
            return False
        if not entity.is_global:
            return True
        kind = CONTENT_KINDS[_kind_name(entity)]
        return VisibilityService.get_state(kind, user_id, getattr(entity, kind.key)) is not OverrideState.FORCE_OFF

    @staticmethod
    def set_user_visibility(user: User, kind_name: str, entity_id: int, active: bool) -> OverrideState:
        """Show or hide shared content for ``user`` only.

        Hiding writes a FORCE_OFF row; showing removes the row so the entity
        inherits its shared state again.
        """

        kind = resolve_kind(kind_name)
        if kind.override_model is None:
            raise ValidationError(errors={'kind': f"Pas de visibilité personnelle pour {kind.name}."})
        entity = VisibilityService.get_entity(kind, entity_id)
        if not entity.is_global:
            raise ValidationError(errors={'kind': 'Utilise le statut actif pour ton propre contenu.'})
        if not entity.active:
            raise ValidationError(errors={'active': 'Ce contenu est désactivé pour tout le monde.'})

        with store_transaction(db.session, f"visibility {kind.name} {entity_id}"):
            row = VisibilityService._override_row(kind, user.user_id, entity_id)
            if active:
                if row is not None:
                    db.session.delete(row)
                state = OverrideState.INHERIT
            else:
                if row is None:
                    row = kind.override_model(user_id=user.user_id, active=False, **{kind.key: entity_id})
                    db.session.add(row)
                else:
                    row.active = False
                state = OverrideState.FORCE_OFF

        current_app.logger.info(
            "User %s set %s %s visibility to %s", user.user_id, kind.name, entity_id, state.value
        )
        return state

    @staticmethod
    def toggle_user_visibility(user: User, kind_name: str, entity_id: int) -> OverrideState:
        kind = resolve_kind(kind_name)
        current = VisibilityService.get_state(kind, user.user_id, entity_id)
        return VisibilityService.set_user_visibility(
            user, kind_name, entity_id, active=current is OverrideState.FORCE_OFF
        )

    @staticmethod
    def set_entity_active(user: User, kind_name: str, entity_id: int, active: bool):
        """Change an entity's own flag; deactivating purges its override rows."""

        kind = resolve_kind(kind_name)
        entity = VisibilityService.get_entity(kind, entity_id)
        if not can_manage(entity, user):
            raise AuthorizationError("Tu ne peux pas modifier ce contenu.")

        purged = 0
        with store_transaction(db.session, f"activation {kind.name} {entity_id}"):
            entity.active = bool(active)
            if not active and kind.override_model is not None:
                purged = kind.override_model.query.filter_by(**{kind.key: entity_id}).delete(
                    synchronize_session=False
                )

        current_app.logger.info(
            "User %s set %s %s active=%s (purged %s overrides)", user.user_id, kind.name, entity_id, active, purged
        )
        if not active:
            content_deactivated.send(
                current_app._get_current_object(),
                kind=kind.name,
                entity_id=entity_id,
                purged_overrides=purged,
            )
        return entity


def _kind_name(entity) -> str:
    for name, kind in CONTENT_KINDS.items():
        if isinstance(entity, kind.model):
            return name
    raise TypeError(f"Unsupported content type {type(entity)!r}")

# File: hebrewduo_app/modules/content/services/content_service.py
# ContentService - CRUD for themes, levels, words, card sets and cards.

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from flask import current_app

from ....core.error_handlers import AuthorizationError, NotFoundError, ValidationError
from ....extensions import db
from ....models import (
    Card,
    CardOverride,
    CardProgress,
    CardSet,
    Favorite,
    Level,
    Progress,
    SetOverride,
    Theme,
    ThemeOverride,
    User,
    Word,
    WordOverride,
)
from ...shared.utils import store_transaction
from .visibility_service import CONTENT_KINDS, VisibilityService, can_manage, can_view

CARD_FLAGS = ('favorite', 'memorized')


def _text(data: Mapping[str, Any], field: str, required: bool = True) -> Optional[str]:
    value = data.get(field)
    value = str(value).strip() if value is not None else ''
    if not value:
        if required:
            raise ValidationError(errors={field: 'Champ obligatoire.'})
        return None
    return value


def _optional_id(data: Mapping[str, Any], field: str) -> Optional[int]:
    value = data.get(field)
    if value is None or str(value).strip() == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(errors={field: 'Identifiant invalide.'}) from None


def parse_flag(data: Mapping[str, Any], field: str, default: bool = True) -> bool:
    value = data.get(field, default)
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'on', 'yes')
    return bool(value)


def _owner_for(user: User, shared: bool) -> Optional[int]:
    if shared:
        if not user.is_admin:
            raise AuthorizationError("Seul un administrateur peut publier du contenu partagé.")
        return None
    return user.user_id


class ContentService:
    """Static helpers that own every content write."""

    # ------------------------------------------------------------------ lookups

    @staticmethod
    def _get(model, entity_id: int, name: str):
        entity = db.session.get(model, entity_id)
        if entity is None:
            raise NotFoundError(f"{name} {entity_id} introuvable", resource=name)
        return entity

    @staticmethod
    def _get_manageable(model, entity_id: int, name: str, user: User):
        entity = ContentService._get(model, entity_id, name)
        if not can_manage(entity, user):
            raise AuthorizationError("Tu ne peux pas modifier ce contenu.")
        return entity

    @staticmethod
    def _get_visible(model, entity_id: int, name: str, user: User):
        entity = ContentService._get(model, entity_id, name)
        if not can_view(entity, user.user_id):
            raise AuthorizationError("Ce contenu ne t'appartient pas.")
        return entity

    @staticmethod
    def _describe(entity, user: User) -> Dict[str, Any]:
        payload = entity.to_dict()
        payload['effective_active'] = VisibilityService.effective_active(entity, user.user_id)
        payload['can_edit'] = can_manage(entity, user)
        return payload

    @staticmethod
    def _apply_active(user: User, kind: str, entity, data: Mapping[str, Any]) -> None:
        if 'active' not in data:
            return
        active = parse_flag(data, 'active')
        if active != entity.active:
            VisibilityService.set_entity_active(user, kind, getattr(entity, CONTENT_KINDS[kind].key), active)

    # ------------------------------------------------------------------ themes

    @staticmethod
    def list_themes(user: User) -> List[Dict[str, Any]]:
        themes = (
            Theme.query.filter((Theme.user_id.is_(None)) | (Theme.user_id == user.user_id))
            .order_by(Theme.name)
            .all()
        )
        result = []
        for theme in themes:
            payload = ContentService._describe(theme, user)
            payload['levels'] = [level.to_dict() for level in theme.levels]
            result.append(payload)
        return result

    @staticmethod
    def _validate_parent(user: User, parent_id: Optional[int], theme_id: Optional[int] = None) -> Optional[int]:
        if parent_id is None:
            return None
        if parent_id == theme_id:
            raise ValidationError(errors={'parent_id': 'Un thème ne peut pas être son propre parent.'})
        ContentService._get_visible(Theme, parent_id, 'theme', user)
        return parent_id

    @staticmethod
    def create_theme(user: User, data: Mapping[str, Any], shared: bool = False) -> Theme:
        theme = Theme(
            name=_text(data, 'name'),
            parent_id=ContentService._validate_parent(user, _optional_id(data, 'parent_id')),
            user_id=_owner_for(user, shared),
            active=parse_flag(data, 'active'),
        )
        with store_transaction(db.session, 'create theme'):
            db.session.add(theme)
        current_app.logger.info("Theme %s created by user %s", theme.theme_id, user.user_id)
        return theme

    @staticmethod
    def update_theme(user: User, theme_id: int, data: Mapping[str, Any]) -> Theme:
        theme = ContentService._get_manageable(Theme, theme_id, 'theme', user)
        with store_transaction(db.session, f"update theme {theme_id}"):
            if 'name' in data:
                theme.name = _text(data, 'name')
            if 'parent_id' in data:
                theme.parent_id = ContentService._validate_parent(user, _optional_id(data, 'parent_id'), theme_id)
        ContentService._apply_active(user, 'theme', theme, data)
        return theme

    @staticmethod
    def delete_theme(user: User, theme_id: int) -> None:
        """Delete a theme; its words and child themes are detached, not deleted."""
        theme = ContentService._get_manageable(Theme, theme_id, 'theme', user)
        level_ids = [level.level_id for level in theme.levels]
        with store_transaction(db.session, f"delete theme {theme_id}"):
            if level_ids:
                Word.query.filter(Word.level_id.in_(level_ids)).update(
                    {Word.level_id: None}, synchronize_session=False
                )
            Word.query.filter(Word.theme_id == theme_id).update({Word.theme_id: None}, synchronize_session=False)
            Theme.query.filter(Theme.parent_id == theme_id).update(
                {Theme.parent_id: None}, synchronize_session=False
            )
            ThemeOverride.query.filter_by(theme_id=theme_id).delete(synchronize_session=False)
            db.session.delete(theme)
        current_app.logger.info("Theme %s deleted by user %s", theme_id, user.user_id)

    # ------------------------------------------------------------------ levels

    @staticmethod
    def create_level(user: User, theme_id: int, data: Mapping[str, Any]) -> Level:
        theme = ContentService._get_manageable(Theme, theme_id, 'theme', user)
        order = _optional_id(data, 'level_order')
        if order is None:
            order = len(theme.levels) + 1
        level = Level(theme_id=theme.theme_id, name=_text(data, 'name'), level_order=order, active=parse_flag(data, 'active'))
        with store_transaction(db.session, f"create level in theme {theme_id}"):
            db.session.add(level)
        return level

    @staticmethod
    def update_level(user: User, level_id: int, data: Mapping[str, Any]) -> Level:
        level = ContentService._get_manageable(Level, level_id, 'level', user)
        with store_transaction(db.session, f"update level {level_id}"):
            if 'name' in data:
                level.name = _text(data, 'name')
            if 'level_order' in data:
                level.level_order = _optional_id(data, 'level_order') or 0
        ContentService._apply_active(user, 'level', level, data)
        return level

    @staticmethod
    def delete_level(user: User, level_id: int) -> None:
        level = ContentService._get_manageable(Level, level_id, 'level', user)
        with store_transaction(db.session, f"delete level {level_id}"):
            Word.query.filter(Word.level_id == level_id).update({Word.level_id: None}, synchronize_session=False)
            db.session.delete(level)

    # ------------------------------------------------------------------ words

    @staticmethod
    def list_words(user: User, theme_id: Optional[int] = None) -> List[Dict[str, Any]]:
        query = Word.query.filter((Word.user_id.is_(None)) | (Word.user_id == user.user_id))
        if theme_id is not None:
            query = query.filter(Word.theme_id == theme_id)
        favorite_ids = {fav.word_id for fav in Favorite.query.filter_by(user_id=user.user_id)}
        result = []
        for word in query.order_by(Word.created_at.desc(), Word.word_id.desc()).all():
            payload = ContentService._describe(word, user)
            payload['favorite'] = word.word_id in favorite_ids
            result.append(payload)
        return result

    @staticmethod
    def _word_fields(user: User, data: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for name, required in (('hebrew', True), ('french', True), ('transliteration', False)):
            if not partial or name in data:
                fields[name] = _text(data, name, required=required)
        if not partial or 'theme_id' in data:
            theme_id = _optional_id(data, 'theme_id')
            if theme_id is not None:
                ContentService._get_visible(Theme, theme_id, 'theme', user)
            fields['theme_id'] = theme_id
        if not partial or 'level_id' in data:
            fields['level_id'] = _optional_id(data, 'level_id')
        if not partial or 'difficulty' in data:
            difficulty = _optional_id(data, 'difficulty') or 1
            if difficulty not in Word.DIFFICULTIES:
                raise ValidationError(errors={'difficulty': 'La difficulté doit être 1, 2 ou 3.'})
            fields['difficulty'] = difficulty
        return fields

    @staticmethod
    def _check_level(theme_id: Optional[int], level_id: Optional[int]) -> None:
        if level_id is None:
            return
        level = db.session.get(Level, level_id)
        if level is None or level.theme_id != theme_id:
            raise ValidationError(errors={'level_id': "Ce niveau n'appartient pas au thème choisi."})

    @staticmethod
    def create_word(user: User, data: Mapping[str, Any], shared: bool = False) -> Word:
        fields = ContentService._word_fields(user, data)
        ContentService._check_level(fields['theme_id'], fields['level_id'])
        word = Word(user_id=_owner_for(user, shared), active=parse_flag(data, 'active'), **fields)
        with store_transaction(db.session, 'create word'):
            db.session.add(word)
        current_app.logger.info("Word %s created by user %s", word.word_id, user.user_id)
        return word

    @staticmethod
    def update_word(user: User, word_id: int, data: Mapping[str, Any]) -> Word:
        word = ContentService._get_manageable(Word, word_id, 'word', user)
        fields = ContentService._word_fields(user, data, partial=True)
        ContentService._check_level(fields.get('theme_id', word.theme_id), fields.get('level_id', word.level_id))
        with store_transaction(db.session, f"update word {word_id}"):
            for name, value in fields.items():
                setattr(word, name, value)
        ContentService._apply_active(user, 'word', word, data)
        return word

    @staticmethod
    def delete_word(user: User, word_id: int) -> None:
        """Delete a word together with the progress, favorites and overrides pointing at it."""
        word = ContentService._get_manageable(Word, word_id, 'word', user)
        with store_transaction(db.session, f"delete word {word_id}"):
            Progress.query.filter_by(word_id=word_id).delete(synchronize_session=False)
            Favorite.query.filter_by(word_id=word_id).delete(synchronize_session=False)
            WordOverride.query.filter_by(word_id=word_id).delete(synchronize_session=False)
            db.session.delete(word)
        current_app.logger.info("Word %s deleted by user %s", word_id, user.user_id)

    @staticmethod
    def toggle_favorite(user: User, word_id: int) -> bool:
        """Flip the favorite marker; returns the new state."""
        ContentService._get_visible(Word, word_id, 'word', user)
        with store_transaction(db.session, f"favorite word {word_id}"):
            existing = Favorite.query.filter_by(user_id=user.user_id, word_id=word_id).first()
            if existing is not None:
                db.session.delete(existing)
                is_favorite = False
            else:
                db.session.add(Favorite(user_id=user.user_id, word_id=word_id))
                is_favorite = True
        return is_favorite

    # ------------------------------------------------------------------ sets

    @staticmethod
    def list_sets(user: User) -> List[Dict[str, Any]]:
        sets = (
            CardSet.query.filter((CardSet.user_id.is_(None)) | (CardSet.user_id == user.user_id))
            .order_by(CardSet.created_at.desc(), CardSet.set_id.desc())
            .all()
        )
        return [ContentService._describe(card_set, user) for card_set in sets]

    @staticmethod
    def get_set(user: User, set_id: int) -> Dict[str, Any]:
        card_set = ContentService._get_visible(CardSet, set_id, 'set', user)
        payload = ContentService._describe(card_set, user)
        payload['cards'] = [ContentService._describe(card, user) for card in card_set.cards]
        return payload

    @staticmethod
    def create_set(user: User, data: Mapping[str, Any], shared: bool = False) -> CardSet:
        card_set = CardSet(
            name=_text(data, 'name'),
            description=_text(data, 'description', required=False),
            user_id=_owner_for(user, shared),
            active=parse_flag(data, 'active'),
        )
        with store_transaction(db.session, 'create set'):
            db.session.add(card_set)
        current_app.logger.info("Set %s created by user %s", card_set.set_id, user.user_id)
        return card_set

    @staticmethod
    def update_set(user: User, set_id: int, data: Mapping[str, Any]) -> CardSet:
        card_set = ContentService._get_manageable(CardSet, set_id, 'set', user)
        with store_transaction(db.session, f"update set {set_id}"):
            if 'name' in data:
                card_set.name = _text(data, 'name')
            if 'description' in data:
                card_set.description = _text(data, 'description', required=False)
        ContentService._apply_active(user, 'set', card_set, data)
        return card_set

    @staticmethod
    def delete_set(user: User, set_id: int) -> None:
        card_set = ContentService._get_manageable(CardSet, set_id, 'set', user)
        card_ids = [card.card_id for card in card_set.cards]
        with store_transaction(db.session, f"delete set {set_id}"):
            if card_ids:
                CardProgress.query.filter(CardProgress.card_id.in_(card_ids)).delete(synchronize_session=False)
                CardOverride.query.filter(CardOverride.card_id.in_(card_ids)).delete(synchronize_session=False)
            SetOverride.query.filter_by(set_id=set_id).delete(synchronize_session=False)
            db.session.delete(card_set)
        current_app.logger.info("Set %s deleted by user %s", set_id, user.user_id)

    # ------------------------------------------------------------------ cards

    @staticmethod
    def _card_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            'hebrew': _text(data, 'hebrew'),
            'french': _text(data, 'french'),
            'transliteration': _text(data, 'transliteration', required=False),
        }

    @staticmethod
    def add_card(user: User, set_id: int, data: Mapping[str, Any]) -> Card:
        card_set = ContentService._get_manageable(CardSet, set_id, 'set', user)
        card = Card(
            set_id=card_set.set_id,
            position=len(card_set.cards),
            active=parse_flag(data, 'active'),
            **ContentService._card_fields(data),
        )
        with store_transaction(db.session, f"add card to set {set_id}"):
            db.session.add(card)
        return card

    @staticmethod
    def update_card(user: User, card_id: int, data: Mapping[str, Any]) -> Card:
        card = ContentService._get_manageable(Card, card_id, 'card', user)
        with store_transaction(db.session, f"update card {card_id}"):
            for name in ('hebrew', 'french', 'transliteration'):
                if name in data:
                    setattr(card, name, _text(data, name, required=name != 'transliteration'))
        ContentService._apply_active(user, 'card', card, data)
        return card

    @staticmethod
    def delete_card(user: User, card_id: int) -> None:
        card = ContentService._get_manageable(Card, card_id, 'card', user)
        with store_transaction(db.session, f"delete card {card_id}"):
            CardProgress.query.filter_by(card_id=card_id).delete(synchronize_session=False)
            CardOverride.query.filter_by(card_id=card_id).delete(synchronize_session=False)
            db.session.delete(card)

    @staticmethod
    def save_cards(user: User, set_id: int, cards: List[Mapping[str, Any]]) -> List[Card]:
        """Replace the cards of a set with ``cards``; list order becomes ``position``.

        Entries carrying a ``card_id`` of the set update that card, others are
        created, and cards missing from the list are deleted.
        """

        card_set = ContentService._get_manageable(CardSet, set_id, 'set', user)
        if not isinstance(cards, list):
            raise ValidationError(errors={'cards': 'Une liste de cartes est attendue.'})

        existing = {card.card_id: card for card in card_set.cards}
        prepared = []
        for index, entry in enumerate(cards):
            try:
                fields = ContentService._card_fields(entry)
            except ValidationError as exc:
                raise ValidationError(errors={f"cards[{index}]": exc.details.get('errors')}) from None
            prepared.append((_optional_id(entry, 'card_id'), fields, entry))

        kept_ids = {card_id for card_id, _, _ in prepared if card_id in existing}
        saved: List[Card] = []
        with store_transaction(db.session, f"save cards of set {set_id}"):
            removed = [card_id for card_id in existing if card_id not in kept_ids]
            if removed:
                CardProgress.query.filter(CardProgress.card_id.in_(removed)).delete(synchronize_session=False)
                CardOverride.query.filter(CardOverride.card_id.in_(removed)).delete(synchronize_session=False)
                for card_id in removed:
                    card_set.cards.remove(existing[card_id])
            for position, (card_id, fields, entry) in enumerate(prepared):
                card = existing.get(card_id)
                if card is None:
                    card = Card(set_id=card_set.set_id, active=parse_flag(entry, 'active'))
                    card_set.cards.append(card)
                for name, value in fields.items():
                    setattr(card, name, value)
                card.position = position
                saved.append(card)
        current_app.logger.info("Set %s saved with %s cards", set_id, len(saved))
        return saved

    @staticmethod
    def toggle_card_flag(user: User, card_id: int, flag: str) -> bool:
        if flag not in CARD_FLAGS:
            raise ValidationError(errors={'flag': f"Drapeau inconnu : {flag}"})
        card = ContentService._get_manageable(Card, card_id, 'card', user)
        with store_transaction(db.session, f"toggle {flag} on card {card_id}"):
            setattr(card, flag, not getattr(card, flag))
        return getattr(card, flag)

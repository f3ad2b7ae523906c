"""
Auth Service - Core authentication logic.

Handles user registration, authentication and admin user management.
Decouples DB logic from Routes.
"""
from typing import Optional

from flask import current_app

from ....core.error_handlers import NotFoundError, ValidationError
from ....extensions import db
from ....models import CardProgress, CardSet, Favorite, Progress, Theme, TrainingSessionRecord, User, Word
from ....models.overrides import CardOverride, SetOverride, ThemeOverride, WordOverride
from ...shared.utils import store_transaction


class AuthService:
    """Service for Authentication related operations."""

    @staticmethod
    def register_user(email: str, display_name: str, password: str, role: str = User.ROLE_USER) -> User:
        user = User(email=email.strip().lower(), display_name=display_name.strip(), user_role=role)
        user.set_password(password)
        with store_transaction(db.session, 'register user'):
            db.session.add(user)
        current_app.logger.info("User registered: %s (%s)", user.email, user.user_id)
        return user

    @staticmethod
    def authenticate_user(email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, ``None`` otherwise."""
        user = User.query.filter_by(email=(email or '').strip().lower()).first()
        if user and user.check_password(password):
            return user
        return None

    @staticmethod
    def get_user(user_id: int) -> User:
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"Utilisateur {user_id} introuvable", resource='user')
        return user

    @staticmethod
    def update_user(user: User, email: str, display_name: str, role: str, password: Optional[str] = None) -> User:
        if role not in User.ROLES:
            raise ValidationError(errors={'user_role': f"Rôle inconnu : {role}"})
        with store_transaction(db.session, f"update user {user.user_id}"):
            user.email = email.strip().lower()
            user.display_name = display_name.strip()
            user.user_role = role
            if password:
                user.set_password(password)
        return user

    @staticmethod
    def delete_user(user: User) -> None:
        """Delete a user with their progress, favorites, overrides, training runs and personal content."""
        user_id = user.user_id
        with store_transaction(db.session, f"delete user {user_id}"):
            for model in (
                Progress, CardProgress, Favorite, TrainingSessionRecord,
                WordOverride, ThemeOverride, SetOverride, CardOverride,
            ):
                model.query.filter_by(user_id=user_id).delete(synchronize_session=False)
            personal_words = [word_id for (word_id,) in db.session.query(Word.word_id).filter_by(user_id=user_id)]
            if personal_words:
                for model in (Progress, Favorite, WordOverride):
                    model.query.filter(model.word_id.in_(personal_words)).delete(synchronize_session=False)
                Word.query.filter(Word.word_id.in_(personal_words)).delete(synchronize_session=False)
            for card_set in CardSet.query.filter_by(user_id=user_id).all():
                card_ids = [card.card_id for card in card_set.cards]
                if card_ids:
                    CardProgress.query.filter(CardProgress.card_id.in_(card_ids)).delete(synchronize_session=False)
                    CardOverride.query.filter(CardOverride.card_id.in_(card_ids)).delete(synchronize_session=False)
                SetOverride.query.filter_by(set_id=card_set.set_id).delete(synchronize_session=False)
                db.session.delete(card_set)
            for theme in Theme.query.filter_by(user_id=user_id).all():
                Word.query.filter(Word.theme_id == theme.theme_id).update({Word.theme_id: None, Word.level_id: None}, synchronize_session=False)
                Theme.query.filter(Theme.parent_id == theme.theme_id).update({Theme.parent_id: None}, synchronize_session=False)
                ThemeOverride.query.filter_by(theme_id=theme.theme_id).delete(synchronize_session=False)
                db.session.delete(theme)
            db.session.delete(user)
        current_app.logger.info("User %s deleted", user_id)

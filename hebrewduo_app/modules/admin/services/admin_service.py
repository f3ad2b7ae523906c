"""
Admin Service - dashboard counts and user management.
"""

from typing import Any, Dict, List

from flask import current_app

from ....core.error_handlers import ValidationError
from ....models import CardSet, Theme, User, Word
from ...auth.services import AuthService
from ...content.services import VisibilityService
from ...training.interface import TrainingInterface


class AdminService:
    @staticmethod
    def get_counts() -> Dict[str, int]:
        return {
            'users': User.query.count(),
            'words': Word.query.count(),
            'themes': Theme.query.count(),
            'sets': CardSet.query.count(),
        }

    @staticmethod
    def list_users() -> List[Dict[str, Any]]:
        users = User.query.order_by(User.created_at.desc(), User.user_id.desc()).all()
        return [user.to_dict() for user in users]

    @staticmethod
    def list_global_words() -> List[Dict[str, Any]]:
        words = Word.query.filter(Word.user_id.is_(None)).order_by(Word.created_at.desc(), Word.word_id.desc()).all()
        return [dict(word.to_dict(), theme_name=word.theme.name if word.theme else None) for word in words]

    @staticmethod
    def list_global_themes() -> List[Dict[str, Any]]:
        themes = Theme.query.filter(Theme.user_id.is_(None)).order_by(Theme.name).all()
        return [dict(theme.to_dict(), parent_name=theme.parent.name if theme.parent else None) for theme in themes]

    @staticmethod
    def create_user(form) -> User:
        if not form.password.data:
            raise ValidationError(errors={'password': ['Mot de passe obligatoire.']})
        return AuthService.register_user(
            form.email.data, form.display_name.data, form.password.data, role=form.user_role.data
        )

    @staticmethod
    def update_user(user: User, form) -> User:
        return AuthService.update_user(
            user, form.email.data, form.display_name.data, form.user_role.data, password=form.password.data or None
        )

    @staticmethod
    def delete_user(admin: User, user_id: int) -> None:
        if admin.user_id == user_id:
            raise ValidationError(errors={'user_id': 'Impossible de supprimer son propre compte.'})
        AuthService.delete_user(AuthService.get_user(user_id))

    @staticmethod
    def reset_progress(user_id: int) -> int:
        AuthService.get_user(user_id)
        deleted = TrainingInterface.reset_user_progress(user_id)
        current_app.logger.info("Admin reset progress of user %s (%s rows)", user_id, deleted)
        return deleted

    @staticmethod
    def set_global_active(admin: User, kind: str, entity_id: int, active: bool):
        return VisibilityService.set_entity_active(admin, kind, entity_id, active)

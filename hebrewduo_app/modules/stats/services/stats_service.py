"""
Stats Service - Simple aggregate counts over a user's progress.
"""

from typing import Any, Dict, List

from sqlalchemy import func, or_

from ....extensions import db
from ....models import CardProgress, Progress, Theme, User, Word
from ...training.interface import TrainingInterface


class StatsService:
    WEAKEST_LIMIT = 10

    @staticmethod
    def get_progress_totals(user_id: int) -> Dict[str, Any]:
        words_seen, total_success, total_fail, avg_strength = (
            db.session.query(
                func.count(func.distinct(Progress.word_id)),
                func.coalesce(func.sum(Progress.success_count), 0),
                func.coalesce(func.sum(Progress.fail_count), 0),
                func.avg(Progress.strength),
            )
            .filter(Progress.user_id == user_id)
            .one()
        )
        cards_seen = (
            db.session.query(func.count(CardProgress.id)).filter(CardProgress.user_id == user_id).scalar() or 0
        )
        return {
            'words_seen': int(words_seen or 0),
            'total_success': int(total_success or 0),
            'total_fail': int(total_fail or 0),
            'avg_strength': round(float(avg_strength), 1) if avg_strength is not None else None,
            'cards_seen': int(cards_seen),
        }

    @staticmethod
    def get_root_themes(user_id: int) -> List[Dict[str, Any]]:
        """Top-level themes visible to the user with the number of words in each."""
        word_count = (
            db.session.query(func.count(Word.word_id))
            .filter(Word.theme_id == Theme.theme_id)
            .correlate(Theme)
            .scalar_subquery()
        )
        rows = (
            db.session.query(Theme, word_count)
            .filter(Theme.parent_id.is_(None), or_(Theme.user_id.is_(None), Theme.user_id == user_id))
            .order_by(Theme.name)
            .all()
        )
        return [dict(theme.to_dict(), word_count=count) for theme, count in rows]

    @staticmethod
    def get_weakest_words(user_id: int, limit: int = WEAKEST_LIMIT) -> List[Dict[str, Any]]:
        rows = (
            db.session.query(Word, Progress)
            .join(Progress, Progress.word_id == Word.word_id)
            .filter(Progress.user_id == user_id)
            .order_by(Progress.strength.asc(), Progress.last_seen.asc())
            .limit(limit)
            .all()
        )
        return [dict(word.to_dict(), **progress.to_dict()) for word, progress in rows]

    @staticmethod
    def get_dashboard(user: User) -> Dict[str, Any]:
        return {
            'stats': StatsService.get_progress_totals(user.user_id),
            'themes': StatsService.get_root_themes(user.user_id),
            'active_session': TrainingInterface.get_session_summary(user.user_id),
        }

    @staticmethod
    def get_profile(user: User) -> Dict[str, Any]:
        return {
            'user': user.to_dict(),
            'stats': StatsService.get_progress_totals(user.user_id),
            'weak_words': StatsService.get_weakest_words(user.user_id),
        }

# File: hebrewduo_app/modules/training/interface.py
# Public API of the training module for other modules.

from typing import Any, Dict, Optional

from .services import ProgressService, TrainingSessionManager


class TrainingInterface:
    @staticmethod
    def get_session_summary(user_id: int) -> Optional[Dict[str, Any]]:
        """Counters and configuration of the user's active session, if any."""
        return TrainingSessionManager.summary(user_id)

    @staticmethod
    def reset_user_progress(user_id: int) -> int:
        """Delete all word and card progress of a user."""
        return ProgressService.reset_user(user_id)

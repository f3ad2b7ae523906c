# File: hebrewduo_app/modules/content/interface.py
# Public API of the content module for other modules.

from typing import Any, Dict, List

from .services import ContentService


def list_visible_themes(user) -> List[Dict[str, Any]]:
    """Global and personal themes of ``user`` that are effectively active, with their levels."""
    return [theme for theme in ContentService.list_themes(user) if theme['effective_active']]


def list_visible_sets(user) -> List[Dict[str, Any]]:
    return [card_set for card_set in ContentService.list_sets(user) if card_set['effective_active']]

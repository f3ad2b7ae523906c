from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union


class DrillMode(str, enum.Enum):
    """How a single round presents its item."""

    FLASHCARDS = 'flashcards'
    FLASHCARDS_REVERSE = 'flashcards_reverse'
    WRITTEN = 'written'

    @property
    def has_options(self) -> bool:
        return self is not DrillMode.WRITTEN


class ReviewMode(str, enum.Enum):
    """Ordering (and for favorites, filtering) of the word source."""

    WEAK = 'weak'
    NEW = 'new'
    RANDOM = 'random'
    FAVORITES = 'favorites'


class Scope(str, enum.Enum):
    """Ownership filter applied to themed words."""

    ALL = 'all'
    MINE = 'mine'
    GLOBAL = 'global'
    NONE = 'none'


class ItemSource(str, enum.Enum):
    WORDS = 'words'
    CARDS = 'cards'


SIZE_ALL = 'all'


@dataclass
class SessionConfig:
    """Validated configuration of a drill run."""

    modes: List[DrillMode] = field(default_factory=lambda: [DrillMode.FLASHCARDS])
    theme_ids: List[int] = field(default_factory=list)
    set_ids: List[int] = field(default_factory=list)
    level_id: Optional[int] = None
    difficulty: Optional[int] = None
    scope: Scope = Scope.ALL
    review_mode: ReviewMode = ReviewMode.WEAK
    size: Union[int, str] = 10

    @property
    def source(self) -> ItemSource:
        return ItemSource.CARDS if self.set_ids else ItemSource.WORDS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'modes': [mode.value for mode in self.modes],
            'theme_ids': list(self.theme_ids),
            'set_ids': list(self.set_ids),
            'level_id': self.level_id,
            'difficulty': self.difficulty,
            'scope': self.scope.value,
            'review_mode': self.review_mode.value,
            'size': self.size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionConfig':
        return cls(
            modes=[DrillMode(mode) for mode in data.get('modes') or [DrillMode.FLASHCARDS.value]],
            theme_ids=list(data.get('theme_ids') or []),
            set_ids=list(data.get('set_ids') or []),
            level_id=data.get('level_id'),
            difficulty=data.get('difficulty'),
            scope=Scope(data.get('scope') or Scope.ALL.value),
            review_mode=ReviewMode(data.get('review_mode') or ReviewMode.WEAK.value),
            size=data.get('size', 10),
        )


@dataclass
class PoolItem:
    """Snapshot of a drillable word or card, enough to pick and render it."""

    item_id: int
    hebrew: str
    transliteration: Optional[str]
    french: str
    strength: int = 0
    last_seen: Optional[datetime] = None
    has_progress: bool = False
    created_at: Optional[datetime] = None

    def label(self, mode: DrillMode) -> str:
        """Label shown on a multiple-choice option for this item."""
        return self.hebrew if mode is DrillMode.FLASHCARDS_REVERSE else self.french

    def prompt(self, mode: DrillMode) -> str:
        return self.french if mode is DrillMode.FLASHCARDS_REVERSE else self.hebrew

    def reveal(self) -> Dict[str, Any]:
        return {
            'id': self.item_id,
            'hebrew': self.hebrew,
            'transliteration': self.transliteration,
            'french': self.french,
        }


@dataclass
class Option:
    id: int
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'label': self.label}


@dataclass
class PickResult:
    item: PoolItem
    options: Optional[List[Option]]
    used_reset: bool = False

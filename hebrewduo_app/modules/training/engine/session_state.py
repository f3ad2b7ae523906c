"""
Training session state machine.

A :class:`TrainingSession` is a plain value stored between requests in a
``training_sessions`` row; the Flask session only references that row.
Its transitions are explicit methods; calling one from the wrong phase raises
:class:`StaleSessionError` and leaves the value untouched.

Phases::

    (none) --start--> READY --record_deal--> ANSWERING --record_answer--> READY | DONE
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ....core.error_handlers import StaleSessionError
from ..schemas import SIZE_ALL, DrillMode, ItemSource, SessionConfig


class SessionPhase(str, enum.Enum):
    READY = 'ready'
    ANSWERING = 'answering'
    DONE = 'done'


@dataclass
class TrainingSession:
    user_id: int
    config: SessionConfig
    total: int
    remaining: int
    answered: int = 0
    correct: int = 0
    phase: SessionPhase = SessionPhase.READY
    used_word_ids: List[int] = field(default_factory=list)
    used_card_ids: List[int] = field(default_factory=list)
    current_item_id: Optional[int] = None
    current_mode: Optional[DrillMode] = None

    @classmethod
    def start(cls, user_id: int, config: SessionConfig, pool_size: int) -> 'TrainingSession':
        """Create a READY session; ``'all'`` declares the pool size as total."""
        total = pool_size if config.size == SIZE_ALL else int(config.size)
        return cls(user_id=user_id, config=config, total=total, remaining=total)

    @property
    def source(self) -> ItemSource:
        return self.config.source

    @property
    def used_ids(self) -> List[int]:
        return self.used_card_ids if self.source is ItemSource.CARDS else self.used_word_ids

    @property
    def is_done(self) -> bool:
        return self.phase is SessionPhase.DONE

    def _require(self, phase: SessionPhase) -> None:
        if self.phase is not phase:
            raise StaleSessionError(f"Action impossible dans l'état {self.phase.value}.")

    def finish_if_exhausted(self) -> bool:
        """Move a READY session with nothing left to DONE."""
        self._require(SessionPhase.READY)
        if self.remaining <= 0:
            self.phase = SessionPhase.DONE
        return self.is_done

    def record_deal(self, item_id: int, mode: DrillMode, used_reset: bool = False) -> None:
        self._require(SessionPhase.READY)
        if self.remaining <= 0:
            raise StaleSessionError('La session est terminée.')
        used = self.used_ids
        if used_reset:
            used.clear()
        if item_id not in used:
            used.append(item_id)
        self.current_item_id = item_id
        self.current_mode = mode
        self.phase = SessionPhase.ANSWERING

    def check_current(self, item_id: int) -> None:
        """Reject answers that do not target the item last dealt."""
        self._require(SessionPhase.ANSWERING)
        if item_id != self.current_item_id:
            raise StaleSessionError("La réponse ne correspond pas à la question en cours.")

    def record_answer(self, item_id: int, is_correct: bool) -> None:
        self.check_current(item_id)
        self.answered += 1
        if is_correct:
            self.correct += 1
        self.remaining -= 1
        self.current_item_id = None
        self.current_mode = None
        self.phase = SessionPhase.READY if self.remaining > 0 else SessionPhase.DONE

    def restart(self) -> None:
        """Reset counters and history, keeping the configuration."""
        self.answered = 0
        self.correct = 0
        self.remaining = self.total
        self.used_word_ids = []
        self.used_card_ids = []
        self.resume()

    def resume(self) -> None:
        """Drop any dealt-but-unanswered item and return to READY."""
        self.current_item_id = None
        self.current_mode = None
        self.phase = SessionPhase.READY if self.remaining > 0 else SessionPhase.DONE

    def counters(self) -> Dict[str, int]:
        return {
            'total': self.total,
            'remaining': self.remaining,
            'answered': self.answered,
            'correct': self.correct,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'config': self.config.to_dict(),
            'total': self.total,
            'remaining': self.remaining,
            'answered': self.answered,
            'correct': self.correct,
            'phase': self.phase.value,
            'used_word_ids': list(self.used_word_ids),
            'used_card_ids': list(self.used_card_ids),
            'current_item_id': self.current_item_id,
            'current_mode': self.current_mode.value if self.current_mode else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrainingSession':
        current_mode = data.get('current_mode')
        return cls(
            user_id=data['user_id'],
            config=SessionConfig.from_dict(data.get('config') or {}),
            total=int(data['total']),
            remaining=int(data['remaining']),
            answered=int(data.get('answered', 0)),
            correct=int(data.get('correct', 0)),
            phase=SessionPhase(data.get('phase', SessionPhase.READY.value)),
            used_word_ids=list(data.get('used_word_ids') or []),
            used_card_ids=list(data.get('used_card_ids') or []),
            current_item_id=data.get('current_item_id'),
            current_mode=DrillMode(current_mode) if current_mode else None,
        )

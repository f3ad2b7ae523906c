"""
Item selection and multiple-choice construction.
Pure logic, no Database access. All randomness flows through the injected
``random.Random`` instance so a seeded source gives reproducible rounds.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..schemas import DrillMode, ItemSource, Option, PickResult, PoolItem, ReviewMode

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _aware(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_answer(text: Optional[str]) -> str:
    """Case-fold and collapse whitespace for written-answer comparison."""
    return ' '.join((text or '').split()).casefold()


def check_written_answer(response: Optional[str], expected: Optional[str]) -> bool:
    return bool(normalize_answer(expected)) and normalize_answer(response) == normalize_answer(expected)


class ItemPicker:
    def __init__(self, rng: Optional[random.Random] = None, option_count: int = 4):
        self.rng = rng or random.Random()
        self.option_count = option_count

    def available(self, pool: Sequence[PoolItem], used_ids: Sequence[int]) -> tuple[List[PoolItem], bool]:
        """Pool members not yet used; the full pool when everything was used."""
        used = set(used_ids)
        remaining = [item for item in pool if item.item_id not in used]
        if remaining:
            return remaining, False
        return list(pool), True

    def choose(self, candidates: Sequence[PoolItem], source: ItemSource, review_mode: ReviewMode) -> PoolItem:
        if source is ItemSource.CARDS or review_mode in (ReviewMode.RANDOM, ReviewMode.FAVORITES):
            return self.rng.choice(list(candidates))
        if review_mode is ReviewMode.NEW:
            # unseen first, newest first
            return min(
                candidates,
                key=lambda item: (item.has_progress, -_aware(item.created_at).timestamp(), -item.item_id),
            )
        return min(candidates, key=lambda item: (item.strength, _aware(item.last_seen), item.item_id))

    def build_options(self, item: PoolItem, pool: Sequence[PoolItem], mode: DrillMode) -> List[Option]:
        """Up to ``option_count - 1`` distractors plus the item, uniformly shuffled."""
        others = [candidate for candidate in pool if candidate.item_id != item.item_id]
        distractors = self.rng.sample(others, min(len(others), self.option_count - 1))
        options = [Option(id=d.item_id, label=d.label(mode)) for d in distractors]
        options.append(Option(id=item.item_id, label=item.label(mode)))
        for i in range(len(options) - 1, 0, -1):
            j = self.rng.randint(0, i)
            options[i], options[j] = options[j], options[i]
        return options

    def pick(
        self,
        pool: Sequence[PoolItem],
        used_ids: Sequence[int],
        mode: DrillMode,
        source: ItemSource = ItemSource.WORDS,
        review_mode: ReviewMode = ReviewMode.WEAK,
    ) -> PickResult:
        if not pool:
            raise ValueError('cannot pick from an empty pool')
        candidates, used_reset = self.available(pool, used_ids)
        item = self.choose(candidates, source, review_mode)
        options = self.build_options(item, pool, mode) if mode.has_options else None
        return PickResult(item=item, options=options, used_reset=used_reset)

    def pick_mode(self, modes: Sequence[DrillMode]) -> DrillMode:
        return self.rng.choice(list(modes))

"""Questions buried for the rest of the day."""

import logging
from datetime import date

from mneme.domain.interfaces import PostponementStore
from mneme.domain.models import Question

logger = logging.getLogger(__name__)


class QuestionPostponementList:
    """
    Set of question ids hidden from review on a single day.

    Ids recorded for an earlier day are ignored, so a buried question comes
    back automatically the next day.
    """

    def __init__(self, store: PostponementStore, day: date, question_ids: list[str] | None = None):
        self.store = store
        self.day = day
        self._ids: set[str] = set(question_ids or [])

    @classmethod
    async def load(cls, store: PostponementStore, today: date) -> "QuestionPostponementList":
        day, ids = await store.load()
        if day != today:
            if ids:
                logger.debug(f"[postpone] Discarding {len(ids)} ids buried on {day}")
            ids = []
        return cls(store, today, ids)

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def question_ids(self) -> list[str]:
        return sorted(self._ids)

    def add(self, question: Question) -> None:
        self._ids.add(question.question_id)

    def contains(self, question: Question, on: date | None = None) -> bool:
        if on is not None and on != self.day:
            return False
        return question.question_id in self._ids

    def clear_if_stale(self, today: date) -> bool:
        """Forget ids from another day. Returns True if anything changed."""
        if today == self.day:
            return False
        changed = bool(self._ids)
        self._ids.clear()
        self.day = today
        return changed

    async def write(self) -> None:
        await self.store.save(self.day, self.question_ids)

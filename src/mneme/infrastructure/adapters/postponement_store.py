import json
import logging
from datetime import date
from pathlib import Path

from mneme.domain.errors import PersistenceError
from mneme.domain.interfaces import PostponementStore

logger = logging.getLogger(__name__)


class JsonPostponementStore(PostponementStore):
    """Stores ``{"day": "YYYY-MM-DD", "questions": [...]}`` in a JSON file."""

    def __init__(self, path: Path):
        self.path = path

    async def load(self) -> tuple[date | None, list[str]]:
        if not self.path.exists():
            return None, []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            day = date.fromisoformat(data["day"]) if data.get("day") else None
            return day, [str(q) for q in data.get("questions", [])]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable postponement file {self.path}: {e}")
            return None, []

    async def save(self, day: date, question_ids: list[str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = {"day": day.isoformat(), "questions": question_ids}
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(str(self.path), f"write failed: {e}") from e


class InMemoryPostponementStore(PostponementStore):
    def __init__(self, day: date | None = None, question_ids: list[str] | None = None):
        self.day = day
        self.question_ids = list(question_ids or [])

    async def load(self) -> tuple[date | None, list[str]]:
        return self.day, list(self.question_ids)

    async def save(self, day: date, question_ids: list[str]) -> None:
        self.day = day
        self.question_ids = list(question_ids)

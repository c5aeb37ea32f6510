"""
Ports (interfaces) for the collaborators the review core depends on.

Application services depend on these abstractions; concrete adapters live in
``mneme.infrastructure``.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Protocol

from mneme.domain.errors import PersistenceError
from mneme.domain.models import Question

logger = logging.getLogger(__name__)


def _find_block(lines: list[str], block: list[str], near: int) -> int | None:
    """Start of the run of lines equal to ``block`` closest to ``near``, or None."""
    n = len(block)

    def matches(start: int) -> bool:
        return [line.rstrip() for line in lines[start : start + n]] == block

    if 0 <= near and matches(near):
        return near
    found = [s for s in range(len(lines) - n + 1) if matches(s)]
    if not found:
        return None
    return min(found, key=lambda s: abs(s - near))


class Clock(Protocol):
    def today(self) -> date: ...


class ClozeDetector(Protocol):
    def is_cloze_line(self, line: str, patterns: list[str]) -> bool: ...


class NoteStore(ABC):
    """
    Port for reading and writing note text.

    Implementations:
        - FileNoteStore: Markdown files below a vault directory.
        - InMemoryNoteStore: A dict of note id -> text.
    """

    def __init__(self, initial_interval: int, base_ease: int):
        self.initial_interval = initial_interval
        self.base_ease = base_ease

    @abstractmethod
    async def list_notes(self) -> list[str]:
        """Return the identifiers of every note, in a stable order."""
        pass

    @abstractmethod
    async def read_note_text(self, note_id: str) -> str:
        """
        Fetch the full text of a note.

        Raises:
            PersistenceError: If the note cannot be read.
        """
        pass

    @abstractmethod
    async def write_note_text(self, note_id: str, text: str) -> None:
        """
        Replace the full text of a note.

        Raises:
            PersistenceError: If the note cannot be written.
        """
        pass

    async def write_question(self, question: Question, text: str | None = None) -> None:
        """
        Rewrite one question in its note, with its cards' current schedules.

        The question's lines are replaced in place. If other edits moved them,
        the identical block closest to the remembered position is used.

        Args:
            question: The question to persist.
            text: Replacement question text; defaults to the current text.

        Raises:
            PersistenceError: If the question's lines are no longer in the note.
        """
        note_text = await self.read_note_text(question.note_id)
        newline = "\r\n" if "\r\n" in note_text else "\n"
        lines = note_text.split(newline)

        start = _find_block(lines, question.note_text.split("\n"), question.first_line)
        if start is None:
            raise PersistenceError(question.note_id, "question text no longer present in note")

        new = question.format_for_note(self.initial_interval, self.base_ease, text=text)
        end = start + question.note_text.count("\n") + 1
        updated = newline.join(lines[:start] + new.split("\n") + lines[end:])
        if updated != note_text:
            await self.write_note_text(question.note_id, updated)
            logger.debug(
                f"[write] {question.note_id}:{start}: updated question {question.question_id}"
            )
        question.note_text = new
        question.first_line = start

    async def write_schedule(self, question: Question) -> None:
        """Persist the schedules of ``question``'s cards into its note."""
        await self.write_question(question)


class PostponementStore(ABC):
    """Port for persisting the list of questions buried for the day."""

    @abstractmethod
    async def load(self) -> tuple[date | None, list[str]]:
        """Return (day the list applies to, question ids)."""
        pass

    @abstractmethod
    async def save(self, day: date, question_ids: list[str]) -> None:
        pass

"""
Note storage adapters.

Note ids are POSIX paths relative to the vault root, e.g. ``biology/cells.md``.
"""

import logging
from pathlib import Path

from mneme.application.utils.fs import iter_markdown_files
from mneme.domain.errors import PersistenceError
from mneme.domain.interfaces import NoteStore


class FileNoteStore(NoteStore):
    """Markdown files below a vault directory."""

    def __init__(self, root: Path, initial_interval: int, base_ease: int):
        super().__init__(initial_interval, base_ease)
        self.root = root
        self.logger = logging.getLogger(__name__)

    def _path(self, note_id: str) -> Path:
        if self.root.is_file():
            return self.root
        return self.root / note_id

    async def list_notes(self) -> list[str]:
        if self.root.is_file():
            return [self.root.name]
        return [p.relative_to(self.root).as_posix() for p in iter_markdown_files(self.root)]

    async def read_note_text(self, note_id: str) -> str:
        try:
            return self._path(note_id).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(note_id, f"read failed: {e}") from e

    async def write_note_text(self, note_id: str, text: str) -> None:
        try:
            self._path(note_id).write_text(text, encoding="utf-8")
        except OSError as e:
            self.logger.error(f"[error] write {note_id}: {e}")
            raise PersistenceError(note_id, f"write failed: {e}") from e
        self.logger.debug(f"[write] {note_id}: {len(text)} chars")


class InMemoryNoteStore(NoteStore):
    """Notes held in a dict; used by tests and when embedding mneme."""

    def __init__(self, notes: dict[str, str], initial_interval: int = 1, base_ease: int = 250):
        super().__init__(initial_interval, base_ease)
        self.notes = dict(notes)

    async def list_notes(self) -> list[str]:
        return sorted(self.notes)

    async def read_note_text(self, note_id: str) -> str:
        try:
            return self.notes[note_id]
        except KeyError as e:
            raise PersistenceError(note_id, "no such note") from e

    async def write_note_text(self, note_id: str, text: str) -> None:
        if note_id not in self.notes:
            raise PersistenceError(note_id, "no such note")
        self.notes[note_id] = text

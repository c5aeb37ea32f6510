import logging
from dataclasses import dataclass, field
from datetime import date

from mneme.application.card_builder import CardBuilder
from mneme.domain.deck import Deck
from mneme.domain.errors import PersistenceError
from mneme.domain.histogram import DueDateHistogram
from mneme.domain.interfaces import NoteStore
from mneme.domain.models import Question


@dataclass
class VaultLoadResult:
    """Everything a review session needs from the vault."""

    deck_tree: Deck
    histogram: DueDateHistogram
    questions: list[Question] = field(default_factory=list)
    notes_scanned: int = 0
    notes_skipped: list[str] = field(default_factory=list)

    @property
    def card_count(self) -> int:
        return sum(len(q.cards) for q in self.questions)


class VaultService:
    def __init__(self, store: NoteStore, builder: CardBuilder):
        self.store = store
        self.builder = builder
        self.logger = logging.getLogger(__name__)

    async def load(self, today: date) -> VaultLoadResult:
        """
        Read every note, build its questions and cards, and assemble the
        original deck tree plus a histogram of every scheduled card.
        """
        result = VaultLoadResult(deck_tree=Deck("root"), histogram=DueDateHistogram())

        for note_id in await self.store.list_notes():
            result.notes_scanned += 1
            try:
                text = await self.store.read_note_text(note_id)
            except PersistenceError as e:
                self.logger.warning(f"[vault] Skipped {note_id}: {e}")
                result.notes_skipped.append(note_id)
                continue

            questions = self.builder.build_note_questions(note_id, text, today)
            if not questions:
                self.logger.debug(f"[vault] {note_id}: no flashcards")
                continue

            for question in questions:
                result.questions.append(question)
                for card in question.cards:
                    result.deck_tree.append_card(question.topic_path, card)
                    if card.has_schedule:
                        result.histogram.increment(card.schedule.due_offset(today))  # type: ignore[union-attr]

            self.logger.debug(
                f"[vault] Accepted {note_id} questions={len(questions)} "
                f"cards={sum(len(q.cards) for q in questions)}"
            )

        self.logger.info(
            f"[vault] Loaded {result.card_count} cards from {len(result.questions)} questions "
            f"in {result.notes_scanned} notes"
        )
        return result

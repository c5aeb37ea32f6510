"""
Review session state machine.

The sequencer holds two deck trees: the original tree, which is never
modified during a session and provides totals, and the remaining tree, the
live queue cards are removed from as they are answered.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from mneme.application.deck_iterator import DeckTreeIterator
from mneme.application.postponement import QuestionPostponementList
from mneme.application.scheduler import OsrScheduler
from mneme.domain.deck import Deck, DeckTreeFilter
from mneme.domain.errors import PersistenceError, SequencerStateError
from mneme.domain.histogram import DueDateHistogram
from mneme.domain.interfaces import NoteStore
from mneme.domain.models import Card, CardListType, Question, ReviewMode, ReviewResponse
from mneme.domain.schedule import ScheduleInfo
from mneme.domain.topic_path import EMPTY_TOPIC_PATH, TopicPath

logger = logging.getLogger(__name__)


class SequencerState(str, Enum):
    IDLE = "idle"
    FRONT_SHOWN = "front_shown"
    BACK_SHOWN = "back_shown"
    SESSION_COMPLETE = "session_complete"


@dataclass(frozen=True)
class DeckStats:
    due_count: int
    new_count: int
    total_count: int


class FlashcardReviewSequencer:
    def __init__(
        self,
        review_mode: ReviewMode,
        iterator: DeckTreeIterator,
        scheduler: OsrScheduler,
        postponement_list: QuestionPostponementList,
        histogram: DueDateHistogram,
        store: NoteStore,
        today: date,
        bury_sibling_cards: bool = False,
    ):
        self.review_mode = review_mode
        self.iterator = iterator
        self.scheduler = scheduler
        self.postponement_list = postponement_list
        self.histogram = histogram
        self.store = store
        self.today = today
        self.bury_sibling_cards = bury_sibling_cards

        self._original_deck_tree: Deck | None = None
        self._remaining_deck_tree: Deck | None = None
        self._state = SequencerState.IDLE
        self._dirty: list[Question] = []

    # ---------- Read-only views ----------

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def has_current_card(self) -> bool:
        return self.iterator.current_card is not None

    @property
    def current_card(self) -> Card | None:
        return self.iterator.current_card

    @property
    def current_question(self) -> Question | None:
        card = self.current_card
        return card.question if card is not None else None

    @property
    def current_deck(self) -> Deck | None:
        return self.iterator.current_deck

    @property
    def original_deck_tree(self) -> Deck | None:
        return self._original_deck_tree

    @property
    def remaining_deck_tree(self) -> Deck | None:
        return self._remaining_deck_tree

    @property
    def dirty_questions(self) -> list[Question]:
        """Questions whose last schedule write failed and are ahead of the note on disk."""
        return list(self._dirty)

    def get_deck_stats(self, topic_path: TopicPath) -> DeckStats:
        """Due/new counts from the remaining tree, total from the original tree."""
        original = self._original_deck_tree.get_deck(topic_path) if self._original_deck_tree else None
        remaining = (
            self._remaining_deck_tree.get_deck(topic_path) if self._remaining_deck_tree else None
        )
        total = original.get_distinct_card_count(CardListType.ALL, True) if original else 0
        if remaining is None:
            return DeckStats(0, 0, total)
        return DeckStats(
            due_count=remaining.get_distinct_card_count(CardListType.DUE, True),
            new_count=remaining.get_distinct_card_count(CardListType.NEW, True),
            total_count=total,
        )

    # ---------- Session setup ----------

    def build_remaining_deck_tree(self, original: Deck) -> Deck:
        return DeckTreeFilter.filter_for_remaining_cards(
            lambda q: self.postponement_list.contains(q, on=self.today),
            original,
            self.review_mode,
            self.today,
        )

    def set_deck_tree(self, original: Deck, remaining: Deck) -> None:
        self._original_deck_tree = original
        self._remaining_deck_tree = remaining
        self.iterator.set_base_deck(remaining)
        self.set_current_deck(EMPTY_TOPIC_PATH)

    def set_current_deck(self, topic_path: TopicPath) -> None:
        self.iterator.set_iterator_topic_path(topic_path)
        self.iterator.next_card()
        self._after_advance()

    def show_answer(self) -> None:
        if self._state not in (SequencerState.FRONT_SHOWN, SequencerState.BACK_SHOWN):
            raise SequencerStateError("no card is being reviewed")
        self._state = SequencerState.BACK_SHOWN

    def _after_advance(self) -> None:
        if self._remaining_deck_tree is None:
            self._state = SequencerState.IDLE
        elif self.iterator.current_card is None:
            self._state = SequencerState.SESSION_COMPLETE
            logger.debug(f"[review] No cards left under '{self.iterator.topic_path}'")
        else:
            self._state = SequencerState.FRONT_SHOWN

    def _require_current_card(self) -> Card:
        card = self.iterator.current_card
        if card is None:
            raise SequencerStateError("no current card")
        return card

    # ---------- Transitions ----------

    def skip_current_card(self) -> None:
        self._require_current_card()
        self.iterator.delete_current_question_from_all_decks()
        self._after_advance()

    def determine_card_schedule(self, response: ReviewResponse, card: Card) -> ScheduleInfo:
        """Compute the next schedule for ``card``; updates the histogram for non-reset responses."""
        return self.scheduler.compute_schedule(response, card.schedule, self.histogram, self.today)

    async def process_review(self, response: ReviewResponse) -> None:
        """
        Apply ``response`` to the current card and advance the session.

        Raises:
            SequencerStateError: If there is no current card.
            PersistenceError: If writing the schedule or the postponement list
                failed. The session has already advanced when this is raised.
        """
        self._require_current_card()
        if self.review_mode is ReviewMode.CRAM:
            self._process_review_cram_mode(response)
            self._after_advance()
            return

        try:
            await self._process_review_review_mode(response)
        finally:
            self._after_advance()

    async def _process_review_review_mode(self, response: ReviewResponse) -> None:
        card = self._require_current_card()
        question = card.question
        was_new = not card.has_schedule
        errors: list[PersistenceError] = []

        if not (response is ReviewResponse.RESET and was_new):
            old = card.schedule
            new = self.determine_card_schedule(response, card)
            if response is ReviewResponse.RESET and old is not None:
                # The card is new again, so it no longer occupies a day
                self.histogram.decrement(old.due_offset(self.today))
            card.schedule = new

            if question is not None:
                try:
                    await self.store.write_schedule(question)
                    self._mark_clean(question)
                except PersistenceError as e:
                    logger.error(f"[review] Failed to save schedule for {question.note_id}: {e}")
                    self._mark_dirty(question)
                    errors.append(e)

        if response is ReviewResponse.RESET or (response is ReviewResponse.HARD and was_new):
            self.iterator.move_current_card_to_end_of_list()
            self.iterator.next_card()
        elif self.bury_sibling_cards:
            try:
                await self._bury_sibling_cards(card)
            except PersistenceError as e:
                errors.append(e)
            self.iterator.delete_current_question_from_all_decks()
        else:
            self.iterator.delete_current_card_from_all_decks()

        if errors:
            raise errors[0]

    async def _bury_sibling_cards(self, card: Card) -> None:
        # Only bury when siblings are still queued; single-card questions are left alone.
        deck = self.current_deck
        question = card.question
        if deck is None or question is None:
            return
        if deck.get_question_card_count(question) > 1:
            self.postponement_list.add(question)
            await self.postponement_list.write()

    def _process_review_cram_mode(self, response: ReviewResponse) -> None:
        if response is ReviewResponse.EASY:
            self.iterator.delete_current_card_from_all_decks()
        else:
            self.iterator.move_current_card_to_end_of_list()
            self.iterator.next_card()

    async def update_current_question_text(self, text: str) -> None:
        """Replace the current question's text in its note, keeping its schedules."""
        question = self.current_question
        if question is None:
            raise SequencerStateError("no current question")
        await self.store.write_question(question, text=text)

    def reload_cards_for_date(self, day: date) -> None:
        """
        Rebuild the remaining tree as of ``day``, keeping the selected deck when possible.

        Only forward moves are supported; the postponement list is re-dated to ``day``.
        """
        if self._original_deck_tree is None:
            raise SequencerStateError("no deck tree loaded")

        topic_path = self.iterator.topic_path
        self.histogram.rebase((day - self.today).days)
        self.today = day
        self.postponement_list.clear_if_stale(day)

        original = self._original_deck_tree.clone()
        remaining = self.build_remaining_deck_tree(original)
        self.set_deck_tree(original, remaining)
        if not topic_path.is_empty and original.get_deck(topic_path) is not None:
            self.set_current_deck(topic_path)

    # ---------- Dirty tracking ----------

    def _mark_dirty(self, question: Question) -> None:
        if not any(q is question for q in self._dirty):
            self._dirty.append(question)

    def _mark_clean(self, question: Question) -> None:
        self._dirty = [q for q in self._dirty if q is not question]

    async def flush_dirty(self) -> int:
        """Retry writing questions whose save failed. Returns how many are still dirty."""
        for question in list(self._dirty):
            try:
                await self.store.write_schedule(question)
                self._mark_clean(question)
            except PersistenceError as e:
                logger.warning(f"[review] Still unable to save {question.note_id}: {e}")
        return len(self._dirty)

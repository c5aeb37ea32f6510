"""
Domain models for parsed questions and reviewable cards.

These are plain data structures; parsing and scheduling live in the
application layer.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from mneme.domain.schedule import ScheduleInfo, format_schedule_comment, split_schedule_comment
from mneme.domain.topic_path import EMPTY_TOPIC_PATH, TopicPath


class CardType(str, Enum):
    SINGLE_LINE_BASIC = "SingleLineBasic"
    SINGLE_LINE_REVERSED = "SingleLineReversed"
    MULTI_LINE_BASIC = "MultiLineBasic"
    MULTI_LINE_REVERSED = "MultiLineReversed"
    CLOZE = "Cloze"
    HEADER_BASIC = "HeaderBasic"

    @property
    def is_single_line(self) -> bool:
        return self in (CardType.SINGLE_LINE_BASIC, CardType.SINGLE_LINE_REVERSED)


class ReviewResponse(str, Enum):
    EASY = "easy"
    GOOD = "good"
    HARD = "hard"
    RESET = "reset"


class ReviewMode(str, Enum):
    REVIEW = "review"
    CRAM = "cram"


class CardListType(str, Enum):
    NEW = "new"
    DUE = "due"
    ALL = "all"


class CardPhase(str, Enum):
    NEW = "new"
    DUE = "due"
    SCHEDULED = "scheduled"


@dataclass(frozen=True)
class ParsedQuestion:
    """
    One block of note text recognised as a question.

    Attributes:
        card_type: Kind of question found.
        text: The block's text (trailing whitespace trimmed).
        first_line: First line of the block (0-based).
        last_line: Last line of the block (inclusive).
    """

    card_type: CardType
    text: str
    first_line: int
    last_line: int


@dataclass(eq=False)
class Card:
    """
    A single front/back pair. Its phase is always derived from ``schedule``.
    """

    card_index: int
    front: str
    back: str
    schedule: ScheduleInfo | None = None
    question: "Question | None" = field(default=None, repr=False)

    @property
    def has_schedule(self) -> bool:
        return self.schedule is not None and not self.schedule.is_new

    @property
    def is_new(self) -> bool:
        return not self.has_schedule

    def is_due(self, today: date) -> bool:
        return self.has_schedule and self.schedule.is_due(today)  # type: ignore[union-attr]

    def phase_on(self, today: date) -> CardPhase:
        if not self.has_schedule:
            return CardPhase.NEW
        if self.is_due(today):
            return CardPhase.DUE
        return CardPhase.SCHEDULED


@dataclass(eq=False)
class Question:
    """
    A parsed question bound to its note, deck and sibling cards.

    ``note_text`` is the exact text currently stored in the note for this
    question and ``first_line`` is where it starts; together they locate the
    lines replaced when the schedule is written back.
    """

    note_id: str
    parsed: ParsedQuestion
    topic_path: TopicPath = EMPTY_TOPIC_PATH
    note_text: str = ""
    cards: list[Card] = field(default_factory=list)
    comment_on_same_line: bool = False
    first_line: int = -1

    def __post_init__(self):
        if not self.note_text:
            self.note_text = self.parsed.text
        if self.first_line < 0:
            self.first_line = self.parsed.first_line

    @property
    def last_line(self) -> int:
        return self.first_line + self.note_text.count("\n")

    @property
    def card_type(self) -> CardType:
        return self.parsed.card_type

    @property
    def actual_text(self) -> str:
        """Question text without its schedule comment."""
        return split_schedule_comment(self.note_text)[0]

    @property
    def question_id(self) -> str:
        """Identity that survives re-parsing the same note."""
        digest = hashlib.sha256(f"{self.note_id}\n{self.actual_text}".encode("utf-8"))
        return digest.hexdigest()[:16]

    def set_cards(self, cards: list[Card]) -> None:
        for card in cards:
            card.question = self
        self.cards = cards

    def format_for_note(self, initial_interval: int, base_ease: int, text: str | None = None) -> str:
        """Render the question as it should appear in the note, with a fresh schedule comment."""
        body = self.actual_text if text is None else text.rstrip()
        comment = format_schedule_comment(
            [c.schedule for c in self.cards], initial_interval, base_ease
        )
        if not comment:
            return body
        sep = " " if self.comment_on_same_line and self.card_type.is_single_line else "\n"
        return f"{body}{sep}{comment}"

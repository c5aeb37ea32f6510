"""
Schedule records and their on-disk encoding.

A schedule is written as a trailing HTML comment after a question, one
``!<due>,<interval>,<ease>`` segment per sibling card:

    <!--SR:!2023-09-02,4,270!2000-01-01,1,250-->

Segments carrying the dummy due date belong to cards that were never reviewed.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime

from mneme.consts import (
    DUMMY_DUE_DATE_FOR_NEW_CARD,
    SCHEDULE_COMMENT_PREFIX,
    SCHEDULE_COMMENT_SUFFIX,
    SCHEDULE_DATE_FORMAT,
)

SCHEDULE_COMMENT_RE = re.compile(r"<!--SR:((?:!\d{4}-\d{2}-\d{2},[\d.]+,[\d.]+)+)-->")
SCHEDULE_SEGMENT_RE = re.compile(r"!(\d{4}-\d{2}-\d{2}),([\d.]+),([\d.]+)")


@dataclass(frozen=True)
class ScheduleInfo:
    """
    Review schedule of a single card.

    Attributes:
        due_date: Next review day; None for a card that was never reviewed.
        interval: Days between the previous and the next review (whole days).
        ease: Growth factor in percent (250 = x2.5).
        days_overdue: How many days late the card was when the record was read.
    """

    due_date: date | None
    interval: int
    ease: int
    days_overdue: int | None = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "interval", int(round(self.interval)))
        object.__setattr__(self, "ease", int(round(self.ease)))

    @classmethod
    def new_card(cls, initial_interval: int, base_ease: int) -> "ScheduleInfo":
        """Placeholder schedule for a card that has not been reviewed yet."""
        return cls(due_date=None, interval=initial_interval, ease=base_ease)

    @classmethod
    def from_due_date_str(
        cls, due_date_str: str, interval: float, ease: float, today: date | None = None
    ) -> "ScheduleInfo":
        due = datetime.strptime(due_date_str, SCHEDULE_DATE_FORMAT).date()
        overdue = (today - due).days if today is not None else None
        return cls(due_date=due, interval=interval, ease=ease, days_overdue=overdue)

    @property
    def is_new(self) -> bool:
        return self.due_date is None

    def is_due(self, today: date) -> bool:
        return self.due_date is not None and self.due_date <= today

    def due_offset(self, today: date) -> int:
        """Days from today until due; overdue cards count as due today."""
        if self.due_date is None:
            raise ValueError("a new card has no due offset")
        return max(0, (self.due_date - today).days)

    def format_segment(self) -> str:
        if self.due_date is None:
            due = DUMMY_DUE_DATE_FOR_NEW_CARD
        else:
            due = self.due_date.strftime(SCHEDULE_DATE_FORMAT)
        return f"!{due},{self.interval},{self.ease}"


def format_schedule_comment(
    schedules: list[ScheduleInfo | None], initial_interval: int, base_ease: int
) -> str:
    """
    Encode sibling schedules as a single ``<!--SR:...-->`` comment.

    Returns an empty string when none of the cards has been reviewed.
    """
    if all(s is None or s.is_new for s in schedules):
        return ""
    segments = []
    for s in schedules:
        if s is None:
            s = ScheduleInfo.new_card(initial_interval, base_ease)
        segments.append(s.format_segment())
    return SCHEDULE_COMMENT_PREFIX + "".join(segments) + SCHEDULE_COMMENT_SUFFIX


def parse_schedule_comment(text: str, today: date | None = None) -> list[ScheduleInfo | None]:
    """
    Decode the first schedule comment found in ``text``.

    Segments with the dummy due date decode to None (a new card).
    """
    m = SCHEDULE_COMMENT_RE.search(text)
    if not m:
        return []

    result: list[ScheduleInfo | None] = []
    for due_str, interval, ease in SCHEDULE_SEGMENT_RE.findall(m.group(1)):
        if due_str == DUMMY_DUE_DATE_FOR_NEW_CARD:
            result.append(None)
            continue
        result.append(
            ScheduleInfo.from_due_date_str(due_str, float(interval), float(ease), today=today)
        )
    return result


def split_schedule_comment(text: str) -> tuple[str, str]:
    """
    Separate question text from its trailing schedule comment.

    Returns (text_without_comment, comment). The comment is empty when absent.
    """
    m = None
    for m in SCHEDULE_COMMENT_RE.finditer(text):
        pass
    if m is None or text[m.end() :].strip():
        return text.rstrip(), ""
    return text[: m.start()].rstrip(), m.group(0)

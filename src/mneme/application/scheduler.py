"""
Ease/interval scheduling with load-balanced placement of new cards.

- Hard lowers ease by 20 (never below the minimum) and shrinks the interval.
- Good keeps ease and multiplies the interval by ease / 100.
- Easy raises ease by 20 and applies the easy bonus on top.

Cards reviewed late get credit for the extra days they were remembered:
all of them on Easy, half on Good, a quarter on Hard, capped at a multiple
of the previous interval.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from mneme.domain import constants as c
from mneme.domain.errors import ScheduleComputationError
from mneme.domain.histogram import DueDateHistogram
from mneme.domain.models import ReviewResponse
from mneme.domain.schedule import ScheduleInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulingParameters:
    base_ease: int = c.DEFAULT_BASE_EASE
    minimum_ease: int = c.DEFAULT_MINIMUM_EASE
    lapses_interval_change: float = c.DEFAULT_LAPSES_INTERVAL_CHANGE
    easy_bonus: float = c.DEFAULT_EASY_BONUS
    maximum_interval: int = c.DEFAULT_MAXIMUM_INTERVAL
    initial_interval: int = c.DEFAULT_INITIAL_INTERVAL
    new_card_interval_hard: int = c.DEFAULT_NEW_CARD_INTERVAL_HARD
    new_card_interval_good: int = c.DEFAULT_NEW_CARD_INTERVAL_GOOD
    new_card_interval_easy: int = c.DEFAULT_NEW_CARD_INTERVAL_EASY
    max_overdue_credit_factor: float = c.DEFAULT_MAX_OVERDUE_CREDIT_FACTOR
    load_balance_window: int = c.DEFAULT_LOAD_BALANCE_WINDOW

    @classmethod
    def from_config(cls, config) -> "SchedulingParameters":
        return cls(**{name: getattr(config, name) for name in cls.__dataclass_fields__})

    def validate(self) -> None:
        if self.base_ease <= 0:
            raise ScheduleComputationError(f"base_ease must be positive, got {self.base_ease}")
        if self.minimum_ease <= 0:
            raise ScheduleComputationError(
                f"minimum_ease must be positive, got {self.minimum_ease}"
            )
        if self.minimum_ease > self.base_ease:
            raise ScheduleComputationError(
                f"minimum_ease ({self.minimum_ease}) exceeds base_ease ({self.base_ease})"
            )
        for name in (
            "initial_interval",
            "maximum_interval",
            "new_card_interval_hard",
            "new_card_interval_good",
            "new_card_interval_easy",
            "load_balance_window",
        ):
            if getattr(self, name) <= 0:
                raise ScheduleComputationError(f"{name} must be positive")
        if not 0 < self.lapses_interval_change <= 1:
            raise ScheduleComputationError("lapses_interval_change must be in (0, 1]")
        if self.easy_bonus < 1:
            raise ScheduleComputationError("easy_bonus must be at least 1")
        if self.max_overdue_credit_factor < 0:
            raise ScheduleComputationError("max_overdue_credit_factor must not be negative")


class OsrScheduler:
    """
    Turns review responses into new schedules.

    The histogram passed to ``compute_schedule`` is updated in place: a new
    card adds one entry on its chosen day, a rescheduled card moves its entry
    from the old due day to the new one.
    """

    def __init__(self, params: SchedulingParameters):
        params.validate()
        self.params = params

    def reset_schedule(self) -> ScheduleInfo:
        return ScheduleInfo.new_card(self.params.initial_interval, self.params.base_ease)

    def compute_schedule(
        self,
        response: ReviewResponse,
        existing: ScheduleInfo | None,
        histogram: DueDateHistogram,
        today: date,
    ) -> ScheduleInfo:
        if response is ReviewResponse.RESET:
            return self.reset_schedule()
        if existing is None or existing.is_new:
            return self.new_card_schedule(response, histogram, today)
        return self.updated_schedule(response, existing, histogram, today)

    def new_card_schedule(
        self, response: ReviewResponse, histogram: DueDateHistogram, today: date
    ) -> ScheduleInfo:
        p = self.params
        interval = {
            ReviewResponse.HARD: p.new_card_interval_hard,
            ReviewResponse.GOOD: p.new_card_interval_good,
            ReviewResponse.EASY: p.new_card_interval_easy,
        }[response]
        ease = self._adjust_ease(response, p.base_ease)

        # Spread new cards over the least busy day in the window
        offset = histogram.least_loaded_day(interval, p.load_balance_window)
        histogram.increment(offset)
        logger.debug(
            f"[schedule] new card {response.value}: interval={interval} placed at +{offset}d"
        )
        return ScheduleInfo(today + timedelta(days=offset), offset, ease, days_overdue=0)

    def updated_schedule(
        self,
        response: ReviewResponse,
        existing: ScheduleInfo,
        histogram: DueDateHistogram,
        today: date,
    ) -> ScheduleInfo:
        p = self.params
        ease = self._adjust_ease(response, existing.ease)
        interval = self._next_interval(response, existing, ease, today)

        old_offset = existing.due_offset(today)
        histogram.move(old_offset, interval)
        logger.debug(
            f"[schedule] {response.value}: {existing.interval}d/{existing.ease} -> "
            f"{interval}d/{ease}"
        )
        return ScheduleInfo(today + timedelta(days=interval), interval, ease, days_overdue=0)

    def _adjust_ease(self, response: ReviewResponse, ease: int) -> int:
        if response is ReviewResponse.HARD:
            ease -= c.EASE_STEP
        elif response is ReviewResponse.EASY:
            ease += c.EASE_STEP
        return max(self.params.minimum_ease, ease)

    def _next_interval(
        self, response: ReviewResponse, existing: ScheduleInfo, ease: int, today: date
    ) -> int:
        p = self.params
        overdue = max(0, (today - existing.due_date).days)  # type: ignore[operator]
        overdue = min(overdue, existing.interval * p.max_overdue_credit_factor)

        if response is ReviewResponse.EASY:
            interval = (existing.interval + overdue) * ease / 100 * p.easy_bonus
        elif response is ReviewResponse.GOOD:
            interval = (existing.interval + overdue / 2) * ease / 100
        else:
            interval = (existing.interval + overdue / 4) * p.lapses_interval_change

        interval = min(round(interval), p.maximum_interval)
        return max(1, interval)

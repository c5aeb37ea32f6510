"""
Due-date histogram used to spread future reviews evenly across days.

Keys are day offsets from the session's today (0 = due today or overdue),
values are how many scheduled cards fall on that day.
"""

from collections.abc import Iterable

from mneme.domain.errors import HistogramError


class DueDateHistogram:
    def __init__(self, counts: dict[int, int] | None = None):
        self._counts: dict[int, int] = {}
        for offset, count in (counts or {}).items():
            if count > 0:
                self._counts[self._key(offset)] = self._counts.get(self._key(offset), 0) + count

    @staticmethod
    def _key(offset: int) -> int:
        return max(0, offset)

    @classmethod
    def from_offsets(cls, offsets: Iterable[int]) -> "DueDateHistogram":
        histogram = cls()
        for offset in offsets:
            histogram.increment(offset)
        return histogram

    def count(self, offset: int) -> int:
        return self._counts.get(self._key(offset), 0)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def as_dict(self) -> dict[int, int]:
        return dict(sorted(self._counts.items()))

    def increment(self, offset: int) -> None:
        key = self._key(offset)
        self._counts[key] = self._counts.get(key, 0) + 1

    def decrement(self, offset: int) -> None:
        key = self._key(offset)
        current = self._counts.get(key, 0)
        if current <= 0:
            raise HistogramError(f"no cards recorded on day offset {key}")
        if current == 1:
            del self._counts[key]
        else:
            self._counts[key] = current - 1

    def move(self, old_offset: int, new_offset: int) -> None:
        """Move one card between days. Either both buckets change or neither does."""
        if self.count(old_offset) <= 0:
            raise HistogramError(f"no cards recorded on day offset {self._key(old_offset)}")
        self.decrement(old_offset)
        self.increment(new_offset)

    def least_loaded_day(self, start: int, window: int) -> int:
        """
        Find the least used day in ``[start, start + window)``.

        Ties go to the earliest day.
        """
        start = self._key(start)
        best = start
        best_count = self.count(start)
        for offset in range(start + 1, start + max(1, window)):
            c = self.count(offset)
            if c < best_count:
                best, best_count = offset, c
        return best

    def rebase(self, days: int) -> None:
        """
        Re-anchor offsets after the session's today moved ``days`` forward.

        Overdue offsets fold into the overdue bucket, so moving back is refused.
        """
        if days < 0:
            raise HistogramError(f"cannot move the histogram back {-days} day(s)")
        if days == 0:
            return
        shifted: dict[int, int] = {}
        for offset, count in self._counts.items():
            key = self._key(offset - days)
            shifted[key] = shifted.get(key, 0) + count
        self._counts = shifted

    def __repr__(self) -> str:
        return f"DueDateHistogram({self.as_dict()})"

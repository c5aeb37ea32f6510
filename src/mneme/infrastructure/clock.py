from datetime import date, timedelta


class SystemClock:
    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock pinned to a given day; ``advance`` moves it forward."""

    def __init__(self, day: date):
        self.day = day

    def today(self) -> date:
        return self.day

    def advance(self, days: int = 1) -> date:
        self.day = self.day + timedelta(days=days)
        return self.day

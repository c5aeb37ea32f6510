"""Error types raised by the scheduling, storage and review layers."""


class MnemeError(Exception):
    """Base class for all mneme errors."""


class ScheduleComputationError(MnemeError):
    """The scheduling algorithm was configured with values it cannot work with."""


class PersistenceError(MnemeError):
    """A storage collaborator failed to read or write note text."""

    def __init__(self, note_id: str, message: str):
        super().__init__(f"{note_id}: {message}")
        self.note_id = note_id


class HistogramError(MnemeError):
    """A histogram update would make a bucket negative or move it back in time."""


class SequencerStateError(MnemeError):
    """An operation needs a current card but the session has none."""

"""mneme: spaced-repetition review of flashcards written inside Markdown notes."""

from mneme.consts import VERSION

__version__ = VERSION

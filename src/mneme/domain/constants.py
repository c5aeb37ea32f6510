"""Centralized defaults for the scheduling and review layers.

Every default that AppConfig exposes is declared here so the domain and
application layers import from a single place.
"""

# ---------- Scheduling ----------
DEFAULT_BASE_EASE = 250
DEFAULT_MINIMUM_EASE = 130
EASE_STEP = 20
DEFAULT_LAPSES_INTERVAL_CHANGE = 0.5
DEFAULT_EASY_BONUS = 1.3
DEFAULT_MAXIMUM_INTERVAL = 36525
DEFAULT_INITIAL_INTERVAL = 1

# New cards: interval (days) chosen by the first response.
DEFAULT_NEW_CARD_INTERVAL_HARD = 1
DEFAULT_NEW_CARD_INTERVAL_GOOD = 3
DEFAULT_NEW_CARD_INTERVAL_EASY = 4

# Overdue credit is capped at this multiple of the previous interval.
DEFAULT_MAX_OVERDUE_CREDIT_FACTOR = 1.0

# Number of candidate days scanned when placing a new card.
DEFAULT_LOAD_BALANCE_WINDOW = 3

# ---------- Parser ----------
DEFAULT_SINGLE_LINE_SEPARATOR = "::"
DEFAULT_SINGLE_LINE_REVERSED_SEPARATOR = ":::"
DEFAULT_MULTILINE_SEPARATOR = "?"
DEFAULT_MULTILINE_REVERSED_SEPARATOR = "??"
DEFAULT_CLOZE_PATTERNS = [
    "==[123;;]answer[;;hint]==",
    "**[123;;]answer[;;hint]**",
    "{{[123::]answer[::hint]}}",
]
DEFAULT_FLASHCARD_TAGS = ["#flashcards"]

# ---------- Cards ----------
CLOZE_PLACEHOLDER = "[...]"

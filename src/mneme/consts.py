VERSION = "0.3.0"

# Schedule comments written after a card, e.g. <!--SR:!2024-03-01,4,270-->
SCHEDULE_COMMENT_PREFIX = "<!--SR:"
SCHEDULE_COMMENT_SUFFIX = "-->"
SCHEDULE_DATE_FORMAT = "%Y-%m-%d"

# Due date used for sibling cards that have never been reviewed.
DUMMY_DUE_DATE_FOR_NEW_CARD = "2000-01-01"

HEADER_CARD_SEPARATOR = "-- --"

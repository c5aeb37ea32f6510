from datetime import date

import pytest

from mneme.domain.schedule import (
    ScheduleInfo,
    format_schedule_comment,
    parse_schedule_comment,
    split_schedule_comment,
)


def test_interval_and_ease_are_whole_numbers():
    s = ScheduleInfo(date(2024, 3, 5), 2.6, 249.6)
    assert s.interval == 3
    assert s.ease == 250


def test_new_card_schedule_has_no_due_date():
    s = ScheduleInfo.new_card(1, 250)
    assert s.is_new
    assert not s.is_due(date(2024, 3, 1))
    with pytest.raises(ValueError):
        s.due_offset(date(2024, 3, 1))


def test_due_offset_counts_overdue_as_today():
    s = ScheduleInfo(date(2024, 2, 20), 10, 250)
    assert s.due_offset(date(2024, 3, 1)) == 0
    assert ScheduleInfo(date(2024, 3, 4), 3, 250).due_offset(date(2024, 3, 1)) == 3


def test_from_due_date_str_records_overdue():
    s = ScheduleInfo.from_due_date_str("2024-02-26", 4, 270, today=date(2024, 3, 1))
    assert s.due_date == date(2024, 2, 26)
    assert s.days_overdue == 4


def test_days_overdue_ignored_in_equality():
    a = ScheduleInfo(date(2024, 3, 1), 4, 270, days_overdue=3)
    b = ScheduleInfo(date(2024, 3, 1), 4, 270)
    assert a == b


def test_format_schedule_comment_with_new_sibling():
    comment = format_schedule_comment([ScheduleInfo(date(2024, 3, 5), 4, 270), None], 1, 250)
    assert comment == "<!--SR:!2024-03-05,4,270!2000-01-01,1,250-->"


def test_format_schedule_comment_all_new_is_empty():
    assert format_schedule_comment([None, ScheduleInfo.new_card(1, 250)], 1, 250) == ""


def test_parse_schedule_comment_decodes_sentinel_as_new():
    schedules = parse_schedule_comment("Q:::A\n<!--SR:!2024-03-05,4,270!2000-01-01,1,250-->")
    assert schedules == [ScheduleInfo(date(2024, 3, 5), 4, 270), None]


def test_parse_schedule_comment_missing():
    assert parse_schedule_comment("Q::A") == []


def test_split_schedule_comment_next_line():
    text, comment = split_schedule_comment("Q::A\n<!--SR:!2024-03-05,4,270-->")
    assert text == "Q::A"
    assert comment == "<!--SR:!2024-03-05,4,270-->"


def test_split_schedule_comment_same_line():
    text, comment = split_schedule_comment("Q::A <!--SR:!2024-03-05,4,270-->")
    assert text == "Q::A"
    assert comment == "<!--SR:!2024-03-05,4,270-->"


def test_split_schedule_comment_ignores_comment_in_the_middle():
    raw = "Q\n?\n<!--SR:!2024-03-05,4,270-->\nmore answer"
    text, comment = split_schedule_comment(raw)
    assert comment == ""
    assert text == raw

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for weekday and time normalization."""

import pytest

from src.domains.scheduling.exceptions import ValidationError
from src.domains.scheduling.slots import (
    Slot,
    Weekday,
    format_time,
    normalize_day,
    normalize_time,
)


class TestNormalizeDay:
    """Tests for normalize_day."""

    @pytest.mark.parametrize("value", ["Monday", "monday", "MONDAY", "  monday  "])
    def test_accepts_any_case_and_whitespace(self, value: str) -> None:
        assert normalize_day(value) is Weekday.MONDAY

    def test_returns_weekday_unchanged(self) -> None:
        assert normalize_day(Weekday.FRIDAY) is Weekday.FRIDAY

    def test_sunday_is_last(self) -> None:
        assert int(normalize_day("Sunday")) == 6

    @pytest.mark.parametrize("value", ["Mon", "Funday", "1", ""])
    def test_rejects_unknown_days(self, value: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize_day(value)
        assert exc_info.value.kind == "validation_error"
        assert exc_info.value.field == "day"

    def test_label_is_capitalised(self) -> None:
        assert Weekday.WEDNESDAY.label == "Wednesday"


class TestNormalizeTime:
    """Tests for normalize_time."""

    def test_twelve_and_twenty_four_hour_forms_share_a_key(self) -> None:
        assert normalize_time("9:00 AM") == normalize_time("09:00") == normalize_time("9:00") == 540

    @pytest.mark.parametrize(
        ("value", "minutes"),
        [
            ("12:00 AM", 0),
            ("12:30 PM", 750),
            ("1:05 pm", 785),
            ("9:00am", 540),
            ("11:59 P.M.", 1439),
            ("21:15", 1275),
            ("00:00", 0),
        ],
    )
    def test_parses_minutes(self, value: str, minutes: int) -> None:
        assert normalize_time(value) == minutes

    @pytest.mark.parametrize("value", ["", "9", "24:00", "9:60", "13:00 PM", "0:30 AM", "noon"])
    def test_rejects_invalid_times(self, value: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize_time(value)
        assert exc_info.value.field == "time"


class TestFormatTime:
    """Tests for format_time."""

    @pytest.mark.parametrize(
        ("minutes", "label"),
        [(0, "12:00 AM"), (540, "9:00 AM"), (600, "10:00 AM"), (720, "12:00 PM"), (1275, "9:15 PM")],
    )
    def test_formats_twelve_hour_label(self, minutes: int, label: str) -> None:
        assert format_time(minutes) == label

    def test_rejects_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            format_time(1440)


class TestSlot:
    """Tests for Slot."""

    def test_parse_normalizes_both_parts(self) -> None:
        assert Slot.parse("monday", "10:00") == Slot(Weekday.MONDAY, 600)

    def test_str_names_day_and_time(self) -> None:
        assert str(Slot.parse("Monday", "10:00 AM")) == "Monday 10:00 AM"

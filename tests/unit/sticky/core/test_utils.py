"""
Unit Tests for Core Utilities.
"""

from datetime import datetime

from modules.sticky.core.utils import format_local, from_epoch_ms, new_note_id, to_epoch_ms


class TestEpochConversion:
    def test_naive_datetime_is_local_time(self):
        value = to_epoch_ms(datetime(2026, 3, 1, 9, 30))
        assert from_epoch_ms(value).replace(tzinfo=None) == datetime(2026, 3, 1, 9, 30)


class TestFormatLocal:
    def test_formats_local_wall_clock(self):
        value = to_epoch_ms(datetime(2026, 3, 1, 9, 30))
        assert format_local(value) == "2026-03-01 09:30"
        assert format_local(value, "%H:%M") == "09:30"

    def test_out_of_range_instant_falls_back_to_millis(self):
        assert format_local(-100_000_000_000_000) == "-100000000000000"
        assert format_local(8_000_000_000_000_000) == "8000000000000000"


class TestNewNoteId:
    def test_ids_are_unique(self):
        assert new_note_id() != new_note_id()

import pytest

from venue.app.errors import InvalidSlotRangeError
from venue.app.services.availability.slots import (
    SlotId,
    TimeRange,
    display_range,
    event_times,
    is_valid_time,
    normalize_time_string,
    normalize_times,
    parse_slot,
    slot_options,
)


@pytest.mark.parametrize("slot", ["morning", "evening", "night", "full_day"])
def test_fixed_slots_leave_times_to_the_backend(slot):
    times = normalize_times(slot)
    assert times == TimeRange(None, None)


def test_fixed_slot_ignores_explicit_times():
    assert normalize_times("morning", "11:00", "12:00") == TimeRange(None, None)


def test_short_duration_defaults():
    assert normalize_times("short_duration") == TimeRange("10:00", "18:00")


def test_short_duration_explicit_times():
    assert normalize_times(SlotId.SHORT_DURATION, "12:00", "15:30") == TimeRange("12:00", "15:30")


def test_short_duration_fills_missing_side_with_default():
    assert normalize_times("short_duration", "12:00", None) == TimeRange("12:00", "18:00")
    assert normalize_times("short_duration", None, "13:00") == TimeRange("10:00", "13:00")


def test_short_duration_accepts_seconds():
    assert normalize_times("short_duration", "09:00:00", "11:30:00") == TimeRange("09:00", "11:30")


@pytest.mark.parametrize("start,end", [
    ("15:00", "12:00"),
    ("12:00", "12:00"),
    ("19:00", None),  # after the default end
])
def test_short_duration_rejects_start_not_before_end(start, end):
    with pytest.raises(InvalidSlotRangeError):
        normalize_times("short_duration", start, end)


@pytest.mark.parametrize("value", ["9:00", "24:00", "12:60", "noon"])
def test_short_duration_rejects_malformed_time(value):
    with pytest.raises(InvalidSlotRangeError):
        normalize_times("short_duration", value, "23:00")


def test_invalid_slot_range_is_a_value_error():
    with pytest.raises(ValueError):
        normalize_times("short_duration", "18:00", "10:00")


def test_unknown_slot_falls_back_to_full_day(caplog):
    with caplog.at_level("WARNING"):
        assert parse_slot("brunch") is SlotId.FULL_DAY
    assert "brunch" in caplog.text
    assert normalize_times("brunch") == TimeRange(None, None)


def test_parse_slot_is_case_insensitive():
    assert parse_slot(" Evening ") is SlotId.EVENING
    assert parse_slot(None) is SlotId.FULL_DAY


@pytest.mark.parametrize("slot,expected", [
    ("morning", TimeRange("10:00", "14:00")),
    ("evening", TimeRange("14:00", "18:00")),
    ("night", TimeRange("18:00", "22:00")),
    ("full_day", TimeRange("10:00", "18:00")),
    ("short_duration", TimeRange("10:00", "18:00")),
    ("unknown", TimeRange("10:00", "18:00")),
])
def test_display_ranges(slot, expected):
    assert display_range(slot) == expected


def test_time_helpers():
    assert is_valid_time("23:59")
    assert is_valid_time(None)
    assert not is_valid_time("23:59:00")
    assert normalize_time_string("08:15:00") == "08:15"
    assert normalize_time_string("") is None


def test_event_times_prefers_explicit_times():
    assert event_times("11:00:00", "13:00:00", "night") == TimeRange("11:00", "13:00")
    assert event_times(None, None, "night") == TimeRange("18:00", "22:00")
    assert event_times("11:00", None, "morning") == TimeRange("10:00", "14:00")


def test_slot_options_cover_every_slot():
    options = slot_options()
    assert [o["id"] for o in options] == [s.value for s in SlotId]
    morning = options[0]
    assert morning == {"id": "morning", "label": "Morning", "start": "10:00", "end": "14:00"}

from datetime import datetime, timedelta, timezone

import pytest

from backend.app.services.slots import (
    Slot,
    encode,
    next_occurrence,
    normalize_slots,
    parse_slot_code,
    slot_code,
    subject_slug,
)

UTC = timezone.utc


def at(day: int, hour: int, minute: int = 0) -> datetime:
    # January 2030: the 2nd is a Wednesday, the 6th a Sunday
    return datetime(2030, 1, day, hour, minute, tzinfo=UTC)


def test_wednesday_evening_code():
    assert slot_code(at(2, 19), UTC) == "wed:evening"


def test_sunday_is_day_zero():
    assert encode(at(6, 10), UTC) == Slot("sun", "morning")


@pytest.mark.parametrize(
    "hour,minute,pod",
    [
        (7, 0, "morning"),
        (8, 0, "morning"),
        (11, 59, "morning"),
        (12, 0, "afternoon"),
        (17, 59, "afternoon"),
        (18, 0, "evening"),
        (23, 30, "evening"),
    ],
)
def test_pod_boundaries(hour, minute, pod):
    assert encode(at(2, hour, minute), UTC).pod == pod


def test_pinned_timezone_shifts_pod_and_day():
    plus_two = timezone(timedelta(hours=2))
    assert slot_code(at(2, 17), plus_two) == "wed:evening"
    assert slot_code(at(2, 23), plus_two) == "thu:morning"


def test_naive_instant_read_as_utc():
    assert slot_code(datetime(2030, 1, 2, 19, 0), UTC) == "wed:evening"


def test_parse_slot_code():
    assert parse_slot_code(" Wed:Evening ") == Slot("wed", "evening")
    for bad in ("", "wed", "wed:night", "xyz:morning", "wed:evening:extra"):
        with pytest.raises(ValueError):
            parse_slot_code(bad)


def test_normalize_structured_slots_dedupes_and_drops_invalid():
    slots = normalize_slots(
        [
            {"day": "wed", "pod": "evening"},
            {"day": "WED", "pod": "evening"},
            {"day": "mon", "pod": "noon"},
            {"day": "sat", "pod": "morning"},
        ]
    )
    assert [slot.code for slot in slots] == ["wed:evening", "sat:morning"]


def test_normalize_legacy_strings_only_without_structured_slots():
    legacy = ["Wed:Evening (18h-22h)", "tue:morning", "garbage"]
    assert [slot.code for slot in normalize_slots(None, legacy)] == ["wed:evening", "tue:morning"]
    structured = normalize_slots([{"day": "fri", "pod": "afternoon"}], legacy)
    assert [slot.code for slot in structured] == ["fri:afternoon"]


def test_subject_slug_strips_accents_and_case():
    assert subject_slug("  Mathématiques ") == "mathematiques"
    assert subject_slug("Physique-Chimie") == "physique-chimie"


def test_next_occurrence_same_day_later():
    assert next_occurrence(Slot("wed", "evening"), at(2, 10), UTC) == at(2, 18)


def test_next_occurrence_skips_to_next_week_once_started():
    assert next_occurrence(Slot("wed", "evening"), at(2, 19), UTC) == at(9, 18)
    assert next_occurrence(Slot("wed", "evening"), at(2, 18), UTC) == at(9, 18)


def test_next_occurrence_later_in_week():
    assert next_occurrence(Slot("mon", "morning"), at(2, 10), UTC) == at(7, 8)

"""Recurring weekly slot codes.

A slot is a day of the week plus a part of day ("pod"), written ``day:pod``,
e.g. ``wed:evening``. The pods are fixed local-time bands:

    morning    08:00-12:00
    afternoon  12:00-18:00
    evening    18:00-22:00

Classification only looks at the hour: >= 18 is evening, >= 12 is afternoon,
anything earlier (including the night hours before 08:00) is morning.
"""

import re
import unicodedata
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, NamedTuple

from backend.app.core.time import as_utc, get_local_timezone

# Indexed Sunday-first, 0=Sunday .. 6=Saturday
DAY_CODES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")
PODS = ("morning", "afternoon", "evening")

POD_BOUNDS = {
    "morning": (8, 12),
    "afternoon": (12, 18),
    "evening": (18, 22),
}


class Slot(NamedTuple):
    day: str
    pod: str

    @property
    def code(self) -> str:
        return f"{self.day}:{self.pod}"

    def as_dict(self) -> dict:
        return {"day": self.day, "pod": self.pod}


def _localize(instant: datetime, tz: tzinfo | None) -> datetime:
    return as_utc(instant).astimezone(tz or get_local_timezone())


def pod_for_hour(hour: int) -> str:
    if hour >= 18:
        return "evening"
    if hour >= 12:
        return "afternoon"
    return "morning"


def encode(instant: datetime, tz: tzinfo | None = None) -> Slot:
    """Return the recurring slot an instant falls into, in ``tz`` local time."""
    local = _localize(instant, tz)
    return Slot(DAY_CODES[local.isoweekday() % 7], pod_for_hour(local.hour))


def slot_code(instant: datetime, tz: tzinfo | None = None) -> str:
    return encode(instant, tz).code


def parse_slot_code(code: str) -> Slot:
    """Decode ``day:pod``; raises ValueError for anything else."""
    parts = [part.strip().lower() for part in (code or "").split(":")]
    if len(parts) != 2:
        raise ValueError(f"Invalid slot code: {code!r}")
    day, pod = parts
    if day not in DAY_CODES or pod not in PODS:
        raise ValueError(f"Invalid slot code: {code!r}")
    return Slot(day, pod)


def _legacy_slot(raw: str) -> Slot | None:
    # "Wed:Evening (18h-22h)" -> wed:evening
    cleaned = re.sub(r"\s*\([^)]*\)\s*$", "", raw or "").strip()
    try:
        return parse_slot_code(cleaned)
    except ValueError:
        return None


def normalize_slots(slots: Iterable[dict] | None = None, time_slots: Iterable[str] | None = None) -> list[Slot]:
    """Validate and dedupe slots, preserving first-seen order.

    Structured ``{day, pod}`` entries win; the legacy ``"day:pod"`` strings are
    only read when no structured slot was given. Invalid entries are dropped.
    """
    seen: dict[str, Slot] = {}
    if slots:
        for entry in slots:
            day = str(entry.get("day", "")).strip().lower()
            pod = str(entry.get("pod", "")).strip().lower()
            if day in DAY_CODES and pod in PODS:
                slot = Slot(day, pod)
                seen.setdefault(slot.code, slot)
        return list(seen.values())

    for raw in time_slots or []:
        slot = _legacy_slot(raw)
        if slot is not None:
            seen.setdefault(slot.code, slot)
    return list(seen.values())


def subject_slug(subject: str) -> str:
    """Accent-stripped, lowercased subject: "Mathématiques " -> "mathematiques"."""
    decomposed = unicodedata.normalize("NFD", subject)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().lower()


def next_occurrence(slot: Slot, after: datetime, tz: tzinfo | None = None) -> datetime:
    """Start of the next occurrence of ``slot`` strictly after ``after`` (UTC)."""
    zone = tz or get_local_timezone()
    local_after = _localize(after, zone)
    start_hour = POD_BOUNDS[slot.pod][0]
    target_weekday = DAY_CODES.index(slot.day)
    days_ahead = (target_weekday - local_after.isoweekday() % 7) % 7
    candidate_day = local_after.date() + timedelta(days=days_ahead)
    candidate = datetime(candidate_day.year, candidate_day.month, candidate_day.day, start_hour, tzinfo=zone)
    if candidate <= local_after:
        candidate_day = candidate_day + timedelta(days=7)
        candidate = datetime(candidate_day.year, candidate_day.month, candidate_day.day, start_hour, tzinfo=zone)
    return as_utc(candidate)

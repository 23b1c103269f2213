"""
Doctor availability calendar.

A calendar is a plain nested mapping::

    {"2025-01-10": {"morning": ["09:00", "09:30"], "evening": ["18:00"]}}

date -> shift -> ordered list of free slot labels. All functions here are
pure: they never mutate their input and always return a fresh structure, so
assigning the result back to ``Doctor.available_times`` is seen as a change by
SQLAlchemy.
"""

import json
import logging
from typing import Any, Optional

from ...exceptions import InvalidCalendar

logger = logging.getLogger(__name__)

Calendar = dict[str, dict[str, list[str]]]


def copy_calendar(calendar: Calendar) -> Calendar:
    return {date: {shift: list(slots) for shift, slots in shifts.items()} for date, shifts in calendar.items()}


def parse_calendar(raw: Any, strict: bool = True) -> Calendar:
    """
    Normalize a stored or submitted availability document.

    Accepts a mapping, a JSON string (older rows stored the document as text)
    or None. A date mapped to None is read as an empty shift set, which
    merge_availability treats as "remove this date".

    Raises InvalidCalendar if the nesting is not date -> shift -> list of
    strings, or (when strict) if a slot label appears more than once under one
    date. Stored rows written before that rule are read with strict=False.
    """
    if raw is None or raw == "":
        return {}

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise InvalidCalendar("available_times is not valid JSON") from e

    if not isinstance(raw, dict):
        raise InvalidCalendar()

    calendar: Calendar = {}
    for date, shifts in raw.items():
        if shifts is None:
            shifts = {}
        if not isinstance(date, str) or not isinstance(shifts, dict):
            raise InvalidCalendar(f"Invalid shifts for date {date!r}")
        calendar[date] = {}
        seen: set[str] = set()
        for shift, slots in shifts.items():
            if not isinstance(slots, list) or not all(isinstance(s, str) for s in slots):
                raise InvalidCalendar(f"Invalid slots for {date!r} / {shift!r}")
            repeated = strict and (seen.intersection(slots) or {s for s in slots if slots.count(s) > 1})
            if repeated:
                raise InvalidCalendar(f"Slot {sorted(repeated)[0]!r} appears more than once on {date!r}")
            seen.update(slots)
            calendar[date][shift] = list(slots)
    return calendar


def flatten_slots(calendar: Calendar, date: str) -> list[str]:
    """All slot labels under a date, across every shift"""
    return [slot for slots in calendar.get(date, {}).values() for slot in slots]


def is_slot_available(calendar: Calendar, date: str, slot_label: str) -> bool:
    if date not in calendar:
        return False
    return slot_label in flatten_slots(calendar, date)


def find_shift(calendar: Calendar, date: str, slot_label: str) -> Optional[str]:
    """Name of the shift holding the slot on that date, or None"""
    for shift, slots in calendar.get(date, {}).items():
        if slot_label in slots:
            return shift
    return None


def remove_slot(calendar: Calendar, date: str, shift: str, slot_label: str) -> Calendar:
    """
    Remove a slot from calendar[date][shift].

    An emptied shift is dropped, and a date with no shifts left is dropped.
    A missing date/shift/slot leaves the calendar unchanged; callers check
    availability before committing a removal.
    """
    updated = copy_calendar(calendar)

    shifts = updated.get(date)
    if shifts is None or shift not in shifts:
        logger.warning(f"⚠️ remove_slot: no shift {shift!r} on {date}, calendar unchanged")
        return updated

    shifts[shift] = [slot for slot in shifts[shift] if slot != slot_label]

    if not shifts[shift]:
        del shifts[shift]

    if not shifts:
        del updated[date]

    return updated


def merge_availability(calendar: Calendar, patch: Calendar) -> Calendar:
    """
    Shallow merge at the date level: each date in the patch replaces that
    date's whole shift set. A date patched with an empty mapping is removed.
    """
    updated = copy_calendar(calendar)
    for date, shifts in copy_calendar(patch).items():
        non_empty = {shift: slots for shift, slots in shifts.items() if slots}
        if non_empty:
            updated[date] = non_empty
        else:
            updated.pop(date, None)
    return updated

"""
Core business logic for deriving bookable time slots.

This is the heart of the booking flow - pure domain logic without any
external dependencies (no API calls, no database, no I/O). Callers fetch
the availability window and the booked labels and pass them in.
"""

from datetime import time
from typing import Iterable, List, Optional

from .exceptions import InvalidInputError
from .models import TimeWindow, normalize_time_label, parse_time_label

DEFAULT_STEP_MINUTES = 30


def _seconds_of_day(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def _validate_step(step_minutes: int) -> int:
    if isinstance(step_minutes, bool) or not isinstance(step_minutes, int) or step_minutes <= 0:
        raise InvalidInputError(f"step_minutes must be a positive integer, got {step_minutes!r}")
    return step_minutes


def generate_slots(
    start: str | time,
    end: str | time,
    step_minutes: int = DEFAULT_STEP_MINUTES
) -> List[str]:
    """
    Generate slot labels over the half-open interval [start, end).

    Example:
    09:00 - 10:30, step 30 -> ["09:00", "09:30", "10:00"]

    Args:
        start: First slot (time or ``HH:MM`` label)
        end: Closing time; never emitted itself
        step_minutes: Slot granularity

    Returns:
        Ascending ``HH:MM`` labels; empty if start >= end

    Raises:
        InvalidInputError: On malformed labels or a non-positive step
    """
    _validate_step(step_minutes)

    current = _seconds_of_day(parse_time_label(start))
    limit = _seconds_of_day(parse_time_label(end))
    step = step_minutes * 60

    slots: List[str] = []
    while current < limit:
        minutes = current // 60
        slots.append(f"{minutes // 60:02d}:{minutes % 60:02d}")
        current += step

    return slots


def filter_available(all_slots: Iterable[str], booked: Iterable[str]) -> List[str]:
    """
    Remove booked labels from a slot sequence, preserving order.

    Booked labels that are not slots are ignored. Both sides are compared
    in normalized ``HH:MM`` form, so ``"09:30:00"`` removes ``"09:30"``.
    """
    taken = {normalize_time_label(label) for label in booked}
    return [
        slot for slot in all_slots
        if normalize_time_label(slot) not in taken
    ]


def compute_availability(
    window: Optional[TimeWindow],
    booked: Iterable[str],
    step_minutes: int = DEFAULT_STEP_MINUTES
) -> List[str]:
    """
    Bookable slots for one barber and date.

    No availability record means the barber is not bookable that day;
    default opening hours are never assumed.
    """
    if window is None:
        return []

    return filter_available(
        generate_slots(window.start, window.end, step_minutes),
        booked
    )


class SlotCalculator:
    """
    Computes bookable slots at a fixed granularity.

    Stateless apart from the step size, so one instance can be shared by
    every request.
    """

    def __init__(self, step_minutes: int = DEFAULT_STEP_MINUTES):
        self.step_minutes = _validate_step(step_minutes)

    def generate_slots(self, start: str | time, end: str | time) -> List[str]:
        return generate_slots(start, end, self.step_minutes)

    def filter_available(self, all_slots: Iterable[str], booked: Iterable[str]) -> List[str]:
        return filter_available(all_slots, booked)

    def compute_availability(
        self,
        window: Optional[TimeWindow],
        booked: Iterable[str]
    ) -> List[str]:
        return compute_availability(window, booked, self.step_minutes)

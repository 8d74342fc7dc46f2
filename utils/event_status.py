"""
Derived event properties.

These are computed from a stored event document at read time and never
persisted. All functions take a plain event dict and an explicit ``now``.
"""
import math
from datetime import datetime
from typing import Optional

from constants import EventStatus

SECONDS_PER_DAY = 24 * 60 * 60


def duration_days(event: dict) -> Optional[int]:
    """Length of the event in whole days, rounded up."""
    start, end = event.get("start_date"), event.get("end_date")
    if not start or not end:
        return None
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def is_registration_open(event: dict, now: datetime) -> bool:
    if event.get("status") != EventStatus.REGISTRATION_OPEN.value:
        return False
    deadline = event.get("registration_deadline")
    return deadline is not None and now <= deadline


def display_status(event: dict, now: datetime) -> str:
    """Status shown to visitors, derived from the schedule rather than the stored status."""
    if event.get("status") == EventStatus.CANCELLED.value:
        return "cancelled"
    start, end = event.get("start_date"), event.get("end_date")
    if not start or not end:
        return "unknown"
    if now < start:
        return "upcoming"
    if now <= end:
        return "ongoing"
    return "completed"


def clamp_participants(current: Optional[int], maximum: Optional[int]) -> int:
    """Keep the participant count within ``[0, maximum]`` when a maximum is set."""
    current = max(current or 0, 0)
    if maximum and current > maximum:
        return maximum
    return current

"""
Urgency tiers for contact and review dates.

Two modes:

* ``elapsed``: how stale a past event is (e.g. last contact), as a share
  of the allowed interval: 100% overdue, 80% high, 60% medium, 40% low.
* ``upcoming``: how close a future due date is: due or past is overdue,
  then within 20% / 40% / 60% of the warning window.

``classify_urgency`` never reads the clock; callers pass ``now``.
"""
import math
from datetime import datetime, time
from enum import IntEnum

from .exceptions import ValidationError

ELAPSED = "elapsed"
UPCOMING = "upcoming"
MODES = (ELAPSED, UPCOMING)

SECONDS_PER_DAY = 24 * 60 * 60


class Urgency(IntEnum):
    """Ordered urgency tiers. UNKNOWN means no event has been recorded."""

    UNKNOWN = 0
    NOMINAL = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    CRITICAL = 5


URGENCY_CSS_CLASSES = {
    Urgency.UNKNOWN: "text-gray-400",
    Urgency.CRITICAL: "text-red-600 font-bold",
    Urgency.HIGH: "text-red-500 font-medium",
    Urgency.MEDIUM: "text-orange-500 font-medium",
    Urgency.LOW: "text-yellow-600 font-medium",
}


def _day_delta(start, end):
    """Days from ``start`` to ``end`` as a float.

    Plain dates count whole calendar days. If either side is a datetime the
    other is taken as local midnight, carrying the datetime's tzinfo.
    """
    start_is_dt = isinstance(start, datetime)
    end_is_dt = isinstance(end, datetime)
    if not start_is_dt and not end_is_dt:
        return float((end - start).days)
    if not start_is_dt:
        start = datetime.combine(start, time.min, tzinfo=end.tzinfo)
    if not end_is_dt:
        end = datetime.combine(end, time.min, tzinfo=start.tzinfo)
    return (end - start).total_seconds() / SECONDS_PER_DAY


def days_since(event, now):
    """Whole days elapsed since ``event`` (rounded down)."""
    return math.floor(_day_delta(event, now))


def days_until(event, now):
    """Whole days left until ``event`` (rounded up)."""
    return math.ceil(_day_delta(now, event))


def classify_urgency(event_date, threshold_days, mode, now):
    """Classify how urgent ``event_date`` is relative to ``now``.

    Args:
        event_date: date, datetime or None. None gives ``Urgency.UNKNOWN``.
        threshold_days: the allowed interval (elapsed) or warning window
            (upcoming), in days. Must be positive.
        mode: ``"elapsed"`` or ``"upcoming"``.
        now: the reference date or datetime.

    Returns:
        An ``Urgency`` tier. Higher is more urgent, and the tier never drops
        as an event gets staler (elapsed) or closer (upcoming).
    """
    if mode not in MODES:
        raise ValidationError(f"Unknown urgency mode {mode!r}; expected one of {MODES}")
    if threshold_days is None or threshold_days <= 0:
        raise ValidationError(f"Threshold must be a positive number of days, got {threshold_days!r}")
    if event_date is None:
        return Urgency.UNKNOWN

    if mode == ELAPSED:
        elapsed = days_since(event_date, now)
        if elapsed >= threshold_days:
            return Urgency.CRITICAL
        if elapsed >= threshold_days * 0.8:
            return Urgency.HIGH
        if elapsed >= threshold_days * 0.6:
            return Urgency.MEDIUM
        if elapsed >= threshold_days * 0.4:
            return Urgency.LOW
        return Urgency.NOMINAL

    remaining = days_until(event_date, now)
    if remaining <= 0:
        return Urgency.CRITICAL
    if remaining <= threshold_days * 0.2:
        return Urgency.HIGH
    if remaining <= threshold_days * 0.4:
        return Urgency.MEDIUM
    if remaining <= threshold_days * 0.6:
        return Urgency.LOW
    return Urgency.NOMINAL


def urgency_css_class(tier, base_colour="text-green-600"):
    """CSS classes for displaying a date at ``tier``.

    NOMINAL dates keep the section's own colour.
    """
    if tier == Urgency.NOMINAL:
        return f"{base_colour} font-medium"
    return URGENCY_CSS_CLASSES[tier]

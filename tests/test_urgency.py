"""Tests for contact/review urgency tiers."""
from datetime import date, datetime, timedelta, timezone

import pytest

from apps.scheduling.exceptions import ValidationError
from apps.scheduling.urgency import (
    ELAPSED,
    UPCOMING,
    Urgency,
    classify_urgency,
    days_since,
    days_until,
    urgency_css_class,
)

TODAY = date(2025, 6, 30)


@pytest.mark.parametrize("days_ago, expected", [
    (0, Urgency.NOMINAL),
    (11, Urgency.NOMINAL),
    (12, Urgency.LOW),
    (18, Urgency.MEDIUM),
    (24, Urgency.HIGH),
    (30, Urgency.CRITICAL),
    (120, Urgency.CRITICAL),
])
def test_elapsed_tiers(days_ago, expected):
    event = TODAY - timedelta(days=days_ago)
    assert classify_urgency(event, 30, ELAPSED, TODAY) == expected


@pytest.mark.parametrize("days_ahead, expected", [
    (-5, Urgency.CRITICAL),
    (0, Urgency.CRITICAL),
    (3, Urgency.HIGH),
    (6, Urgency.MEDIUM),
    (9, Urgency.LOW),
    (10, Urgency.NOMINAL),
    (60, Urgency.NOMINAL),
])
def test_upcoming_tiers(days_ahead, expected):
    event = TODAY + timedelta(days=days_ahead)
    assert classify_urgency(event, 15, UPCOMING, TODAY) == expected


@pytest.mark.parametrize("mode", [ELAPSED, UPCOMING])
def test_missing_event_is_unknown(mode):
    assert classify_urgency(None, 30, mode, TODAY) == Urgency.UNKNOWN


def test_elapsed_urgency_never_drops_as_event_ages():
    tiers = [
        classify_urgency(TODAY - timedelta(days=n), 90, ELAPSED, TODAY)
        for n in range(0, 200)
    ]
    assert tiers == sorted(tiers)


def test_upcoming_urgency_never_drops_as_event_nears():
    tiers = [
        classify_urgency(TODAY + timedelta(days=n), 15, UPCOMING, TODAY)
        for n in range(60, -10, -1)
    ]
    assert tiers == sorted(tiers)


def test_unknown_sorts_below_nominal():
    assert Urgency.UNKNOWN < Urgency.NOMINAL < Urgency.CRITICAL


def test_days_since_rounds_down_partial_days():
    event = datetime(2025, 6, 29, 18, 0, tzinfo=timezone.utc)
    now = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)
    assert days_since(event, now) == 0


def test_days_until_rounds_up_partial_days():
    event = datetime(2025, 7, 1, 6, 0, tzinfo=timezone.utc)
    now = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)
    assert days_until(event, now) == 1


def test_date_compared_with_datetime_uses_midnight():
    now = datetime(2025, 6, 30, 12, 0)
    assert days_since(date(2025, 6, 29), now) == 1


def test_unknown_mode_rejected():
    with pytest.raises(ValidationError):
        classify_urgency(TODAY, 30, "sideways", TODAY)


@pytest.mark.parametrize("threshold", [0, -1, None])
def test_non_positive_threshold_rejected(threshold):
    with pytest.raises(ValidationError):
        classify_urgency(TODAY, threshold, ELAPSED, TODAY)


def test_css_classes():
    assert urgency_css_class(Urgency.CRITICAL) == "text-red-600 font-bold"
    assert urgency_css_class(Urgency.UNKNOWN) == "text-gray-400"
    assert urgency_css_class(Urgency.NOMINAL) == "text-green-600 font-medium"
    assert urgency_css_class(Urgency.NOMINAL, "text-blue-600") == "text-blue-600 font-medium"

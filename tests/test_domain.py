from datetime import datetime, timedelta, timezone

import pytest

from hexagono.domain.quotes import (
    TERMINAL_STATUSES,
    QuoteStatus,
    ServiceType,
    can_transition,
    parse_service_type,
    parse_status,
    reminder_due,
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
WINDOW = timedelta(hours=48)


@pytest.mark.parametrize(
    "previous, new",
    [
        (QuoteStatus.PENDING, QuoteStatus.IN_REVIEW),
        (QuoteStatus.PENDING, QuoteStatus.QUOTED),
        (QuoteStatus.PENDING, QuoteStatus.CANCELLED),
        (QuoteStatus.IN_REVIEW, QuoteStatus.QUOTED),
        (QuoteStatus.QUOTED, QuoteStatus.COMPLETED),
        (QuoteStatus.QUOTED, QuoteStatus.CANCELLED),
    ],
)
def test_allowed_transitions(previous, new):
    assert can_transition(previous, new)


@pytest.mark.parametrize(
    "previous, new",
    [
        (QuoteStatus.QUOTED, QuoteStatus.PENDING),
        (QuoteStatus.IN_REVIEW, QuoteStatus.PENDING),
        (QuoteStatus.PENDING, QuoteStatus.COMPLETED),
        (QuoteStatus.COMPLETED, QuoteStatus.CANCELLED),
        (QuoteStatus.CANCELLED, QuoteStatus.PENDING),
    ],
)
def test_rejected_transitions(previous, new):
    assert not can_transition(previous, new)


def test_terminal_statuses_have_no_way_out():
    for terminal in TERMINAL_STATUSES:
        for status in QuoteStatus:
            if status != terminal:
                assert not can_transition(terminal, status)


def test_same_status_is_always_allowed():
    for status in QuoteStatus:
        assert can_transition(status, status)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("QUOTED", QuoteStatus.QUOTED),
        (" in_review ", QuoteStatus.IN_REVIEW),
        (QuoteStatus.PENDING, QuoteStatus.PENDING),
        ("DONE", None),
        ("", None),
        (None, None),
        (3, None),
    ],
)
def test_parse_status(value, expected):
    assert parse_status(value) is expected


def test_parse_service_type():
    assert parse_service_type("ecommerce") is ServiceType.ECOMMERCE
    assert parse_service_type("WEBSITE") is None


def test_reminder_due_after_window():
    assert reminder_due(QuoteStatus.PENDING, NOW - timedelta(hours=49), None, NOW, WINDOW)


def test_reminder_not_due_before_window():
    assert not reminder_due(QuoteStatus.PENDING, NOW - timedelta(hours=47), None, NOW, WINDOW)


def test_reminder_not_due_twice_in_window():
    created = NOW - timedelta(days=5)
    assert not reminder_due(QuoteStatus.PENDING, created, NOW - timedelta(hours=1), NOW, WINDOW)
    assert reminder_due(QuoteStatus.PENDING, created, NOW - timedelta(hours=48), NOW, WINDOW)


@pytest.mark.parametrize("status", [s for s in QuoteStatus if s != QuoteStatus.PENDING])
def test_reminder_only_for_pending(status):
    assert not reminder_due(status, NOW - timedelta(days=10), None, NOW, WINDOW)

import pytest

from app.core.errors import TransitionRejected
from app.models.booking import BookingStatus, Role
from app.services.status import (
    action_label,
    allowed_targets,
    can_transition,
    ensure_transition,
    is_terminal,
    normalize_status,
    parse_status_filter,
    parse_target_status,
)


@pytest.mark.parametrize("raw, expected", [
    ("PENDING", BookingStatus.PENDING),
    ("confirmed", BookingStatus.CONFIRMED),
    (" Completed ", BookingStatus.COMPLETED),
    ("DECLINED", BookingStatus.CANCELLED),
    ("rejected", BookingStatus.CANCELLED),
    ("accepted", BookingStatus.CONFIRMED),
    (None, BookingStatus.INTERESTED),
    ("ON_HOLD", BookingStatus.INTERESTED),
])
def test_normalize_status(raw, expected):
    assert normalize_status(raw) == expected


def test_normalize_never_leaves_the_enum():
    for raw in ["", "x", "123", "pending", "CANCELLED", "Interested"]:
        assert normalize_status(raw) in set(BookingStatus)


def test_parse_status_filter():
    assert parse_status_filter("all") is None
    assert parse_status_filter("") is None
    assert parse_status_filter(None) is None
    assert parse_status_filter("pending") == BookingStatus.PENDING
    assert parse_status_filter("declined") == BookingStatus.CANCELLED
    with pytest.raises(ValueError):
        parse_status_filter("maybe")


def test_terminal_states_have_no_exits():
    for terminal in (BookingStatus.COMPLETED, BookingStatus.CANCELLED):
        assert is_terminal(terminal)
        for target in BookingStatus:
            assert not can_transition(terminal, target)


def test_transition_table():
    assert can_transition(BookingStatus.INTERESTED, BookingStatus.PENDING)
    assert can_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED)
    assert can_transition(BookingStatus.PENDING, BookingStatus.CANCELLED)
    assert can_transition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED)
    assert can_transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED)

    assert not can_transition(BookingStatus.INTERESTED, BookingStatus.CONFIRMED)
    assert not can_transition(BookingStatus.PENDING, BookingStatus.COMPLETED)
    assert not can_transition(BookingStatus.CONFIRMED, BookingStatus.PENDING)


def test_completion_is_vendor_only():
    assert can_transition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED, Role.VENDOR)
    assert not can_transition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED, Role.CUSTOMER)


def test_roles_split_the_table():
    assert allowed_targets(BookingStatus.INTERESTED, Role.CUSTOMER) == [BookingStatus.PENDING]
    assert allowed_targets(BookingStatus.INTERESTED, Role.VENDOR) == []
    assert allowed_targets(BookingStatus.PENDING, Role.VENDOR) == [BookingStatus.CONFIRMED, BookingStatus.CANCELLED]
    assert allowed_targets(BookingStatus.PENDING, Role.CUSTOMER) == [BookingStatus.CANCELLED]


def test_ensure_transition_raises():
    with pytest.raises(TransitionRejected) as exc:
        ensure_transition(BookingStatus.COMPLETED, BookingStatus.CONFIRMED)
    assert "completed" in exc.value.message

    with pytest.raises(TransitionRejected):
        ensure_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED, Role.CUSTOMER)

    # Allowed moves pass silently
    ensure_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED, Role.VENDOR)


def test_parse_target_status_is_strict():
    assert parse_target_status(BookingStatus.CONFIRMED) == BookingStatus.CONFIRMED
    assert parse_target_status(" pending ") == BookingStatus.PENDING
    assert parse_target_status("declined") == BookingStatus.CANCELLED

    for bad in ("BOGUS", "", None, 3):
        with pytest.raises(TransitionRejected) as exc:
            parse_target_status(bad)
        assert "Unknown status" in exc.value.message


def test_action_labels_follow_role_and_current_status():
    assert action_label(Role.CUSTOMER, BookingStatus.INTERESTED, BookingStatus.PENDING) == "Book now"
    assert action_label(Role.CUSTOMER, BookingStatus.PENDING, BookingStatus.CANCELLED) == "Cancel"
    assert action_label(Role.VENDOR, BookingStatus.PENDING, BookingStatus.CONFIRMED) == "Accept"
    assert action_label(Role.VENDOR, BookingStatus.PENDING, BookingStatus.CANCELLED) == "Decline"
    assert action_label(Role.VENDOR, BookingStatus.CONFIRMED, BookingStatus.CANCELLED) == "Cancel booking"
    assert action_label(Role.VENDOR, BookingStatus.CONFIRMED, BookingStatus.COMPLETED) == "Mark completed"

"""
Booking status vocabulary shared by every view.

The server is authoritative for status; this module only normalizes the
spellings it sends and knows which moves each actor may request.
"""
from typing import Optional, Dict, FrozenSet

from app.core.errors import TransitionRejected
from app.core.logger import logger
from app.models.booking import BookingStatus, Role

_ALIASES: Dict[str, BookingStatus] = {
    "DECLINED": BookingStatus.CANCELLED,
    "REJECTED": BookingStatus.CANCELLED,
    "CANCELED": BookingStatus.CANCELLED,
    "ACCEPTED": BookingStatus.CONFIRMED,
}

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.INTERESTED: frozenset({BookingStatus.PENDING}),
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

# Marking a booking COMPLETED is vendor-only.
ACTOR_TRANSITIONS: Dict[Role, FrozenSet[tuple]] = {
    Role.CUSTOMER: frozenset({
        (BookingStatus.INTERESTED, BookingStatus.PENDING),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
    }),
    Role.VENDOR: frozenset({
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    }),
}

TERMINAL = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})


def normalize_status(raw: Optional[str]) -> BookingStatus:
    """
    Maps a server status string onto BookingStatus.
    Missing or unknown values fall back to INTERESTED.
    """
    if raw is None:
        return BookingStatus.INTERESTED
    if isinstance(raw, BookingStatus):
        return raw

    key = str(raw).strip().upper()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return BookingStatus(key)
    except ValueError:
        logger.warning(f"⚠️ Unknown booking status '{raw}', treating as INTERESTED")
        return BookingStatus.INTERESTED


def _lookup(value) -> Optional[BookingStatus]:
    if isinstance(value, BookingStatus):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip().upper()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return BookingStatus(key)
    except ValueError:
        return None


def parse_status_filter(value: Optional[str]) -> Optional[BookingStatus]:
    """'all' (or empty) means no filter. Anything else must name a status."""
    if value is None or not str(value).strip() or str(value).strip().lower() == "all":
        return None
    status = _lookup(str(value))
    if status is None:
        raise ValueError(f"Unknown status filter: {value}")
    return status


def parse_target_status(value) -> BookingStatus:
    """Strict parse of a requested target status; no INTERESTED fallback."""
    status = _lookup(value)
    if status is None:
        raise TransitionRejected(f"Unknown status: {value}")
    return status


def is_terminal(status: BookingStatus) -> bool:
    return status in TERMINAL


def can_transition(current: BookingStatus, target: BookingStatus, role: Optional[Role] = None) -> bool:
    if target not in ALLOWED_TRANSITIONS[current]:
        return False
    if role is None:
        return True
    return (current, target) in ACTOR_TRANSITIONS.get(role, frozenset())


def allowed_targets(current: BookingStatus, role: Role) -> list:
    return [
        target for target in BookingStatus
        if can_transition(current, target, role)
    ]


def ensure_transition(current: BookingStatus, target: BookingStatus, role: Optional[Role] = None):
    if target not in ALLOWED_TRANSITIONS[current]:
        raise TransitionRejected(
            f"Cannot move a {current.value.lower()} booking to {target.value.lower()}"
        )
    if role is not None and not can_transition(current, target, role):
        raise TransitionRejected(
            f"A {role.value} cannot move a booking from {current.value.lower()} to {target.value.lower()}"
        )


def action_label(role: Role, current: BookingStatus, target: BookingStatus) -> str:
    """Button text for moving a booking from `current` to `target`."""
    if target == BookingStatus.PENDING:
        return "Book now"
    if target == BookingStatus.CONFIRMED:
        return "Accept"
    if target == BookingStatus.COMPLETED:
        return "Mark completed"
    if target == BookingStatus.CANCELLED:
        if role == Role.VENDOR and current == BookingStatus.PENDING:
            return "Decline"
        if role == Role.VENDOR:
            return "Cancel booking"
        return "Cancel"
    return target.value.title()

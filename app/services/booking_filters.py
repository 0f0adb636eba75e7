"""
Pure projections over a booking list. Nothing here mutates its input or
talks to the network; views recompute these on every list change.
"""
from typing import Optional, List, Sequence
from datetime import datetime, timezone

from app.models.booking import Booking, BookingStatus, BookingStats, DateDisplay, BookedView
from app.services.status import parse_status_filter

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _matches(booking: Booking, term: str) -> bool:
    return (
        term in booking.customer_name.lower()
        or term in booking.service_name.lower()
        or term in booking.category.lower()
    )


def filter_bookings(bookings: Sequence[Booking], status_filter: Optional[str] = "all", search_term: str = "") -> List[Booking]:
    """
    Keeps bookings matching the status filter ("all" or a status name) and
    a case-insensitive substring of customer name, service name or category.
    Returns a new list holding the same Booking objects.
    """
    status = parse_status_filter(status_filter)
    term = (search_term or "").strip().lower()

    result = []
    for booking in bookings:
        if status is not None and booking.status != status:
            continue
        if term and not _matches(booking, term):
            continue
        result.append(booking)
    return result


def compute_stats(bookings: Sequence[Booking]) -> BookingStats:
    counts = {status: 0 for status in BookingStatus}
    for booking in bookings:
        counts[booking.status] += 1

    return BookingStats(
        total=len(bookings),
        interested=counts[BookingStatus.INTERESTED],
        pending=counts[BookingStatus.PENDING],
        confirmed=counts[BookingStatus.CONFIRMED],
        cancelled=counts[BookingStatus.CANCELLED],
        completed=counts[BookingStatus.COMPLETED],
    )


def sort_newest_first(bookings: Sequence[Booking]) -> List[Booking]:
    return sorted(bookings, key=lambda b: b.created_at or _OLDEST, reverse=True)


def sort_by_confirmation(bookings: Sequence[Booking]) -> List[Booking]:
    return sorted(bookings, key=lambda b: b.confirmed_at or b.created_at or _OLDEST, reverse=True)


def status_date(booking: Booking) -> DateDisplay:
    """The label and timestamp a booking card shows next to its status."""
    if booking.status == BookingStatus.CONFIRMED:
        return DateDisplay(label="Confirmed", at=booking.confirmed_at or booking.updated_at or booking.created_at)
    if booking.status == BookingStatus.CANCELLED:
        return DateDisplay(label="Cancelled", at=booking.cancelled_at or booking.updated_at or booking.created_at)
    if booking.status == BookingStatus.COMPLETED:
        return DateDisplay(label="Completed", at=booking.completed_at or booking.updated_at)
    if booking.status == BookingStatus.PENDING:
        return DateDisplay(label="Updated", at=booking.updated_at or booking.created_at)
    return DateDisplay(label="Created", at=booking.created_at)


def bookings_for_service(bookings: Sequence[Booking], service_id: str) -> List[Booking]:
    """Real requests for one service: no wishlist entries, customer known."""
    return [
        b for b in bookings
        if b.service_id == str(service_id)
        and b.status != BookingStatus.INTERESTED
        and b.customer is not None
    ]


def reviewable_booking(bookings: Sequence[Booking], service_id: str) -> Optional[Booking]:
    """
    Newest CONFIRMED or COMPLETED booking for the service. A customer may
    only review a service they actually booked.
    """
    eligible = [
        b for b in bookings
        if b.service_id == str(service_id)
        and b.status in (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)
    ]
    eligible = sort_newest_first(eligible)
    return eligible[0] if eligible else None


def booked_view(bookings: Sequence[Booking], month: Optional[int] = None, search_term: str = "", now: Optional[datetime] = None) -> BookedView:
    """
    Accepted bookings for the vendor's "booked services" screen, most
    recently confirmed first. `month` is 1-12 on the booking date.
    """
    if month is not None and not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")
    now = now or datetime.now(timezone.utc)

    accepted = filter_bookings(bookings, BookingStatus.CONFIRMED.value, search_term)
    if month is not None:
        accepted = [b for b in accepted if b.booking_date and b.booking_date.month == month]
    accepted = sort_by_confirmation(accepted)

    return BookedView(
        bookings=accepted,
        total=len(accepted),
        upcoming=sum(1 for b in accepted if b.booking_date and b.booking_date > now),
        revenue=sum(b.price or 0.0 for b in accepted),
    )

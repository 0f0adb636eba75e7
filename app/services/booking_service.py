from typing import Optional, List, Set

from app.core.errors import BookingError, NetworkError, NotFound, RequestRejected, TransitionRejected
from app.core.logger import logger
from app.models.booking import Booking, BookingStats, BookingStatus, Notice, Role, Scope, Session
from app.services.backend_client import BackendClient
from app.services.booking_filters import compute_stats, filter_bookings, sort_newest_first
from app.services.status import ensure_transition, parse_target_status
from app.services.transform import transform_bookings


class BookingService:
    """
    Booking list for one actor (a vendor or a customer) and the commands
    that change it.

    The server is authoritative: after any successful command the list is
    fetched again instead of being patched locally. Failures never
    propagate out of the public operations; they are recorded in
    `last_error`, announced through `notices`, and the last good list is
    kept.
    """

    def __init__(self, scope: Scope, session: Optional[Session], client: Optional[BackendClient] = None):
        self.scope = scope
        self.session = session
        self.client = client or BackendClient()

        self.bookings: List[Booking] = []
        self.loading = False
        self.loaded = False
        self.last_error: Optional[BookingError] = None
        self.notices: List[Notice] = []

        self._generation = 0
        self._in_flight: Set[str] = set()

    # -------- state helpers --------

    def _notify(self, level: str, message: str, error: Optional[BookingError] = None):
        self.notices.append(Notice(level=level, message=message, kind=error.kind if error else None))

    def _fail(self, error: BookingError):
        self.last_error = error
        self._notify("error", error.message, error)
        logger.warning(f"⚠️ [{error.kind.value}] {self.scope.role.value}:{self.scope.actor_id} - {error.message}")

    def get(self, booking_id: str) -> Optional[Booking]:
        return next((b for b in self.bookings if b.id == str(booking_id)), None)

    @property
    def stats(self) -> BookingStats:
        return compute_stats(self.bookings)

    def filtered(self, status_filter: Optional[str] = "all", search_term: str = "") -> List[Booking]:
        return filter_bookings(self.bookings, status_filter, search_term)

    def pop_notices(self) -> List[Notice]:
        notices, self.notices = self.notices, []
        return notices

    # -------- fetch --------

    async def fetch_bookings(self) -> List[Booking]:
        """Raw fetch for the scope; raises BookingError. A 404 means no bookings."""
        actor_id = self.scope.actor_id
        try:
            if self.scope.role == Role.VENDOR:
                data = await self.client.get_vendor_bookings(actor_id, self.session)
            else:
                data = await self.client.get_customer_bookings(actor_id, self.session)
        except NotFound:
            logger.info(f"📭 No bookings for {self.scope.role.value} {actor_id}")
            return []

        bookings = transform_bookings(data, vendor_facing=self.scope.role == Role.VENDOR)
        return sort_newest_first(bookings)

    async def list_bookings(self) -> bool:
        """
        Loads the scope's bookings. Only the newest fetch may write the
        list: a response that arrives after a later fetch was started is
        dropped. Returns True when the list was replaced.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True
        logger.info(f"📥 Loading bookings for {self.scope.role.value} {self.scope.actor_id}")

        try:
            try:
                bookings = await self.fetch_bookings()
            except BookingError as e:
                error = e
            except Exception as e:
                logger.opt(exception=e).error(f"❌ Unexpected error loading bookings: {e}")
                error = NetworkError("The server sent data we could not read")
            else:
                error = None

            if generation != self._generation:
                logger.debug(f"Dropping stale fetch #{generation} (latest #{self._generation})")
                return False
            if error is not None:
                self._fail(error)
                return False

            self.bookings = bookings
            self.loaded = True
            self.last_error = None
            logger.info(f"✅ Loaded {len(bookings)} bookings for {self.scope.role.value} {self.scope.actor_id}")
            return True
        finally:
            if generation == self._generation:
                self.loading = False

    # -------- commands --------

    async def _send_transition(self, booking_id: str, target: BookingStatus):
        booking = self.get(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        if booking.id in self._in_flight:
            raise TransitionRejected("This booking is already being updated")

        ensure_transition(booking.status, target, self.scope.role)

        self._in_flight.add(booking.id)
        try:
            await self.client.update_status(booking.id, target, self.session)
        except TransitionRejected:
            raise
        except RequestRejected as e:
            raise TransitionRejected(e.message if e.message != RequestRejected.default_message else None,
                                     status_code=e.status_code)
        finally:
            self._in_flight.discard(booking.id)

    async def transition_status(self, booking_id: str, target) -> bool:
        """
        Asks the server to move a booking to `target`, then refetches.
        Moves the transition table or the actor's role forbids are
        rejected without a request.
        """
        logger.info(f"🔁 {self.scope.role.value} {self.scope.actor_id}: booking {booking_id} -> {getattr(target, 'value', target)}")
        try:
            await self._send_transition(str(booking_id), parse_target_status(target))
        except BookingError as e:
            self._fail(e)
            return False

        self._notify("success", "Booking status updated successfully")
        await self.list_bookings()
        return True

    async def delete_booking(self, booking_id: str, confirmed: bool = False) -> bool:
        """
        Removes a booking for good. Customers only, and only once the user
        confirmed. On success the entry leaves the local list immediately
        and the list is refetched.
        """
        booking_id = str(booking_id)
        try:
            if self.scope.role != Role.CUSTOMER:
                raise RequestRejected("Only the customer can remove a booking")
            if not confirmed:
                raise RequestRejected("Please confirm the removal first")
            await self.client.delete_booking(booking_id, self.session)
        except BookingError as e:
            self._fail(e)
            return False

        logger.info(f"🗑️ Booking {booking_id} deleted")
        # Invalidate fetches started before the delete so they cannot bring it back
        self._generation += 1
        self.bookings = [b for b in self.bookings if b.id != booking_id]
        self._notify("success", "Booking deleted successfully")
        await self.list_bookings()
        return True

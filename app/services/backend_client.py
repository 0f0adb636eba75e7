from typing import Optional, Any, Dict
import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import (
    ConfigurationError,
    NotAuthenticated,
    NotFound,
    NetworkError,
    RequestRejected,
    message_text,
)
from app.core.logger import logger
from app.models.booking import BookingStatus, Envelope, Session, StatusUpdateRequest

REJECTION_CODES = {400, 409, 422}


def _auth_headers(session: Session) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {session.token}",
    }


def _server_message(resp: httpx.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return message_text(resp.text)
    if isinstance(body, dict):
        return message_text(body.get("message"))
    return None


class BackendClient:
    """
    Async client for the wedding-planner REST backend's /booking endpoints.

    Every call takes the session explicitly. A missing base URL or token
    fails before anything is sent.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (settings.BACKEND_URL if base_url is None else base_url).rstrip("/")
        self.timeout = settings.REQUEST_TIMEOUT if timeout is None else timeout
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        session: Optional[Session],
        payload: Optional[dict] = None,
        allow_empty: bool = False,
    ) -> Envelope:
        if not self.base_url:
            raise ConfigurationError()
        if session is None or not session.token:
            raise NotAuthenticated()

        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method=method, url=url, json=payload, headers=_auth_headers(session))
                resp.raise_for_status()
        except httpx.TimeoutException:
            logger.warning(f"⏱️ Timeout calling {method} {url}")
            raise NetworkError(f"Timed out calling the server ({path})")
        except httpx.HTTPStatusError as e:
            raise self._status_error(e.response)
        except httpx.HTTPError as e:
            logger.warning(f"❌ Transport error calling {method} {url}: {e}")
            raise NetworkError()

        if allow_empty and not resp.content:
            return Envelope(success=True)

        try:
            envelope = Envelope.model_validate(resp.json())
        except (ValueError, ValidationError):
            if allow_empty:
                return Envelope(success=True)
            logger.error(f"❌ Malformed response from {method} {url}")
            raise NetworkError("The server sent an unreadable response")

        if not envelope.success:
            raise RequestRejected(envelope.message, status_code=resp.status_code)
        return envelope

    def _status_error(self, resp: httpx.Response):
        status = resp.status_code
        message = _server_message(resp)
        logger.warning(f"⚠️ Backend responded {status}: {message}")

        if status in (401, 403):
            return NotAuthenticated(message, status_code=status)
        if status == 404:
            return NotFound(message, status_code=status)
        if status in REJECTION_CODES:
            return RequestRejected(message, status_code=status)
        return NetworkError(f"Server error ({status})", status_code=status)

    # -------- BOOKINGS --------

    async def get_vendor_bookings(self, vendor_id: str, session: Optional[Session]) -> Any:
        envelope = await self._request("GET", f"/booking/vendor/{vendor_id}", session)
        return envelope.data

    async def get_customer_bookings(self, customer_id: str, session: Optional[Session]) -> Any:
        envelope = await self._request("GET", f"/booking/customer/{customer_id}", session)
        return envelope.data

    async def update_status(self, booking_id: str, status: BookingStatus, session: Optional[Session]) -> Envelope:
        body = StatusUpdateRequest(bookingId=booking_id, status=status)
        return await self._request("PUT", "/booking/update-status", session, body.model_dump(mode="json"))

    async def delete_booking(self, booking_id: str, session: Optional[Session]) -> Envelope:
        return await self._request("DELETE", f"/booking/delete/{booking_id}", session, allow_empty=True)

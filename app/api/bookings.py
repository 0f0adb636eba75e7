from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from app.core.security import get_session
from app.models.booking import Booking, BookingStatus, Role, Scope, Session
from app.services.backend_client import BackendClient
from app.services.booking_filters import booked_view, bookings_for_service, reviewable_booking, status_date
from app.services.booking_service import BookingService

router = APIRouter(prefix="/bookings")


class StatusChangeRequest(BaseModel):
    status: BookingStatus


def get_backend_client() -> BackendClient:
    return BackendClient()


def _scope(role: Role, actor_id: str) -> Scope:
    if role == Role.ADMIN:
        raise HTTPException(status_code=400, detail="Bookings are listed per vendor or customer")
    return Scope(role=role, actor_id=actor_id)


async def _load(service: BookingService) -> BookingService:
    if not await service.list_bookings():
        raise service.last_error
    return service


def _card(booking: Booking) -> dict:
    card = booking.model_dump(mode="json")
    card["statusDate"] = status_date(booking).model_dump(mode="json")
    return card


def _listing(service: BookingService, bookings: Optional[List[Booking]] = None) -> dict:
    shown = service.bookings if bookings is None else bookings
    return {
        "success": True,
        "bookings": [_card(b) for b in shown],
        "stats": service.stats.model_dump(),
        "notices": [n.model_dump(mode="json") for n in service.pop_notices()],
    }


@router.get("/vendor/{vendor_id}/booked")
async def booked_services(
    vendor_id: str,
    month: Optional[int] = Query(None, ge=1, le=12),
    search: str = "",
    session: Optional[Session] = Depends(get_session),
    client: BackendClient = Depends(get_backend_client),
):
    service = await _load(BookingService(_scope(Role.VENDOR, vendor_id), session, client))
    view = booked_view(service.bookings, month, search)
    return {
        "success": True,
        "bookings": [_card(b) for b in view.bookings],
        "total": view.total,
        "upcoming": view.upcoming,
        "revenue": view.revenue,
    }


@router.get("/vendor/{vendor_id}/services/{service_id}")
async def service_bookings(
    vendor_id: str,
    service_id: str,
    session: Optional[Session] = Depends(get_session),
    client: BackendClient = Depends(get_backend_client),
):
    service = await _load(BookingService(_scope(Role.VENDOR, vendor_id), session, client))
    shown = bookings_for_service(service.bookings, service_id)
    return {"success": True, "count": len(shown), "bookings": [_card(b) for b in shown]}


@router.get("/customer/{customer_id}/reviewable/{service_id}")
async def reviewable(
    customer_id: str,
    service_id: str,
    session: Optional[Session] = Depends(get_session),
    client: BackendClient = Depends(get_backend_client),
):
    service = await _load(BookingService(_scope(Role.CUSTOMER, customer_id), session, client))
    booking = reviewable_booking(service.bookings, service_id)
    return {"eligible": booking is not None, "bookingId": booking.id if booking else None}


@router.get("/{role}/{actor_id}")
async def list_bookings(
    role: Role,
    actor_id: str,
    status: str = "all",
    search: str = "",
    session: Optional[Session] = Depends(get_session),
    client: BackendClient = Depends(get_backend_client),
):
    service = await _load(BookingService(_scope(role, actor_id), session, client))
    try:
        shown = service.filtered(status, search)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _listing(service, shown)


@router.put("/{role}/{actor_id}/{booking_id}/status")
async def change_status(
    role: Role,
    actor_id: str,
    booking_id: str,
    req: StatusChangeRequest,
    session: Optional[Session] = Depends(get_session),
    client: BackendClient = Depends(get_backend_client),
):
    service = await _load(BookingService(_scope(role, actor_id), session, client))
    if not await service.transition_status(booking_id, req.status):
        raise service.last_error
    return _listing(service)


@router.delete("/customer/{customer_id}/{booking_id}")
async def delete_booking(
    customer_id: str,
    booking_id: str,
    confirm: bool = False,
    session: Optional[Session] = Depends(get_session),
    client: BackendClient = Depends(get_backend_client),
):
    service = await _load(BookingService(_scope(Role.CUSTOMER, customer_id), session, client))
    if not await service.delete_booking(booking_id, confirmed=confirm):
        raise service.last_error
    return _listing(service)

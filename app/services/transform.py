"""
Raw backend payload -> Booking.

The vendor endpoint returns the vendor's services with their bookings
nested; the customer endpoint returns bookings with the service (and its
vendor) nested. Both shapes end up as the same flat Booking.
"""
from typing import Optional, List, Dict, Any, Iterable
from datetime import datetime, timezone
from pydantic import ValidationError

from app.core.logger import logger
from app.models.booking import Booking, CustomerInfo, ServicePackage, BookingStatus
from app.services.status import normalize_status


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"⚠️ Unparseable timestamp: {value}")
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _str_id(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _text(value: Any, default: Optional[str] = None) -> Optional[str]:
    """Display fields come back as whatever the backend had; only strings go out."""
    if value is None or isinstance(value, (dict, list)):
        return default
    text = str(value).strip()
    return text or default


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _join_address(*parts: Any) -> str:
    return ", ".join(t for t in (_text(p) for p in parts) if t)


def _full_name(person: Dict[str, Any]) -> str:
    return f"{_text(person.get('firstName'), '')} {_text(person.get('lastName'), '')}".strip()


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None and value != "" else None
    except (TypeError, ValueError):
        return None


def _packages(raw: Any) -> List[ServicePackage]:
    if not isinstance(raw, list):
        return []
    return [
        ServicePackage(
            id=p.get("id"),
            package_name=_text(p.get("packageName") or p.get("name"), ""),
            price=_to_float(p.get("price")),
            features=_text(p.get("features"), ""),
        )
        for p in raw if isinstance(p, dict)
    ]


def _customer(raw: Any) -> Optional[CustomerInfo]:
    if not isinstance(raw, dict) or not raw:
        return None
    address = _join_address(
        raw.get("address"),
        raw.get("city"),
        raw.get("distric") or raw.get("district"),
        raw.get("province"),
        raw.get("country"),
    )
    return CustomerInfo(
        id=_str_id(raw.get("userId") or raw.get("id")),
        name=_full_name(raw) or _text(raw.get("name"), ""),
        email=_text(raw.get("email")),
        phone=_text(raw.get("contactNo") or raw.get("phone")),
        address=address or "Address not provided",
    )


def booking_from_payload(raw: Dict[str, Any], service: Optional[Dict[str, Any]] = None) -> Booking:
    """
    Builds a Booking from one raw booking dict. `service` is the owning
    service when the booking came nested inside it (vendor endpoint);
    otherwise the booking's own `service` key is used. A bare id in place
    of the service (or vendor) object is kept as the id.
    """
    nested = service if service is not None else raw.get("service")
    svc = _dict(nested)
    vendor_raw = svc.get("vendor")
    vendor = _dict(vendor_raw)

    service_id = svc.get("serviceId") or svc.get("id") or raw.get("serviceId")
    if service_id is None and not isinstance(nested, (dict, list)):
        service_id = nested
    vendor_id = svc.get("vendorId") or vendor.get("userId") or vendor.get("id") or raw.get("vendorId")
    if vendor_id is None and not isinstance(vendor_raw, (dict, list)):
        vendor_id = vendor_raw

    location = (
        _join_address(
            svc.get("address"),
            svc.get("city"),
            svc.get("distric") or svc.get("district"),
            svc.get("state") or svc.get("province"),
            svc.get("country"),
        )
        or _text(raw.get("location"))
        or "Not specified"
    )

    customer = _customer(raw.get("customer"))
    customer_id = _str_id(raw.get("customerId")) or (customer.id if customer else None)

    return Booking(
        id=str(raw["id"]),
        status=normalize_status(raw.get("status")),
        service_id=_str_id(service_id),
        customer_id=customer_id,
        vendor_id=_str_id(vendor_id),
        created_at=parse_timestamp(raw.get("createdAt") or raw.get("bookingDate")),
        updated_at=parse_timestamp(raw.get("updatedAt")),
        confirmed_at=parse_timestamp(raw.get("confirmedAt")),
        cancelled_at=parse_timestamp(raw.get("cancelledAt")),
        completed_at=parse_timestamp(raw.get("completedAt")),
        booking_date=parse_timestamp(raw.get("bookingDate") or raw.get("eventDate")),
        service_name=_text(svc.get("serviceName")) or _text(raw.get("serviceName"), "Unnamed Service"),
        category=_text(svc.get("category")) or _text(raw.get("category"), "Other"),
        provider_name=_full_name(vendor) or _text(vendor.get("providerName"), "Unknown Provider"),
        location=location,
        customer=customer,
        package_name=_text(raw.get("packageName")),
        price=_to_float(raw.get("price") if raw.get("price") is not None else raw.get("totalAmount")),
        packages=_packages(svc.get("packages")),
    )


def _iter_raw(data: Iterable[Any]):
    for item in data:
        if not isinstance(item, dict):
            continue
        if isinstance(item.get("bookings"), list):
            # A service with its bookings nested
            for raw in item["bookings"]:
                if isinstance(raw, dict):
                    yield raw, item
        else:
            yield item, None


def transform_bookings(data: Any, vendor_facing: bool = False) -> List[Booking]:
    """
    Flattens a list payload into Bookings, keyed on id so a booking that
    shows up twice is kept once. Vendor-facing lists drop INTERESTED
    (wishlist) entries.
    """
    if not isinstance(data, list):
        return []

    seen: Dict[str, Booking] = {}
    for raw, service in _iter_raw(data):
        if raw.get("id") is None:
            logger.warning("⚠️ Skipping booking without id")
            continue
        try:
            booking = booking_from_payload(raw, service)
        except (ValidationError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"⚠️ Skipping unreadable booking {raw.get('id')}: {e}")
            continue
        if booking.id in seen:
            continue
        if vendor_facing and booking.status == BookingStatus.INTERESTED:
            continue
        seen[booking.id] = booking

    return list(seen.values())

"""
Test configuration and fixtures.
The REST backend is an in-memory fake plugged into httpx via MockTransport,
so no test touches the network.
"""
import json
import pytest
import httpx
from datetime import datetime, timezone, timedelta

from app.models.booking import Session
from app.services.backend_client import BackendClient

BASE_URL = "http://backend.test/api"

SERVER_TRANSITIONS = {
    "INTERESTED": {"PENDING"},
    "PENDING": {"CONFIRMED", "CANCELLED"},
    "CONFIRMED": {"COMPLETED", "CANCELLED"},
}

TIMESTAMP_FIELDS = {
    "CONFIRMED": "confirmedAt",
    "CANCELLED": "cancelledAt",
    "COMPLETED": "completedAt",
}


def iso(days_ago: int = 0) -> str:
    return (datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc) - timedelta(days=days_ago)).isoformat().replace("+00:00", "Z")


class FakeBackend:
    """Just enough of the /booking API to exercise the client end to end."""

    def __init__(self):
        self.services = {}
        self.bookings = {}
        self.requests = []
        self.fail_with = None

    def add_service(self, service_id, vendor_id, name, category="Other", **extra):
        self.services[service_id] = {
            "serviceId": service_id,
            "vendorId": vendor_id,
            "serviceName": name,
            "category": category,
            "vendor": {"firstName": "Vera", "lastName": "Vendor", "email": "vera@example.com"},
            **extra,
        }

    def add_booking(self, booking_id, service_id, status="PENDING", customer_id="c1", days_ago=0, customer=None, **extra):
        self.bookings[booking_id] = {
            "id": booking_id,
            "serviceId": service_id,
            "customerId": customer_id,
            "status": status,
            "createdAt": iso(days_ago),
            "updatedAt": iso(days_ago),
            "confirmedAt": None,
            "cancelledAt": None,
            "completedAt": None,
            "customer": customer,
            **extra,
        }

    # -------- routing --------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"success": False, "message": "Backend exploded"})
        if not request.headers.get("Authorization", "").startswith("Bearer "):
            return httpx.Response(401, json={"success": False, "message": "Unauthorized"})

        path = request.url.path[len("/api"):]
        parts = path.strip("/").split("/")

        if request.method == "GET" and parts[:2] == ["booking", "vendor"]:
            return self._vendor(parts[2])
        if request.method == "GET" and parts[:2] == ["booking", "customer"]:
            return self._customer(parts[2])
        if request.method == "PUT" and parts == ["booking", "update-status"]:
            return self._update(json.loads(request.content))
        if request.method == "DELETE" and parts[:2] == ["booking", "delete"]:
            return self._delete(parts[2])
        return httpx.Response(404, json={"success": False, "message": "Route not found"})

    def _vendor(self, vendor_id):
        services = [s for s in self.services.values() if s["vendorId"] == vendor_id]
        if not services:
            return httpx.Response(404, json={"success": False, "message": "No services found"})
        data = [
            {**svc, "bookings": [dict(b) for b in self.bookings.values() if b["serviceId"] == svc["serviceId"]]}
            for svc in services
        ]
        return httpx.Response(200, json={"success": True, "data": data})

    def _customer(self, customer_id):
        data = [
            {**b, "service": self.services.get(b["serviceId"], {})}
            for b in self.bookings.values() if b["customerId"] == customer_id
        ]
        return httpx.Response(200, json={"success": True, "data": data})

    def _update(self, body):
        booking = self.bookings.get(body.get("bookingId"))
        if booking is None:
            return httpx.Response(404, json={"success": False, "message": "Booking not found"})
        target = body.get("status")
        if target not in SERVER_TRANSITIONS.get(booking["status"], set()):
            return httpx.Response(200, json={"success": False, "message": "Invalid status transition"})
        booking["status"] = target
        booking["updatedAt"] = iso()
        if target in TIMESTAMP_FIELDS:
            booking[TIMESTAMP_FIELDS[target]] = iso()
        return httpx.Response(200, json={"success": True, "data": dict(booking)})

    def _delete(self, booking_id):
        if self.bookings.pop(booking_id, None) is None:
            return httpx.Response(404, json={"success": False, "message": "Booking not found"})
        return httpx.Response(200, json={"success": True, "message": "Deleted"})


@pytest.fixture
def backend():
    """Vendor v1 owns Photography (s1) and Catering (s2)."""
    fake = FakeBackend()
    fake.add_service("s1", "v1", "Photography", "Photo & Video", address="12 Lake Rd", city="Kandy")
    fake.add_service("s2", "v1", "Catering", "Food")
    fake.add_booking(
        "b1", "s1", "PENDING", customer_id="c1", days_ago=2,
        customer={"userId": "c1", "firstName": "Anna", "lastName": "Perera", "email": "anna@example.com"},
    )
    fake.add_booking(
        "b2", "s2", "CONFIRMED", customer_id="c1", days_ago=5,
        customer={"userId": "c1", "firstName": "Anna", "lastName": "Perera", "email": "anna@example.com"},
        confirmedAt=iso(4), price=1500,
    )
    fake.add_booking("b3", "s1", "INTERESTED", customer_id="c2", days_ago=1)
    return fake


@pytest.fixture
def client(backend):
    return BackendClient(base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def session():
    return Session(token="test-token", user_id="v1")

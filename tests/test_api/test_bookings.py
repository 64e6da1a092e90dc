"""Tests for booking endpoints."""

import uuid
from datetime import date, datetime, timedelta, timezone

from httpx import AsyncClient

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _future_dates(offset_start: int = 30, nights: int = 5) -> tuple[str, str]:
    """Return a (check_in, check_out) pair safely in the future as ISO strings."""
    check_in = date.today() + timedelta(days=offset_start)
    check_out = check_in + timedelta(days=nights)
    return check_in.isoformat(), check_out.isoformat()


# ---------------------------------------------------------------------------
# POST /api/v1/bookings
# ---------------------------------------------------------------------------


class TestCreateBooking:
    """Tests for creating bookings."""

    async def test_create_success(self, client: AsyncClient, guest_headers: dict, villa, guest) -> None:
        ci, co = _future_dates(30, 5)
        response = await client.post(
            "/api/v1/bookings",
            json={"property_id": str(villa.id), "check_in": ci, "check_out": co, "guest_count": 2},
            headers=guest_headers,
        )
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["property_id"] == str(villa.id)
        assert data["guest_id"] == str(guest.id)
        assert data["check_in"] == ci
        assert data["check_out"] == co
        assert data["status"] == "confirmed"
        assert float(data["total_price"]) == 750.00

    async def test_client_price_is_ignored(self, client: AsyncClient, guest_headers: dict, villa) -> None:
        ci, co = _future_dates(30, 2)
        response = await client.post(
            "/api/v1/bookings",
            json={
                "property_id": str(villa.id),
                "check_in": ci,
                "check_out": co,
                "guest_count": 1,
                "total_price": 1.00,
            },
            headers=guest_headers,
        )
        assert response.status_code == 201
        assert float(response.json()["total_price"]) == 300.00

    async def test_requires_auth(self, client: AsyncClient, villa) -> None:
        ci, co = _future_dates()
        response = await client.post(
            "/api/v1/bookings",
            json={"property_id": str(villa.id), "check_in": ci, "check_out": co, "guest_count": 1},
        )
        assert response.status_code in (401, 403)

    async def test_hosts_cannot_book(self, client: AsyncClient, host_headers: dict, villa) -> None:
        ci, co = _future_dates()
        response = await client.post(
            "/api/v1/bookings",
            json={"property_id": str(villa.id), "check_in": ci, "check_out": co, "guest_count": 1},
            headers=host_headers,
        )
        assert response.status_code == 403

    async def test_inverted_dates_rejected(self, client: AsyncClient, guest_headers: dict, villa) -> None:
        ci, co = _future_dates()
        response = await client.post(
            "/api/v1/bookings",
            json={"property_id": str(villa.id), "check_in": co, "check_out": ci, "guest_count": 1},
            headers=guest_headers,
        )
        assert response.status_code == 422

    async def test_unknown_property(self, client: AsyncClient, guest_headers: dict) -> None:
        ci, co = _future_dates()
        response = await client.post(
            "/api/v1/bookings",
            json={"property_id": str(uuid.uuid4()), "check_in": ci, "check_out": co, "guest_count": 1},
            headers=guest_headers,
        )
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"

    async def test_too_many_guests(self, client: AsyncClient, guest_headers: dict, villa) -> None:
        ci, co = _future_dates()
        response = await client.post(
            "/api/v1/bookings",
            json={"property_id": str(villa.id), "check_in": ci, "check_out": co, "guest_count": 5},
            headers=guest_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "capacity_exceeded"

    async def test_overlap_conflict(
        self, client: AsyncClient, guest_headers: dict, villa, other_guest, make_booking
    ) -> None:
        start = date.today() + timedelta(days=30)
        existing = await make_booking(villa, other_guest, start, start + timedelta(days=9))

        ci, co = _future_dates(34, 10)
        response = await client.post(
            "/api/v1/bookings",
            json={"property_id": str(villa.id), "check_in": ci, "check_out": co, "guest_count": 2},
            headers=guest_headers,
        )
        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "conflict"
        assert detail["conflicts"][0]["booking_id"] == str(existing.id)


# ---------------------------------------------------------------------------
# GET /api/v1/bookings
# ---------------------------------------------------------------------------


class TestListBookings:
    async def test_lists_only_own_bookings(
        self, client: AsyncClient, guest_headers: dict, villa, guest, other_guest, make_booking
    ) -> None:
        start = date.today() + timedelta(days=10)
        mine = await make_booking(villa, guest, start, start + timedelta(days=2))
        await make_booking(villa, other_guest, start + timedelta(days=5), start + timedelta(days=7))

        response = await client.get("/api/v1/bookings", headers=guest_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == str(mine.id)
        assert data["items"][0]["property"]["title"] == villa.title

    async def test_filter(self, client: AsyncClient, guest_headers: dict, villa, guest, make_booking) -> None:
        start = date.today() + timedelta(days=10)
        await make_booking(villa, guest, start, start + timedelta(days=2))
        cancelled = await make_booking(villa, guest, start, start + timedelta(days=2), status="cancelled")

        response = await client.get("/api/v1/bookings", params={"filter": "cancelled"}, headers=guest_headers)
        assert response.status_code == 200
        assert [b["id"] for b in response.json()["items"]] == [str(cancelled.id)]

    async def test_unknown_filter_rejected(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await client.get("/api/v1/bookings", params={"filter": "soon"}, headers=guest_headers)
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# GET /api/v1/bookings/{id}
# ---------------------------------------------------------------------------


class TestGetBooking:
    async def test_guest_and_host_can_view(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, villa, guest, make_booking
    ) -> None:
        start = date.today() + timedelta(days=10)
        booking = await make_booking(villa, guest, start, start + timedelta(days=2))

        as_guest = await client.get(f"/api/v1/bookings/{booking.id}", headers=guest_headers)
        as_host = await client.get(f"/api/v1/bookings/{booking.id}", headers=host_headers)

        assert as_guest.status_code == 200
        assert as_host.status_code == 200
        assert as_guest.json()["property"]["id"] == str(villa.id)

    async def test_stranger_forbidden(
        self, client: AsyncClient, other_guest_headers: dict, villa, guest, make_booking
    ) -> None:
        start = date.today() + timedelta(days=10)
        booking = await make_booking(villa, guest, start, start + timedelta(days=2))

        response = await client.get(f"/api/v1/bookings/{booking.id}", headers=other_guest_headers)
        assert response.status_code == 403

    async def test_not_found(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await client.get(f"/api/v1/bookings/{uuid.uuid4()}", headers=guest_headers)
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# POST /api/v1/bookings/{id}/cancel
# ---------------------------------------------------------------------------


class TestCancelBooking:
    async def test_cancel_well_ahead(self, client: AsyncClient, guest_headers: dict, villa, guest, make_booking) -> None:
        start = date.today() + timedelta(days=10)
        booking = await make_booking(villa, guest, start, start + timedelta(days=2))

        response = await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=guest_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        again = await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=guest_headers)
        assert again.status_code == 400
        assert again.json()["detail"]["code"] == "already_cancelled"

    async def test_less_than_24_hours_before_check_in(
        self, client: AsyncClient, guest_headers: dict, villa, guest, make_booking
    ) -> None:
        # Midnight UTC tomorrow is always under 24 hours away
        tomorrow = datetime.now(timezone.utc).date() + timedelta(days=1)
        booking = await make_booking(villa, guest, tomorrow, tomorrow + timedelta(days=2))

        response = await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=guest_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "too_late"

    async def test_cannot_cancel_someone_elses(
        self, client: AsyncClient, other_guest_headers: dict, villa, guest, make_booking
    ) -> None:
        start = date.today() + timedelta(days=10)
        booking = await make_booking(villa, guest, start, start + timedelta(days=2))

        response = await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=other_guest_headers)
        assert response.status_code == 403

"""
HTTP tests for the /api/v1/bookings endpoints and /metrics.
"""

from datetime import timedelta

import pytest

from service_booking.core.enums import RoleName

BASE = "/api/v1/bookings"


def _headers(user) -> dict:
    return {"X-Actor-Id": user.id}


@pytest.fixture
def payload(provider, offered_service, clock):
    return {
        "provider_id": provider.id,
        "service_id": offered_service.id,
        "scheduled_at": (clock() + timedelta(hours=48)).isoformat(),
    }


class TestCreateBooking:
    @pytest.mark.parametrize("headers", [{}, {"X-Actor-Id": "   "}])
    def test_requires_actor_header(self, client, payload, headers):
        response = client.post(BASE, json=payload, headers=headers)

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "Unauthenticated"

    def test_unknown_actor_is_unauthorized(self, client, payload):
        response = client.post(BASE, json=payload, headers={"X-Actor-Id": "nobody"})
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UnknownActor"

    def test_inactive_actor_is_unauthorized(self, client, payload, user_factory):
        retired = user_factory(RoleName.CUSTOMER, first_name="Ivy", is_active=False)

        response = client.post(BASE, json=payload, headers=_headers(retired))

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UnknownActor"

    def test_customer_books_for_themselves(self, client, payload, customer):
        response = client.post(BASE, json=payload, headers=_headers(customer))

        assert response.status_code == 201
        data = response.json()
        assert data["customer_id"] == customer.id
        assert data["status"] == "SCHEDULED"
        assert data["status_code"] == 1
        assert data["status_label"] == "Scheduled"
        assert data["price"] == 50.0
        assert data["cancellation_reason"] is None

    def test_same_slot_twice_is_a_conflict(self, client, payload, customer, other_customer):
        assert client.post(BASE, json=payload, headers=_headers(customer)).status_code == 201

        response = client.post(BASE, json=payload, headers=_headers(other_customer))

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "SlotConflict"

    def test_short_notice_is_unprocessable(self, client, payload, customer, clock):
        payload["scheduled_at"] = (clock() + timedelta(hours=2)).isoformat()

        response = client.post(BASE, json=payload, headers=_headers(customer))

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "InsufficientLeadTime"

    def test_customer_cannot_book_for_someone_else(self, client, payload, customer, other_customer):
        payload["customer_id"] = other_customer.id

        response = client.post(BASE, json=payload, headers=_headers(customer))

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "AccessDenied"

    def test_administrator_books_on_behalf_of_customer(
        self, client, payload, administrator, customer
    ):
        payload["customer_id"] = customer.id

        response = client.post(BASE, json=payload, headers=_headers(administrator))

        assert response.status_code == 201
        assert response.json()["customer_id"] == customer.id

    def test_unknown_fields_are_rejected(self, client, payload, customer):
        payload["price"] = 1
        response = client.post(BASE, json=payload, headers=_headers(customer))
        assert response.status_code == 422


class TestReadBookings:
    def test_get_booking_for_participant_and_stranger(
        self, client, book, customer, other_customer
    ):
        booking = book(hours=48)

        assert client.get(f"{BASE}/{booking.id}", headers=_headers(customer)).status_code == 200
        assert client.get(f"{BASE}/{booking.id}", headers=_headers(other_customer)).status_code == 403

    def test_missing_booking_is_404(self, client, customer):
        response = client.get(f"{BASE}/01HZZZZZZZZZZZZZZZZZZZZZZZ", headers=_headers(customer))
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NotFound"

    def test_customer_list(self, client, book, customer, other_customer):
        book(hours=30)
        book(hours=60)

        response = client.get(f"{BASE}/customer/{customer.id}", headers=_headers(customer))
        assert response.status_code == 200
        assert len(response.json()) == 2

        denied = client.get(f"{BASE}/customer/{customer.id}", headers=_headers(other_customer))
        assert denied.status_code == 403

    def test_provider_agenda_range(self, client, book, provider, clock):
        book(hours=30)
        book(hours=60)
        params = {
            "start": (clock() + timedelta(hours=24)).isoformat(),
            "end": (clock() + timedelta(hours=36)).isoformat(),
        }

        response = client.get(f"{BASE}/provider/{provider.id}", params=params, headers=_headers(provider))

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_provider_range_needs_both_bounds(self, client, provider, clock):
        response = client.get(
            f"{BASE}/provider/{provider.id}",
            params={"start": clock().isoformat()},
            headers=_headers(provider),
        )
        assert response.status_code == 400

    def test_paged_listing_is_admin_only(self, client, book, administrator, customer):
        for hours in (30, 40, 50):
            book(hours=hours)

        response = client.get(BASE, params={"page": 1, "size": 2}, headers=_headers(administrator))

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["per_page"] == 2
        assert len(data["items"]) == 2
        assert data["has_next"] is True
        assert data["has_prev"] is False

        assert client.get(BASE, headers=_headers(customer)).status_code == 403

    def test_oversized_page_is_rejected(self, client, administrator):
        response = client.get(BASE, params={"size": 10_000}, headers=_headers(administrator))
        assert response.status_code == 400


class TestChangeStatus:
    def test_cancel_returns_no_content_and_refunds(
        self, client, book, customer, refund_gateway
    ):
        booking = book(hours=48)

        response = client.post(
            f"{BASE}/{booking.id}/cancel",
            json={"reason": "Feeling unwell"},
            headers=_headers(customer),
        )

        assert response.status_code == 204
        refund_gateway.refund.assert_called_once_with(booking.id)

        detail = client.get(f"{BASE}/{booking.id}", headers=_headers(customer)).json()
        assert detail["status"] == "CANCELLED"
        assert detail["cancellation_reason"] == "Feeling unwell"

    def test_cancel_without_reason_is_bad_request(self, client, book, customer, refund_gateway):
        booking = book(hours=48)

        response = client.post(f"{BASE}/{booking.id}/cancel", json={}, headers=_headers(customer))

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "MissingCancellationReason"
        refund_gateway.refund.assert_not_called()

    @pytest.mark.parametrize(
        "requested,expected",
        [("No Show", "NO_SHOW"), (4, "COMPLETED"), ("CONFIRMED", "CONFIRMED")],
    )
    def test_provider_updates_status(self, client, book, provider, requested, expected):
        booking = book(hours=48)

        response = client.put(
            f"{BASE}/{booking.id}/status",
            json={"status": requested},
            headers=_headers(provider),
        )

        assert response.status_code == 200
        assert response.json()["status"] == expected

    def test_invalid_status_is_bad_request(self, client, book, provider):
        booking = book(hours=48)

        response = client.put(
            f"{BASE}/{booking.id}/status",
            json={"status": "Rescheduled"},
            headers=_headers(provider),
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "InvalidStatus"

    def test_terminal_booking_cannot_change(self, client, book, provider):
        booking = book(hours=48)
        client.put(f"{BASE}/{booking.id}/status", json={"status": "COMPLETED"}, headers=_headers(provider))

        response = client.put(
            f"{BASE}/{booking.id}/status", json={"status": "NO_SHOW"}, headers=_headers(provider)
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "IllegalTransition"


def test_metrics_endpoint_exposes_booking_metrics(client, book):
    book(hours=48)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "service_booking_service_operations_total" in response.text
    assert 'operation="book"' in response.text

from datetime import datetime, timedelta

import pytest

from models import db
from models.corporate_booking import CorporateBooking


def _create(client, payload):
    resp = client.post("/api/corporate-bookings", json=payload)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def test_create_normalizes_phone(client, corporate_payload, mailer):
    data = _create(client, corporate_payload)
    assert data["bookingReference"].startswith("CORP-")
    assert data["status"] == "pending"

    booking = db.session.get(CorporateBooking, data["id"])
    assert booking.phone == "9876543210"
    assert mailer.sent[0]["to"] == "jane@acme.com"


def test_short_phone_is_rejected(client, corporate_payload):
    resp = client.post("/api/corporate-bookings", json={**corporate_payload, "phone": "12345"})
    assert resp.status_code == 400
    assert "Please enter a valid 10-digit phone number" in resp.get_json()["errors"]


def test_duplicate_submission_returns_existing_reference(client, corporate_payload):
    first = _create(client, corporate_payload)

    resp = client.post("/api/corporate-bookings", json=corporate_payload)
    assert resp.status_code == 409
    body = resp.get_json()
    assert body["success"] is False
    assert body["existingBooking"]["bookingReference"] == first["bookingReference"]
    assert body["existingBooking"]["status"] == "pending"
    assert CorporateBooking.query.count() == 1


def test_public_reference_view_hides_admin_fields(client, corporate_payload):
    created = _create(client, corporate_payload)
    client.put(f"/api/corporate-bookings/{created['id']}", json={"adminNotes": "VIP"})

    resp = client.get(f"/api/corporate-bookings/reference/{created['bookingReference'].lower()}")
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["companyName"] == "Acme Corp"
    assert "adminNotes" not in data
    assert "actualCost" not in data


def test_admin_update_costs_and_status(client, corporate_payload, mailer):
    created = _create(client, corporate_payload)
    mailer.sent.clear()

    resp = client.put(f"/api/corporate-bookings/{created['id']}",
                      json={"status": "confirmed", "estimatedCost": 25000, "adminNotes": "Deposit paid"})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "confirmed"
    assert data["estimatedCost"] == 25000
    assert data["adminNotes"] == "Deposit paid"
    assert data["confirmedAt"] is not None
    assert len(mailer.sent) == 1


def test_admin_update_rejects_negative_cost(client, corporate_payload):
    created = _create(client, corporate_payload)
    resp = client.put(f"/api/corporate-bookings/{created['id']}", json={"actualCost": -5})
    assert resp.status_code == 400


def test_status_cancel_appends_reason(client, corporate_payload):
    created = _create(client, corporate_payload)
    resp = client.put(f"/api/corporate-bookings/{created['id']}/status",
                      json={"status": "cancelled", "reason": "Budget"})
    data = resp.get_json()["data"]
    assert data["status"] == "cancelled"
    assert data["adminNotes"] == "Cancelled: Budget"


def test_delete_keeps_record(client, corporate_payload):
    created = _create(client, corporate_payload)
    resp = client.delete(f"/api/corporate-bookings/{created['id']}")
    assert resp.status_code == 200
    assert db.session.get(CorporateBooking, created["id"]).status == "cancelled"


def test_list_filters_by_company_and_sorts(client, corporate_payload):
    _create(client, corporate_payload)
    later = (datetime.utcnow() + timedelta(days=30)).isoformat()
    _create(client, {**corporate_payload, "companyName": "Globex", "date": later})

    resp = client.get("/api/corporate-bookings?company=acme")
    body = resp.get_json()
    assert [b["companyName"] for b in body["data"]] == ["Acme Corp"]
    assert body["pagination"]["totalItems"] == 1

    resp = client.get("/api/corporate-bookings?sortBy=preferredDate&sortOrder=asc")
    assert [b["companyName"] for b in resp.get_json()["data"]] == ["Acme Corp", "Globex"]


def test_unknown_id_is_404(client):
    assert client.get("/api/corporate-bookings/42").status_code == 404
    assert client.delete("/api/corporate-bookings/42").status_code == 404


def test_stats(client, corporate_payload):
    created = _create(client, corporate_payload)
    client.put(f"/api/corporate-bookings/{created['id']}", json={"actualCost": 30000})

    data = client.get("/api/corporate-bookings/stats/overview").get_json()["data"]
    assert data["overview"]["totalBookings"] == 1
    assert data["overview"]["pendingBookings"] == 1
    assert data["overview"]["totalRevenue"] == 30000
    assert data["upcomingCount"] == 1
    assert data["monthlyTrends"][0]["bookings"] == 1


@pytest.mark.parametrize("field", ["estimatedCost", "actualCost"])
@pytest.mark.parametrize("value", ["NaN", "Infinity", "1e309"])
def test_non_finite_costs_are_rejected(client, corporate_payload, field, value):
    created = _create(client, corporate_payload)

    resp = client.put(f"/api/corporate-bookings/{created['id']}", json={field: value})
    assert resp.status_code == 400
    assert f"{field} must be a non-negative number" in resp.get_json()["errors"]

    saved = db.session.get(CorporateBooking, created["id"])
    assert saved.actual_cost is None
    assert saved.estimated_cost == 0


@pytest.mark.parametrize("failure", ["fail", "crash"])
def test_mail_failure_does_not_undo_status_cancel(client, corporate_payload, mailer, failure):
    created = _create(client, corporate_payload)
    setattr(mailer, failure, True)

    resp = client.put(f"/api/corporate-bookings/{created['id']}/status",
                      json={"status": "cancelled", "reason": "Venue clash"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "cancelled"

    saved = db.session.get(CorporateBooking, created["id"])
    assert saved.status == "cancelled"
    assert saved.cancelled_at is not None


@pytest.mark.parametrize("failure", ["fail", "crash"])
def test_mail_failure_does_not_undo_corporate_confirm(client, corporate_payload, mailer, failure):
    created = _create(client, corporate_payload)
    setattr(mailer, failure, True)

    resp = client.put(f"/api/corporate-bookings/{created['id']}/status", json={"status": "confirmed"})
    assert resp.status_code == 200
    saved = db.session.get(CorporateBooking, created["id"])
    assert saved.status == "confirmed"
    assert saved.confirmed_at is not None

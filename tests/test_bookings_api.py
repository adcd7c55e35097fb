from datetime import datetime, timedelta

import pytest

from models import db
from models.audit_log import AuditLog
from models.booking import Booking


def test_create_booking(client, booking_payload, mailer):
    resp = client.post("/api/bookings", json=booking_payload)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True

    booking = body["data"]["booking"]
    assert body["data"]["bookingId"] == booking["bookingId"]
    assert booking["bookingId"].startswith("SL-")
    assert booking["status"] == "pending"
    assert booking["customerEmail"] == "asha@example.com"
    assert "adminNotes" not in booking

    assert mailer.sent[0]["to"] == "asha@example.com"
    assert booking["bookingId"] in mailer.sent[0]["subject"]
    assert any(m["to"] == "admin@smashlabs.test" for m in mailer.sent)
    audit = AuditLog.query.filter_by(action="BOOKING_CREATE").one()
    assert audit.reference_code == booking["bookingId"]


def test_past_date_is_rejected_before_persisting(client, booking_payload, mailer):
    past = (datetime.utcnow() - timedelta(days=1)).isoformat()
    resp = client.post("/api/bookings", json={**booking_payload, "preferredDate": past})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "Validation failed"
    assert "Preferred date must be in the future" in body["errors"]
    assert Booking.query.count() == 0
    assert mailer.sent == []


def test_invalid_fields_are_all_reported(client):
    resp = client.post("/api/bookings", json={"packageType": "gold", "duration": 10})
    assert resp.status_code == 400
    errors = resp.get_json()["errors"]
    assert "Customer name is required" in errors
    assert "Package type must be one of: basic, premium, ultimate" in errors
    assert "Duration must be between 30 and 240 minutes" in errors


def test_notification_failure_does_not_fail_create(client, booking_payload, mailer):
    mailer.crash = True
    resp = client.post("/api/bookings", json=booking_payload)
    assert resp.status_code == 201
    assert Booking.query.count() == 1


def test_get_by_id_and_reference(client, make_booking):
    booking = make_booking()

    resp = client.get(f"/api/bookings/{booking['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["bookingId"] == booking["bookingId"]

    resp = client.get(f"/api/bookings/booking-id/{booking['bookingId'].lower()}")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["id"] == booking["id"]


def test_get_unknown_booking(client):
    assert client.get("/api/bookings/999").status_code == 404
    assert client.get("/api/bookings/booking-id/SL-NOPE-AAAAAAAA").status_code == 404


def test_list_filters_and_paginates(client, make_booking):
    make_booking()
    make_booking(packageType="basic")
    make_booking(packageType="basic")

    resp = client.get("/api/bookings?packageType=basic&limit=1")
    body = resp.get_json()
    assert resp.status_code == 200
    assert len(body["data"]["bookings"]) == 1
    assert body["data"]["pagination"]["totalItems"] == 2
    assert body["data"]["pagination"]["hasNextPage"] is True


def test_list_rejects_bad_limit(client):
    resp = client.get("/api/bookings?limit=500")
    assert resp.status_code == 400


def test_update_status_confirms_and_emails(client, make_booking, mailer):
    booking = make_booking()
    mailer.sent.clear()

    resp = client.put(f"/api/bookings/{booking['id']}/status",
                      json={"status": "confirmed", "adminNotes": "Paid at desk"})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "confirmed"
    assert data["confirmedAt"] is not None
    assert data["adminNotes"] == "Paid at desk"
    assert mailer.subjects() == [f"Booking Update - {booking['bookingId']}"]


def test_update_status_validation_and_missing(client, make_booking):
    booking = make_booking()
    assert client.put(f"/api/bookings/{booking['id']}/status", json={"status": "done"}).status_code == 400
    assert client.put("/api/bookings/999/status", json={"status": "confirmed"}).status_code == 404


def test_update_status_strict_mode_conflict(app, client, make_booking):
    booking = make_booking()
    client.put(f"/api/bookings/{booking['id']}/status", json={"status": "completed"})

    app.config["STRICT_TRANSITIONS"] = True
    resp = client.put(f"/api/bookings/{booking['id']}/status", json={"status": "pending"})
    assert resp.status_code == 409
    assert db.session.get(Booking, booking["id"]).status == "completed"


def test_delete_is_soft_cancel(client, make_booking):
    booking = make_booking()

    resp = client.delete(f"/api/bookings/{booking['id']}", json={"reason": "Double booked"})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "cancelled"
    assert data["adminNotes"] == "Cancelled: Double booked"
    assert db.session.get(Booking, booking["id"]) is not None


def test_delete_default_reason(client, make_booking):
    booking = make_booking()
    resp = client.delete(f"/api/bookings/{booking['id']}")
    assert resp.get_json()["data"]["adminNotes"] == "Cancelled: Booking cancelled by admin"


def test_stats(client, make_booking):
    first = make_booking()
    make_booking()
    client.put(f"/api/bookings/{first['id']}/status", json={"status": "confirmed"})

    data = client.get("/api/bookings/stats/overview").get_json()["data"]
    assert data["total"] == 2
    assert data["confirmed"] == 1
    assert data["pending"] == 1
    assert data["conversionRate"] == 50


def test_submissions_are_rate_limited(app, client, booking_payload):
    app.config["SUBMIT_RATE_MAX_REQUESTS"] = 1
    assert client.post("/api/bookings", json=booking_payload).status_code == 201

    resp = client.post("/api/bookings", json=booking_payload)
    assert resp.status_code == 429
    assert int(resp.headers["Retry-After"]) > 0


@pytest.mark.parametrize("price", ["NaN", "Infinity", "-Infinity", "1e309"])
def test_non_finite_price_is_a_validation_error(client, booking_payload, price):
    resp = client.post("/api/bookings", json={**booking_payload, "packagePrice": price})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "Validation failed"
    assert "Package price must be a positive number" in body["errors"]
    assert Booking.query.count() == 0


@pytest.mark.parametrize("failure", ["fail", "crash"])
def test_mail_failure_does_not_undo_status_change(client, make_booking, mailer, failure):
    booking = make_booking()
    setattr(mailer, failure, True)

    resp = client.put(f"/api/bookings/{booking['id']}/status", json={"status": "confirmed"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "confirmed"

    saved = db.session.get(Booking, booking["id"])
    assert saved.status == "confirmed"
    assert saved.confirmed_at is not None


@pytest.mark.parametrize("failure", ["fail", "crash"])
def test_mail_failure_does_not_undo_cancel(client, make_booking, mailer, failure):
    booking = make_booking()
    setattr(mailer, failure, True)

    resp = client.delete(f"/api/bookings/{booking['id']}", json={"reason": "Closed for repairs"})
    assert resp.status_code == 200

    saved = db.session.get(Booking, booking["id"])
    assert saved.status == "cancelled"
    assert saved.cancelled_at is not None
    assert saved.admin_notes == "Cancelled: Closed for repairs"


@pytest.mark.parametrize("url", [
    "/api/bookings",
    "/api/corporate-bookings",
    "/api/registrations",
    "/api/contact",
    "/api/newsletter/subscribe",
])
def test_every_create_route_shares_the_validation_envelope(client, url):
    resp = client.post(url, json={})
    assert resp.status_code == 400
    body = resp.get_json()
    assert set(body) == {"success", "message", "errors"}
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert body["errors"]

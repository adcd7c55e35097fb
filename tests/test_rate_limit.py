from datetime import datetime, timedelta

from models.ip_rate_limit import IpRateLimit


def test_hit_counts_within_window():
    start = datetime(2030, 1, 1, 12, 0)
    row = IpRateLimit(ip="1.2.3.4", scope="submit", window_start=start, count=0)
    assert row.hit(start + timedelta(seconds=10), 60) == 1
    assert row.hit(start + timedelta(seconds=20), 60) == 2
    assert row.window_start == start


def test_hit_resets_expired_window():
    start = datetime(2030, 1, 1, 12, 0)
    row = IpRateLimit(ip="1.2.3.4", scope="submit", window_start=start, count=5)
    later = start + timedelta(seconds=61)
    assert row.hit(later, 60) == 1
    assert row.window_start == later


def test_scopes_are_counted_separately(app, client, booking_payload):
    app.config["SUBMIT_RATE_MAX_REQUESTS"] = 1
    assert client.post("/api/bookings", json=booking_payload).status_code == 201
    assert client.post("/api/newsletter/subscribe", json={"email": "fan@example.com"}).status_code == 201
    assert client.post("/api/newsletter/subscribe", json={"email": "two@example.com"}).status_code == 429


def test_forwarded_for_uses_first_hop(app, client, booking_payload):
    app.config["SUBMIT_RATE_MAX_REQUESTS"] = 1
    headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}
    assert client.post("/api/bookings", json=booking_payload, headers=headers).status_code == 201
    assert client.post("/api/bookings", json=booking_payload).status_code == 201
    assert IpRateLimit.query.filter_by(ip="203.0.113.9").one().count == 1

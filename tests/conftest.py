from datetime import datetime, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from lifecycle.manager import BookingLifecycle


class FakeMailer:
    """Captures outgoing mail instead of talking to SMTP."""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.crash = False

    def send(self, to_email, subject, body):
        if self.crash:
            raise RuntimeError("smtp exploded")
        if self.fail:
            return False, "Connection refused"
        self.sent.append({"to": to_email, "subject": subject, "body": body})
        return True, None

    def subjects(self):
        return [m["subject"] for m in self.sent]


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(mailer):
    app = create_app(TestConfig, mailer=mailer)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def lifecycle(app):
    return BookingLifecycle(db.session)


def future_iso(days=7):
    return (datetime.utcnow() + timedelta(days=days)).replace(microsecond=0).isoformat()


@pytest.fixture
def booking_payload():
    return {
        "customerName": "Asha Verma",
        "customerEmail": "Asha@Example.com",
        "customerPhone": "+91 98765 43210",
        "packageType": "premium",
        "packageName": "Premium Smash",
        "packagePrice": 1999,
        "preferredDate": future_iso(),
        "preferredTime": "evening",
        "duration": 60,
        "participants": 2,
        "specialRequests": "Extra plates please",
    }


@pytest.fixture
def corporate_payload():
    return {
        "companyName": "Acme Corp",
        "contactPerson": "Jane Doe",
        "email": "jane@acme.com",
        "phone": "98765 43210",
        "jobTitle": "HR Manager",
        "teamSize": "11-20 people",
        "date": future_iso(14),
        "time": "Afternoon (12 PM - 5 PM)",
        "duration": "2 hours",
        "eventType": "Team Building",
        "specialRequests": "",
    }


@pytest.fixture
def make_booking(client, booking_payload):
    def _make(**overrides):
        resp = client.post("/api/bookings", json={**booking_payload, **overrides})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]["booking"]
    return _make

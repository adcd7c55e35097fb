from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from lifecycle.errors import (
    DuplicateSubmission,
    InvalidTransition,
    ReferenceCollision,
    UniqueViolation,
)
from lifecycle.manager import BookingLifecycle, append_note
from lifecycle.reference import reference_pattern
from models import db
from models.booking import Booking
from models.corporate_booking import CorporateBooking
from models.registration import Registration


def _booking(**overrides):
    fields = dict(
        customer_name="Asha Verma",
        customer_email="asha@example.com",
        customer_phone="9876543210",
        package_type="basic",
        package_name="Basic Smash",
        package_price=999,
        preferred_date=datetime.utcnow() + timedelta(days=3),
        preferred_time="morning",
        duration=30,
        participants=1,
    )
    fields.update(overrides)
    return Booking(**fields)


def _corporate(**overrides):
    fields = dict(
        company_name="Acme Corp",
        contact_person="Jane Doe",
        email="jane@acme.com",
        phone="9876543210",
        job_title="HR",
        team_size="5-10 people",
        preferred_date=datetime(2030, 1, 15, 10, 0),
        preferred_time="Morning (9 AM - 12 PM)",
        duration="2 hours",
        event_type="Team Building",
    )
    fields.update(overrides)
    return CorporateBooking(**fields)


class TickingClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


def test_create_assigns_reference_and_pending_status(lifecycle):
    booking = lifecycle.create(_booking())
    assert booking.id is not None
    assert booking.status == "pending"
    assert reference_pattern("SL").match(booking.reference_code)


def test_cancel_sets_timestamp_once(app):
    clock = TickingClock(datetime(2030, 1, 1))
    lifecycle = BookingLifecycle(db.session, clock=clock)
    booking = lifecycle.create(_booking())

    lifecycle.cancel(booking)
    first = booking.cancelled_at
    assert booking.status == "cancelled"
    assert first <= clock.now

    lifecycle.cancel(booking)
    assert booking.cancelled_at == first


def test_confirm_then_complete_orders_timestamps(app):
    lifecycle = BookingLifecycle(db.session, clock=TickingClock(datetime(2030, 1, 1)))
    booking = lifecycle.create(_booking())

    lifecycle.confirm(booking)
    lifecycle.complete(booking)

    assert booking.status == "completed"
    assert booking.confirmed_at <= booking.completed_at


def test_reconfirm_keeps_first_confirmed_at(app):
    lifecycle = BookingLifecycle(db.session, clock=TickingClock(datetime(2030, 1, 1)))
    booking = lifecycle.create(_booking())
    lifecycle.confirm(booking)
    first = booking.confirmed_at

    lifecycle.reopen(booking)
    lifecycle.confirm(booking)
    assert booking.confirmed_at == first


def test_cancel_reason_is_appended_to_notes(lifecycle):
    booking = lifecycle.create(_booking(admin_notes="Called customer"))
    lifecycle.cancel(booking, "Customer request")
    assert booking.admin_notes == "Called customer\nCancelled: Customer request"


def test_cancel_reason_without_previous_notes(lifecycle):
    booking = lifecycle.create(_booking())
    lifecycle.cancel(booking, "Weather")
    assert booking.admin_notes == "Cancelled: Weather"


def test_append_note():
    assert append_note(None, "a") == "a"
    assert append_note("", "a") == "a"
    assert append_note("x", "a") == "x\na"


def test_lenient_mode_allows_leaving_terminal_state(lifecycle):
    booking = lifecycle.create(_booking())
    lifecycle.cancel(booking)
    lifecycle.confirm(booking)
    assert booking.status == "confirmed"
    assert booking.cancelled_at is not None


def test_strict_mode_blocks_leaving_terminal_state(app):
    lifecycle = BookingLifecycle(db.session, strict=True)
    booking = lifecycle.create(_booking())
    lifecycle.complete(booking)

    with pytest.raises(InvalidTransition) as exc:
        lifecycle.transition(booking, "pending", admin_notes="should not stick")
    assert exc.value.status_code == 409
    assert booking.status == "completed"
    assert booking.admin_notes is None


def test_strict_mode_allows_repeating_terminal_state(app):
    lifecycle = BookingLifecycle(db.session, strict=True)
    booking = lifecycle.create(_booking())
    lifecycle.cancel(booking)
    lifecycle.cancel(booking, "again")
    assert booking.status == "cancelled"


def test_transition_rejects_unknown_status(lifecycle):
    booking = lifecycle.create(_booking())
    with pytest.raises(ValueError):
        lifecycle.transition(booking, "archived")


def test_transition_replaces_admin_notes(lifecycle):
    booking = lifecycle.create(_booking(admin_notes="old"))
    lifecycle.transition(booking, "confirmed", admin_notes="new")
    assert booking.admin_notes == "new"
    assert booking.confirmed_at is not None


def test_reference_collision_without_retry(lifecycle):
    first = lifecycle.create(_booking())
    with pytest.raises(ReferenceCollision) as exc:
        lifecycle.create(_booking(reference_code=first.reference_code))
    assert exc.value.status_code == 409
    assert Booking.query.count() == 1


def test_reference_collision_with_retry(app):
    lifecycle = BookingLifecycle(db.session, reference_retries=2)
    first = lifecycle.create(_booking())
    second = lifecycle.create(_booking(reference_code=first.reference_code))
    assert second.reference_code != first.reference_code
    assert Booking.query.count() == 2


def test_other_unique_violation_is_not_retried(app):
    lifecycle = BookingLifecycle(db.session, reference_retries=3)
    reg = dict(name="Ravi", email="ravi@example.com", phone="9876543210", interests=["Solo Session"],
               hear_about="Other")
    lifecycle.create(Registration(**reg))
    with pytest.raises(UniqueViolation) as exc:
        lifecycle.create(Registration(**reg), duplicate_message="Email already registered")
    assert exc.value.message == "Email already registered"


def test_corporate_duplicate_is_rejected(lifecycle):
    first = lifecycle.create_corporate_booking(_corporate())
    with pytest.raises(DuplicateSubmission) as exc:
        lifecycle.create_corporate_booking(_corporate())
    body = exc.value.to_dict()
    assert body["existingBooking"] == {"bookingReference": first.reference_code, "status": "pending"}


def test_cancelled_corporate_booking_does_not_block_resubmission(lifecycle):
    first = lifecycle.create_corporate_booking(_corporate())
    lifecycle.cancel(first)
    second = lifecycle.create_corporate_booking(_corporate())
    assert second.id != first.id


def test_find_by_reference_is_case_insensitive(lifecycle):
    booking = lifecycle.create(_booking())
    found = lifecycle.find_by_reference(Booking, f"  {booking.reference_code.lower()} ")
    assert found.id == booking.id


def test_non_unique_integrity_error_propagates(app):
    lifecycle = BookingLifecycle(db.session, reference_retries=3)
    with pytest.raises(IntegrityError):
        lifecycle.create(_booking(customer_name=None))
    assert Booking.query.count() == 0

import pytest

from lifecycle.reference import (
    generate_reference_code,
    reference_pattern,
    to_base36,
    assign_reference,
)
from models import db
from models.booking import Booking
from models.corporate_booking import CorporateBooking
from models.registration import Registration


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    assert to_base36(1295) == "zz"
    assert to_base36(36 ** 2) == "100"


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


@pytest.mark.parametrize("prefix", ["SL", "CORP", "REG"])
def test_generated_code_matches_format(prefix):
    code = generate_reference_code(prefix)
    assert reference_pattern(prefix).match(code)
    assert code == code.upper()


def test_generated_code_embeds_timestamp():
    code = generate_reference_code("SL", now_ms=36 ** 2)
    assert code.startswith("SL-100-")


def test_codes_differ_between_calls():
    codes = {generate_reference_code("SL", now_ms=0) for _ in range(50)}
    assert len(codes) > 1


def test_assign_reference_keeps_existing_code():
    booking = Booking(reference_code="SL-EXISTING-AAAABBBB")
    assert assign_reference(booking) == "SL-EXISTING-AAAABBBB"


def test_reference_set_once_and_stable_across_saves(app, lifecycle, make_booking):
    data = make_booking()
    booking = db.session.get(Booking, data["id"])
    original = booking.reference_code
    assert reference_pattern("SL").match(original)

    booking.special_requests = "Changed"
    lifecycle.save(booking)
    lifecycle.confirm(booking)

    assert db.session.get(Booking, data["id"]).reference_code == original


def test_insert_listener_assigns_code_without_lifecycle(app):
    reg = Registration(name="Ravi", email="ravi@example.com", phone="9876543210",
                       interests=["Solo Session"], hear_about="Other")
    db.session.add(reg)
    db.session.commit()
    assert reference_pattern("REG").match(reg.reference_code)


def test_each_model_uses_its_prefix():
    assert Booking.REFERENCE_PREFIX == "SL"
    assert CorporateBooking.REFERENCE_PREFIX == "CORP"
    assert Registration.REFERENCE_PREFIX == "REG"

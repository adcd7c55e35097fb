from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify

from models.booking import Booking
from lifecycle.errors import ValidationFailed
from lifecycle.manager import get_lifecycle, BOOKING_STATUSES
from security.rate_limit import rate_limited
from utils.audit import log_event
from utils.notify import send_transition, notify_admin
from utils.responses import paginate, percent
from utils.validators import (
    validate_booking,
    parse_pagination,
    parse_date_range,
    PACKAGE_TYPES,
)

bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


@bookings_bp.get("")
def list_bookings():
    page, limit, errors = parse_pagination(request.args)
    date_from, date_to, date_errors = parse_date_range(request.args, "dateFrom", "dateTo")
    errors.extend(date_errors)

    status = request.args.get("status")
    package_type = request.args.get("packageType")
    if status and status not in BOOKING_STATUSES:
        errors.append("Invalid status")
    if package_type and package_type not in PACKAGE_TYPES:
        errors.append("Invalid package type")
    if errors:
        raise ValidationFailed(errors)

    q = Booking.query
    if status:
        q = q.filter(Booking.status == status)
    if package_type:
        q = q.filter(Booking.package_type == package_type)
    if date_from:
        q = q.filter(Booking.preferred_date >= date_from)
    if date_to:
        q = q.filter(Booking.preferred_date <= date_to)

    rows, pagination = paginate(q.order_by(Booking.created_at.desc()), page, limit)
    return jsonify(success=True, data={
        "bookings": [b.to_dict() for b in rows],
        "pagination": pagination,
    }), 200


@bookings_bp.get("/<int:booking_id>")
def get_booking(booking_id: int):
    booking = get_lifecycle().get_or_404(Booking, booking_id, "Booking")
    return jsonify(success=True, data=booking.to_dict()), 200


@bookings_bp.get("/booking-id/<reference>")
def get_booking_by_reference(reference: str):
    booking = get_lifecycle().find_by_reference(Booking, reference)
    if not booking:
        return jsonify(success=False, message="Booking not found"), 404
    return jsonify(success=True, data=booking.to_dict()), 200


@bookings_bp.post("")
@rate_limited("submit")
def create_booking():
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_booking(data)
    if errors:
        raise ValidationFailed(errors)

    booking = get_lifecycle().create(Booking(**cleaned))

    log_event("BOOKING_CREATE", entity="booking", entity_id=booking.id, reference=booking.reference_code)
    send_transition(booking, "booking_created")
    notify_admin(
        f"New Booking Alert - {booking.reference_code}",
        f"{booking.customer_name} ({booking.customer_email}, {booking.customer_phone}) booked "
        f"{booking.package_name} for {booking.preferred_date:%Y-%m-%d} ({booking.preferred_time}), "
        f"{booking.participants} participant(s).",
    )

    return jsonify(
        success=True,
        message="Booking created successfully",
        data={"booking": booking.to_dict(), "bookingId": booking.reference_code},
    ), 201


@bookings_bp.put("/<int:booking_id>/status")
def update_booking_status(booking_id: int):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip() if isinstance(data.get("status"), str) else ""
    admin_notes = data.get("adminNotes")

    errors = []
    if status not in BOOKING_STATUSES:
        errors.append("Status must be one of: pending, confirmed, cancelled, completed")
    if admin_notes is not None and (not isinstance(admin_notes, str) or len(admin_notes.strip()) > 1000):
        errors.append("Admin notes cannot exceed 1000 characters")
    if errors:
        raise ValidationFailed(errors)

    lifecycle = get_lifecycle()
    booking = lifecycle.get_or_404(Booking, booking_id, "Booking")
    old_status = booking.status
    lifecycle.transition(booking, status, admin_notes=(admin_notes or "").strip() or None)

    log_event("BOOKING_STATUS_UPDATE", entity="booking", entity_id=booking.id,
              reference=booking.reference_code,
              metadata={"from": old_status, "to": status})
    if status != old_status:
        send_transition(booking, status)

    return jsonify(
        success=True,
        message=f"Booking status updated to {status}",
        data=booking.to_dict(include_admin=True),
    ), 200


@bookings_bp.delete("/<int:booking_id>")
def cancel_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    reason = data.get("reason") if isinstance(data.get("reason"), str) else None
    reason = (reason or "").strip() or "Booking cancelled by admin"
    if len(reason) > 500:
        raise ValidationFailed(["Reason cannot exceed 500 characters"])

    lifecycle = get_lifecycle()
    booking = lifecycle.get_or_404(Booking, booking_id, "Booking")
    old_status = booking.status
    lifecycle.cancel(booking, reason)

    log_event("BOOKING_CANCEL", entity="booking", entity_id=booking.id,
              reference=booking.reference_code,
              metadata={"reason": reason})
    if old_status != "cancelled":
        send_transition(booking, "cancelled")

    return jsonify(
        success=True,
        message="Booking cancelled successfully",
        data=booking.to_dict(include_admin=True),
    ), 200


@bookings_bp.get("/stats/overview")
def booking_stats():
    counts = {s: Booking.query.filter_by(status=s).count() for s in BOOKING_STATUSES}
    month_ago = datetime.utcnow() - timedelta(days=30)
    last_month = Booking.query.filter(Booking.created_at >= month_ago).count()
    total = sum(counts.values())

    return jsonify(success=True, data={
        "total": total,
        **counts,
        "lastMonth": last_month,
        "conversionRate": percent(counts["confirmed"], total),
    }), 200

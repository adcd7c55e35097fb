from collections import Counter
from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify

from models.corporate_booking import CorporateBooking
from lifecycle.errors import ValidationFailed
from lifecycle.manager import get_lifecycle, BOOKING_STATUSES
from security.rate_limit import rate_limited
from utils.audit import log_event
from utils.notify import send_transition, notify_admin
from utils.responses import paginate
from utils.validators import validate_corporate_booking, parse_pagination, parse_date_range, to_float

corporate_bp = Blueprint("corporate_bookings", __name__, url_prefix="/api/corporate-bookings")

SORTABLE_FIELDS = {
    "createdAt": CorporateBooking.created_at,
    "preferredDate": CorporateBooking.preferred_date,
    "companyName": CorporateBooking.company_name,
    "status": CorporateBooking.status,
}


@corporate_bp.post("")
@rate_limited("submit")
def create_corporate_booking():
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_corporate_booking(data)
    if errors:
        raise ValidationFailed(errors)

    booking = get_lifecycle().create_corporate_booking(CorporateBooking(**cleaned))

    log_event("CORPORATE_BOOKING_CREATE", entity="corporate_booking", entity_id=booking.id,
              reference=booking.reference_code,
              metadata={"company": booking.company_name})
    send_transition(booking, "corporate_received")
    notify_admin(
        f"New Corporate Booking - {booking.reference_code}",
        f"{booking.company_name}: {booking.event_type} for {booking.team_size} on "
        f"{booking.preferred_date:%Y-%m-%d} ({booking.preferred_time}, {booking.duration}). "
        f"Contact {booking.contact_person} <{booking.email}>, {booking.phone}.",
    )

    return jsonify(
        success=True,
        message="Corporate booking request submitted successfully",
        data={
            "bookingReference": booking.reference_code,
            "companyName": booking.company_name,
            "contactPerson": booking.contact_person,
            "email": booking.email,
            "eventType": booking.event_type,
            "teamSize": booking.team_size,
            "preferredDate": booking.preferred_date.isoformat(),
            "status": booking.status,
            "id": booking.id,
        },
    ), 201


@corporate_bp.get("")
def list_corporate_bookings():
    page, limit, errors = parse_pagination(request.args)
    start, end, date_errors = parse_date_range(request.args, "startDate", "endDate")
    errors.extend(date_errors)
    if errors:
        raise ValidationFailed(errors)

    status = request.args.get("status")
    company = (request.args.get("company") or "").strip()
    sort_col = SORTABLE_FIELDS.get(request.args.get("sortBy", "createdAt"), CorporateBooking.created_at)
    sort_order = request.args.get("sortOrder", "desc")

    q = CorporateBooking.query
    if status in BOOKING_STATUSES:
        q = q.filter(CorporateBooking.status == status)
    if company:
        q = q.filter(CorporateBooking.company_name.ilike(f"%{company}%"))
    if start:
        q = q.filter(CorporateBooking.preferred_date >= start)
    if end:
        q = q.filter(CorporateBooking.preferred_date <= end)

    q = q.order_by(sort_col.asc() if sort_order == "asc" else sort_col.desc())
    rows, pagination = paginate(q, page, limit)
    return jsonify(success=True, data=[b.to_dict() for b in rows], pagination=pagination), 200


@corporate_bp.get("/<int:booking_id>")
def get_corporate_booking(booking_id: int):
    booking = get_lifecycle().get_or_404(CorporateBooking, booking_id, "Corporate booking")
    return jsonify(success=True, data=booking.to_dict()), 200


@corporate_bp.get("/reference/<reference>")
def get_by_reference(reference: str):
    booking = get_lifecycle().find_by_reference(CorporateBooking, reference)
    if not booking:
        return jsonify(success=False, message="Booking not found with this reference number"), 404
    return jsonify(success=True, data=booking.public_dict()), 200


@corporate_bp.put("/<int:booking_id>")
def update_corporate_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    errors = []

    status = data.get("status")
    if status is not None and status not in BOOKING_STATUSES:
        errors.append("Status must be pending, confirmed, cancelled, or completed")

    costs = {}
    for key, column in (("estimatedCost", "estimated_cost"), ("actualCost", "actual_cost")):
        if key in data and data[key] is not None:
            value = to_float(data[key])
            if value is None or value < 0:
                errors.append(f"{key} must be a non-negative number")
            else:
                costs[column] = value

    admin_notes = data.get("adminNotes")
    if admin_notes is not None and (not isinstance(admin_notes, str) or len(admin_notes) > 1000):
        errors.append("Admin notes cannot exceed 1000 characters")
    if errors:
        raise ValidationFailed(errors)

    lifecycle = get_lifecycle()
    booking = lifecycle.get_or_404(CorporateBooking, booking_id, "Corporate booking")
    old_status = booking.status

    for column, value in costs.items():
        setattr(booking, column, value)
    if admin_notes is not None:
        booking.admin_notes = admin_notes.strip()

    if status:
        lifecycle.transition(booking, status)
    else:
        lifecycle.save(booking)

    log_event("CORPORATE_BOOKING_UPDATE", entity="corporate_booking", entity_id=booking.id,
              reference=booking.reference_code,
              metadata={"status": booking.status, **costs})
    if status and status != old_status:
        send_transition(booking, status)

    return jsonify(success=True, message="Corporate booking updated successfully", data=booking.to_dict()), 200


@corporate_bp.put("/<int:booking_id>/status")
def update_corporate_status(booking_id: int):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if status not in BOOKING_STATUSES:
        raise ValidationFailed(["Status must be pending, confirmed, cancelled, or completed"])

    lifecycle = get_lifecycle()
    booking = lifecycle.get_or_404(CorporateBooking, booking_id, "Corporate booking")
    old_status = booking.status
    if status == "cancelled":
        reason = data.get("reason") if isinstance(data.get("reason"), str) else None
        lifecycle.cancel(booking, (reason or "").strip() or None)
    else:
        lifecycle.transition(booking, status)

    log_event("CORPORATE_BOOKING_STATUS_UPDATE", entity="corporate_booking", entity_id=booking.id,
              reference=booking.reference_code,
              metadata={"from": old_status, "to": status})
    if status != old_status:
        send_transition(booking, status)

    return jsonify(success=True, message=f"Corporate booking status updated to {status}", data=booking.to_dict()), 200


@corporate_bp.delete("/<int:booking_id>")
def cancel_corporate_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    reason = data.get("reason") if isinstance(data.get("reason"), str) else None
    reason = (reason or "").strip() or "Booking cancelled by admin"

    lifecycle = get_lifecycle()
    booking = lifecycle.get_or_404(CorporateBooking, booking_id, "Corporate booking")
    old_status = booking.status
    lifecycle.cancel(booking, reason)

    log_event("CORPORATE_BOOKING_CANCEL", entity="corporate_booking", entity_id=booking.id,
              reference=booking.reference_code,
              metadata={"reason": reason})
    if old_status != "cancelled":
        send_transition(booking, "cancelled")

    return jsonify(success=True, message="Corporate booking cancelled successfully", data=booking.to_dict()), 200


@corporate_bp.get("/stats/overview")
def corporate_stats():
    rows = CorporateBooking.query.all()
    by_status = {s: 0 for s in BOOKING_STATUSES}
    revenue = 0.0
    for b in rows:
        by_status[b.status] = by_status.get(b.status, 0) + 1
        revenue += b.actual_cost if b.actual_cost is not None else (b.estimated_cost or 0)

    team_sizes = [b.team_size_number for b in rows]
    upcoming = [b for b in rows if b.is_upcoming and b.status in ("pending", "confirmed")]
    pending = (
        CorporateBooking.query
        .filter(CorporateBooking.status == "pending")
        .order_by(CorporateBooking.created_at.desc())
    )

    year_ago = datetime.utcnow() - timedelta(days=365)
    monthly = Counter(
        b.created_at.strftime("%Y-%m") for b in rows if b.created_at and b.created_at >= year_ago
    )

    return jsonify(success=True, data={
        "overview": {
            "totalBookings": len(rows),
            "pendingBookings": by_status["pending"],
            "confirmedBookings": by_status["confirmed"],
            "completedBookings": by_status["completed"],
            "cancelledBookings": by_status["cancelled"],
            "totalRevenue": revenue,
            "averageTeamSize": (sum(team_sizes) / len(team_sizes)) if team_sizes else 0,
        },
        "upcomingCount": len(upcoming),
        "pendingCount": pending.count(),
        "monthlyTrends": [{"month": m, "bookings": monthly[m]} for m in sorted(monthly)],
        "recentBookings": [b.to_dict() for b in pending.limit(5).all()],
    }), 200

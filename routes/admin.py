from datetime import datetime, timedelta

from flask import Blueprint, jsonify

from models.audit_log import AuditLog
from models.booking import Booking
from models.corporate_booking import CorporateBooking
from models.contact import ContactMessage
from models.registration import Registration
from models.newsletter import NewsletterSubscriber
from utils.responses import percent

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")

RECENT_LIMIT = 5


def _booking_counts():
    total = Booking.query.count()
    confirmed = Booking.query.filter_by(status="confirmed").count()
    return {
        "total": total,
        "pending": Booking.query.filter_by(status="pending").count(),
        "confirmed": confirmed,
        "completed": Booking.query.filter_by(status="completed").count(),
        "cancelled": Booking.query.filter_by(status="cancelled").count(),
        "conversionRate": percent(confirmed, total),
    }


def _corporate_counts(now):
    return {
        "total": CorporateBooking.query.count(),
        "pending": CorporateBooking.query.filter_by(status="pending").count(),
        "confirmed": CorporateBooking.query.filter_by(status="confirmed").count(),
        "upcoming": CorporateBooking.query.filter(
            CorporateBooking.preferred_date >= now,
            CorporateBooking.status.in_(("pending", "confirmed")),
        ).count(),
    }


def _recent_activity():
    """Newest records across the public forms, newest first."""
    activity = []
    for b in Booking.query.order_by(Booking.created_at.desc()).limit(RECENT_LIMIT):
        activity.append({"type": "booking", "reference": b.reference_code, "name": b.customer_name,
                         "status": b.status, "createdAt": b.created_at})
    for c in CorporateBooking.query.order_by(CorporateBooking.created_at.desc()).limit(RECENT_LIMIT):
        activity.append({"type": "corporate_booking", "reference": c.reference_code, "name": c.company_name,
                         "status": c.status, "createdAt": c.created_at})
    for m in ContactMessage.query.order_by(ContactMessage.created_at.desc()).limit(RECENT_LIMIT):
        activity.append({"type": "contact", "reference": str(m.id), "name": m.name,
                         "status": m.status, "createdAt": m.created_at})
    for r in Registration.query.order_by(Registration.created_at.desc()).limit(RECENT_LIMIT):
        activity.append({"type": "registration", "reference": r.reference_code, "name": r.email,
                         "status": r.status, "createdAt": r.created_at})

    activity.sort(key=lambda a: a["createdAt"], reverse=True)
    for a in activity[:RECENT_LIMIT * 2]:
        a["createdAt"] = a["createdAt"].isoformat()
    return activity[:RECENT_LIMIT * 2]


def _alerts(now):
    alerts = []
    stale = Booking.query.filter(
        Booking.status == "pending",
        Booking.created_at <= now - timedelta(days=2),
    ).count()
    if stale:
        alerts.append({"level": "warning", "message": f"{stale} booking(s) pending for more than 48 hours"})

    urgent = ContactMessage.query.filter(
        ContactMessage.priority.in_(("high", "urgent")),
        ContactMessage.status.in_(("new", "in_progress")),
    ).count()
    if urgent:
        alerts.append({"level": "critical", "message": f"{urgent} urgent contact message(s) need attention"})

    soon = CorporateBooking.query.filter(
        CorporateBooking.status == "pending",
        CorporateBooking.preferred_date.between(now, now + timedelta(days=7)),
    ).count()
    if soon:
        alerts.append({"level": "warning", "message": f"{soon} corporate event(s) this week still unconfirmed"})
    return alerts


@admin_bp.get("/dashboard")
def dashboard():
    now = datetime.utcnow()
    return jsonify(success=True, data={
        "bookings": _booking_counts(),
        "corporateBookings": _corporate_counts(now),
        "contacts": {
            "total": ContactMessage.query.count(),
            "new": ContactMessage.query.filter_by(status="new").count(),
            "inProgress": ContactMessage.query.filter_by(status="in_progress").count(),
        },
        "registrations": {
            "total": Registration.query.count(),
            "active": Registration.query.filter_by(status="active").count(),
        },
        "newsletter": {
            "total": NewsletterSubscriber.query.count(),
            "active": NewsletterSubscriber.query.filter_by(status="active").count(),
        },
        "recentActivity": _recent_activity(),
        "alerts": _alerts(now),
        "recentAuditEvents": [
            e.to_dict() for e in AuditLog.query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(10)
        ],
    }), 200

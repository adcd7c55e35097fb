from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify

from models import db
from models.contact import ContactMessage, ContactNote
from lifecycle.errors import ValidationFailed
from lifecycle.manager import get_lifecycle
from security.rate_limit import rate_limited
from utils.audit import log_event, client_ip
from utils.notify import send_transition, send_reply, notify_admin
from utils.responses import paginate
from utils.validators import (
    validate_contact,
    parse_pagination,
    CONTACT_STATUSES,
    INQUIRY_TYPES,
    PRIORITIES,
)

contact_bp = Blueprint("contact", __name__, url_prefix="/api/contact")

OPEN_STATUSES = ("new", "in_progress")
URGENT_PRIORITIES = ("high", "urgent")


def _urgent_query():
    return ContactMessage.query.filter(
        ContactMessage.priority.in_(URGENT_PRIORITIES),
        ContactMessage.status.in_(OPEN_STATUSES),
    )


@contact_bp.post("")
@rate_limited("contact")
def create_contact():
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_contact(data)
    if errors:
        raise ValidationFailed(errors)

    user_agent = request.headers.get("User-Agent", "")
    contact = ContactMessage(
        **cleaned,
        ip_address=client_ip(),
        user_agent=user_agent[:255] or None,
        source="website",
    )
    db.session.add(contact)
    db.session.commit()

    log_event("CONTACT_CREATE", entity="contact", entity_id=contact.id,
              metadata={"inquiryType": contact.inquiry_type})
    send_transition(contact, "contact_ack")
    notify_admin(
        f"New Contact Message - {contact.inquiry_type.upper()}",
        f"From: {contact.name} ({contact.email})\nSubject: {contact.subject}\nMessage: {contact.message}",
    )

    return jsonify(
        success=True,
        message="Your message has been sent successfully. We will get back to you soon!",
        data={"id": contact.id, "status": contact.status, "createdAt": contact.created_at.isoformat()},
    ), 201


@contact_bp.get("")
def list_contacts():
    page, limit, errors = parse_pagination(request.args)
    filters = (
        ("status", CONTACT_STATUSES, "Invalid status"),
        ("inquiryType", INQUIRY_TYPES, "Invalid inquiry type"),
        ("priority", PRIORITIES, "Invalid priority"),
    )
    for key, allowed, message in filters:
        if request.args.get(key) and request.args[key] not in allowed:
            errors.append(message)
    if errors:
        raise ValidationFailed(errors)

    q = ContactMessage.query
    if request.args.get("status"):
        q = q.filter(ContactMessage.status == request.args["status"])
    if request.args.get("inquiryType"):
        q = q.filter(ContactMessage.inquiry_type == request.args["inquiryType"])
    if request.args.get("priority"):
        q = q.filter(ContactMessage.priority == request.args["priority"])

    rows, pagination = paginate(q.order_by(ContactMessage.created_at.desc()), page, limit)
    return jsonify(success=True, data={
        "contacts": [c.to_dict() for c in rows],
        "pagination": pagination,
    }), 200


@contact_bp.get("/<int:contact_id>")
def get_contact(contact_id: int):
    contact = get_lifecycle().get_or_404(ContactMessage, contact_id, "Contact")
    return jsonify(success=True, data=contact.to_dict()), 200


@contact_bp.put("/<int:contact_id>/status")
def update_contact_status(contact_id: int):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    priority = data.get("priority")

    errors = []
    if status not in CONTACT_STATUSES:
        errors.append("Status must be one of: new, in_progress, resolved, closed")
    if priority is not None and priority not in PRIORITIES:
        errors.append("Priority must be one of: low, medium, high, urgent")
    if errors:
        raise ValidationFailed(errors)

    contact = get_lifecycle().get_or_404(ContactMessage, contact_id, "Contact")
    contact.status = status
    if priority:
        contact.priority = priority
    if status == "resolved" and contact.resolved_at is None:
        contact.resolved_at = datetime.utcnow()
    db.session.commit()

    log_event("CONTACT_STATUS_UPDATE", entity="contact", entity_id=contact.id,
              metadata={"status": status, "priority": contact.priority})
    return jsonify(success=True, message=f"Contact status updated to {status}", data=contact.to_dict()), 200


@contact_bp.post("/<int:contact_id>/respond")
def respond_to_contact(contact_id: int):
    data = request.get_json(silent=True) or {}
    response = (data.get("response") or "").strip() if isinstance(data.get("response"), str) else ""
    responded_by = (data.get("respondedBy") or "").strip() if isinstance(data.get("respondedBy"), str) else ""

    errors = []
    if not 10 <= len(response) <= 2000:
        errors.append("Response must be between 10 and 2000 characters")
    if not responded_by:
        errors.append("Responded by field is required")
    if errors:
        raise ValidationFailed(errors)

    contact = get_lifecycle().get_or_404(ContactMessage, contact_id, "Contact")
    contact.admin_response = response
    contact.responded_at = datetime.utcnow()
    contact.responded_by = responded_by
    contact.status = "in_progress"
    db.session.commit()

    log_event("CONTACT_RESPOND", entity="contact", entity_id=contact.id, metadata={"by": responded_by})

    ok, error = send_reply(contact, response)
    if not ok:
        return jsonify(
            success=False,
            message="Response saved but failed to send email notification",
            data=contact.to_dict(),
        ), 502

    return jsonify(success=True, message="Response sent successfully", data=contact.to_dict()), 200


@contact_bp.post("/<int:contact_id>/notes")
def add_contact_note(contact_id: int):
    data = request.get_json(silent=True) or {}
    note = (data.get("note") or "").strip() if isinstance(data.get("note"), str) else ""
    added_by = (data.get("addedBy") or "").strip() if isinstance(data.get("addedBy"), str) else ""

    errors = []
    if not 1 <= len(note) <= 500:
        errors.append("Note must be between 1 and 500 characters")
    if not added_by:
        errors.append("Added by field is required")
    if errors:
        raise ValidationFailed(errors)

    contact = get_lifecycle().get_or_404(ContactMessage, contact_id, "Contact")
    contact.notes.append(ContactNote(note=note, added_by=added_by))
    db.session.commit()

    log_event("CONTACT_NOTE_ADD", entity="contact", entity_id=contact.id, metadata={"by": added_by})
    return jsonify(success=True, message="Note added successfully", data=contact.to_dict()), 200


@contact_bp.get("/stats/urgent")
def urgent_contacts():
    q = _urgent_query()
    rows = q.order_by(ContactMessage.created_at.desc()).limit(10).all()
    return jsonify(success=True, data={
        "count": q.count(),
        "contacts": [c.to_dict() for c in rows],
    }), 200


@contact_bp.get("/stats/overview")
def contact_stats():
    counts = {s: ContactMessage.query.filter_by(status=s).count() for s in CONTACT_STATUSES}
    week_ago = datetime.utcnow() - timedelta(days=7)
    last_week = ContactMessage.query.filter(ContactMessage.created_at >= week_ago).count()
    unresponded = ContactMessage.query.filter(
        ContactMessage.status == "new",
        ContactMessage.responded_at.is_(None),
    ).count()

    responded = ContactMessage.query.filter(ContactMessage.responded_at.isnot(None)).all()
    hours = [c.response_time_hours for c in responded]
    avg_response = round(sum(hours) / len(hours)) if hours else 0

    return jsonify(success=True, data={
        "total": sum(counts.values()),
        "new": counts["new"],
        "inProgress": counts["in_progress"],
        "resolved": counts["resolved"],
        "closed": counts["closed"],
        "lastWeek": last_week,
        "unresponded": unresponded,
        "avgResponseTime": f"{avg_response} hours",
    }), 200

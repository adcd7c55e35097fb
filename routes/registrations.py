from collections import Counter
from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify

from models.registration import Registration
from lifecycle.errors import ValidationFailed
from lifecycle.manager import get_lifecycle
from security.rate_limit import rate_limited
from utils.audit import log_event
from utils.notify import send_transition
from utils.responses import paginate
from utils.validators import validate_registration, parse_pagination, REGISTRATION_STATUSES

registrations_bp = Blueprint("registrations", __name__, url_prefix="/api/registrations")

DUPLICATE_EMAIL = "Email already registered. Please use a different email address."


@registrations_bp.post("")
@rate_limited("submit")
def create_registration():
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_registration(data)
    if errors:
        raise ValidationFailed(errors)

    if Registration.query.filter_by(email=cleaned["email"]).first():
        return jsonify(success=False, message=DUPLICATE_EMAIL), 400

    registration = get_lifecycle().create(Registration(**cleaned), duplicate_message=DUPLICATE_EMAIL)

    log_event("REGISTRATION_CREATE", entity="registration", entity_id=registration.id,
              reference=registration.reference_code)
    send_transition(registration, "registration_welcome")

    return jsonify(
        success=True,
        message="Registration successful! Welcome to the SmashLabs community!",
        data={"registration": registration.to_dict(), "registrationId": registration.reference_code},
    ), 201


@registrations_bp.get("")
def list_registrations():
    page, limit, errors = parse_pagination(request.args)
    if errors:
        raise ValidationFailed(errors)

    q = Registration.query
    if request.args.get("status"):
        q = q.filter(Registration.status == request.args["status"])
    if request.args.get("hearAbout"):
        q = q.filter(Registration.hear_about == request.args["hearAbout"])
    if request.args.get("interest"):
        # interests are stored as a JSON list of quoted names
        q = q.filter(Registration.interests_json.contains(f'"{request.args["interest"]}"'))

    rows, pagination = paginate(q.order_by(Registration.created_at.desc()), page, limit)
    return jsonify(success=True, data={
        "registrations": [r.to_dict() for r in rows],
        "pagination": pagination,
    }), 200


@registrations_bp.get("/<int:registration_id>")
def get_registration(registration_id: int):
    registration = get_lifecycle().get_or_404(Registration, registration_id, "Registration")
    return jsonify(success=True, data=registration.to_dict()), 200


@registrations_bp.put("/<int:registration_id>/status")
def update_registration_status(registration_id: int):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if status not in REGISTRATION_STATUSES:
        raise ValidationFailed(["Status must be one of: active, inactive, unsubscribed"])

    lifecycle = get_lifecycle()
    registration = lifecycle.get_or_404(Registration, registration_id, "Registration")
    old_status = registration.status
    registration.status = status
    lifecycle.save(registration)

    log_event("REGISTRATION_STATUS_UPDATE", entity="registration", entity_id=registration.id,
              reference=registration.reference_code,
              metadata={"from": old_status, "to": status})
    return jsonify(
        success=True,
        message=f"Registration status updated to {status}",
        data=registration.to_dict(),
    ), 200


@registrations_bp.get("/stats/overview")
def registration_stats():
    counts = {s: Registration.query.filter_by(status=s).count() for s in REGISTRATION_STATUSES}
    month_ago = datetime.utcnow() - timedelta(days=30)
    last_month = Registration.query.filter(Registration.created_at >= month_ago).count()

    interests = Counter()
    for r in Registration.query.all():
        interests.update(r.interests)

    return jsonify(success=True, data={
        "total": sum(counts.values()),
        **counts,
        "lastMonth": last_month,
        "interestDistribution": [{"interest": k, "count": v} for k, v in interests.most_common()],
    }), 200

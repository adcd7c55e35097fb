import base64
from collections import Counter
from datetime import datetime, timedelta

from flask import Blueprint, Response, redirect, request, jsonify

from models import db
from models.newsletter import NewsletterSubscriber
from lifecycle.errors import ValidationFailed
from lifecycle.manager import get_lifecycle
from security.rate_limit import rate_limited
from utils.audit import log_event, client_ip
from utils.notify import send_transition
from utils.responses import paginate, percent
from utils.validators import (
    validate_subscribe,
    validate_preferences,
    validate_unsubscribe,
    validate_tracking,
    validate_bounce,
    parse_pagination,
    NEWSLETTER_STATUSES,
)

newsletter_bp = Blueprint("newsletter", __name__, url_prefix="/api/newsletter")

# 1x1 transparent gif served by the open beacon
TRACKING_PIXEL = base64.b64decode("R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7")


def _apply_preferences(subscriber, cleaned):
    if cleaned.get("name"):
        subscriber.name = cleaned["name"]
    if cleaned.get("interests"):
        subscriber.interests = cleaned["interests"]
    if cleaned.get("frequency"):
        subscriber.frequency = cleaned["frequency"]


@newsletter_bp.post("/subscribe")
@rate_limited("newsletter")
def subscribe():
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_subscribe(data)
    if errors:
        raise ValidationFailed(errors)

    subscriber = NewsletterSubscriber.query.filter_by(email=cleaned["email"]).first()
    if subscriber is not None:
        if subscriber.status == "active":
            return jsonify(success=False, message="Email is already subscribed to our newsletter"), 400

        subscriber.resubscribe()
        _apply_preferences(subscriber, cleaned)
        db.session.commit()
        log_event("NEWSLETTER_RESUBSCRIBE", entity="newsletter", entity_id=subscriber.id)
        return jsonify(
            success=True,
            message="Welcome back! Your subscription has been reactivated.",
            data=subscriber.to_dict(),
        ), 200

    user_agent = request.headers.get("User-Agent", "")
    subscriber = NewsletterSubscriber(
        email=cleaned["email"],
        ip_address=client_ip(),
        user_agent=user_agent[:255] or None,
        source="website",
    )
    _apply_preferences(subscriber, cleaned)
    db.session.add(subscriber)
    db.session.commit()

    log_event("NEWSLETTER_SUBSCRIBE", entity="newsletter", entity_id=subscriber.id)
    if send_transition(subscriber, "newsletter_welcome"):
        subscriber.record_email_sent("welcome", "Welcome email")
        db.session.commit()

    return jsonify(
        success=True,
        message="Successfully subscribed to our newsletter!",
        data=subscriber.to_dict(),
    ), 201


@newsletter_bp.post("/unsubscribe")
def unsubscribe():
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_unsubscribe(data)
    if errors:
        raise ValidationFailed(errors)

    subscriber = NewsletterSubscriber.query.filter_by(email=cleaned["email"]).first()
    if subscriber is None:
        return jsonify(success=False, message="Email not found in our newsletter list"), 404

    if subscriber.status == "unsubscribed":
        return jsonify(success=True, message="Email is already unsubscribed"), 200

    subscriber.unsubscribe(cleaned["reason"], cleaned["feedback"])
    db.session.commit()

    log_event("NEWSLETTER_UNSUBSCRIBE", entity="newsletter", entity_id=subscriber.id,
              metadata={"reason": cleaned["reason"]})
    return jsonify(success=True, message="Successfully unsubscribed from our newsletter"), 200


@newsletter_bp.put("/<int:subscriber_id>/preferences")
def update_preferences(subscriber_id: int):
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_preferences(data)
    if errors:
        raise ValidationFailed(errors)

    subscriber = get_lifecycle().get_or_404(NewsletterSubscriber, subscriber_id, "Subscriber")
    if subscriber.status != "active":
        return jsonify(success=False, message="Cannot update preferences for inactive subscription"), 400

    _apply_preferences(subscriber, cleaned)
    db.session.commit()

    log_event("NEWSLETTER_PREFERENCES_UPDATE", entity="newsletter", entity_id=subscriber.id)
    return jsonify(success=True, message="Preferences updated successfully", data=subscriber.to_dict()), 200


@newsletter_bp.post("/track/open/<campaign_id>")
def track_open(campaign_id: str):
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_tracking(data)
    if errors:
        raise ValidationFailed(errors)

    # unknown addresses still get the pixel
    subscriber = NewsletterSubscriber.query.filter_by(email=cleaned["email"]).first()
    if subscriber is not None:
        subscriber.record_email_opened(campaign_id)
        db.session.commit()
        log_event("NEWSLETTER_OPEN", entity="newsletter", entity_id=subscriber.id,
                  metadata={"campaign": campaign_id})

    return Response(TRACKING_PIXEL, status=200, mimetype="image/gif",
                    headers={"Cache-Control": "no-store"})


@newsletter_bp.post("/track/click/<campaign_id>")
def track_click(campaign_id: str):
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_tracking(data, require_url=True)
    if errors:
        raise ValidationFailed(errors)

    subscriber = NewsletterSubscriber.query.filter_by(email=cleaned["email"]).first()
    if subscriber is not None:
        subscriber.record_link_clicked(campaign_id, cleaned["url"])
        db.session.commit()
        log_event("NEWSLETTER_CLICK", entity="newsletter", entity_id=subscriber.id,
                  metadata={"campaign": campaign_id, "url": cleaned["url"]})

    return redirect(cleaned["url"], code=302)


@newsletter_bp.post("/bounce")
def record_bounce():
    data = request.get_json(silent=True) or {}
    cleaned, errors = validate_bounce(data)
    if errors:
        raise ValidationFailed(errors)

    subscriber = NewsletterSubscriber.query.filter_by(email=cleaned["email"]).first()
    if subscriber is None:
        return jsonify(success=False, message="Email not found in our newsletter list"), 404

    if cleaned["type"] == "complaint":
        subscriber.record_complaint()
    else:
        subscriber.record_bounce(cleaned["type"], cleaned["reason"])
    db.session.commit()

    log_event("NEWSLETTER_BOUNCE", entity="newsletter", entity_id=subscriber.id,
              metadata={"type": cleaned["type"], "reason": cleaned["reason"]})
    return jsonify(success=True, message="Bounce recorded", data=subscriber.to_dict()), 200


@newsletter_bp.get("")
def list_subscribers():
    page, limit, errors = parse_pagination(request.args, default_limit=50, max_limit=200)
    status = request.args.get("status")
    if status and status not in NEWSLETTER_STATUSES:
        errors.append("Invalid status")
    if errors:
        raise ValidationFailed(errors)

    q = NewsletterSubscriber.query
    if status:
        q = q.filter(NewsletterSubscriber.status == status)
    if request.args.get("frequency"):
        q = q.filter(NewsletterSubscriber.frequency == request.args["frequency"])
    if request.args.get("interest"):
        q = q.filter(NewsletterSubscriber.interests_json.contains(f'"{request.args["interest"]}"'))

    rows, pagination = paginate(q.order_by(NewsletterSubscriber.subscribed_at.desc()), page, limit)
    return jsonify(success=True, data={
        "subscribers": [s.to_dict() for s in rows],
        "pagination": pagination,
    }), 200


@newsletter_bp.get("/<int:subscriber_id>")
def get_subscriber(subscriber_id: int):
    subscriber = get_lifecycle().get_or_404(NewsletterSubscriber, subscriber_id, "Subscriber")
    return jsonify(success=True, data=subscriber.to_dict()), 200


@newsletter_bp.get("/stats/overview")
def newsletter_stats():
    total = NewsletterSubscriber.query.count()
    active = NewsletterSubscriber.query.filter_by(status="active").count()
    unsubscribed = NewsletterSubscriber.query.filter_by(status="unsubscribed").count()
    bounced = NewsletterSubscriber.query.filter_by(status="bounced").count()
    month_ago = datetime.utcnow() - timedelta(days=30)
    recent = NewsletterSubscriber.query.filter(NewsletterSubscriber.subscribed_at >= month_ago).count()

    mailed = NewsletterSubscriber.query.filter(NewsletterSubscriber.emails_sent > 0).all()
    opened = [s for s in mailed if s.emails_opened]
    avg_engagement = round(sum(s.engagement_rate for s in mailed) / len(mailed)) if mailed else 0
    avg_ctr = round(sum(s.click_through_rate for s in opened) / len(opened)) if opened else 0

    return jsonify(success=True, data={
        "total": total,
        "active": active,
        "unsubscribed": unsubscribed,
        "bounced": bounced,
        "recentSubscriptions": recent,
        "activePercentage": percent(active, total),
        "avgEngagementRate": avg_engagement,
        "avgClickThroughRate": avg_ctr,
    }), 200


@newsletter_bp.get("/stats/interests")
def interest_stats():
    counts = Counter()
    for subscriber in NewsletterSubscriber.query.filter_by(status="active").all():
        counts.update(subscriber.interests)

    return jsonify(success=True, data=[
        {"interest": interest, "count": count} for interest, count in counts.most_common()
    ]), 200

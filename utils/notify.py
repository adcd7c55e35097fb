"""
Transactional emails tied to lifecycle events.

Every helper here is best effort: a failed or crashing send is logged and
reported as ``False``, never raised, so a committed state change is never
undone by mail delivery.
"""
import logging

from flask import current_app

from utils.emailer import get_mailer

logger = logging.getLogger(__name__)

SIGNATURE = "\n\nThank you,\nSmashLabs"


def _recipient(entity):
    return getattr(entity, "customer_email", None) or getattr(entity, "email", None)


def _greeting(entity):
    name = (
        getattr(entity, "customer_name", None)
        or getattr(entity, "contact_person", None)
        or getattr(entity, "name", None)
        or "there"
    )
    return f"Hi {name},\n\n"


def _booking_created(b):
    return (
        f"Booking Confirmation - {b.reference_code}",
        _greeting(b)
        + f"We have received your booking for {b.package_name} on "
        f"{b.preferred_date:%A, %d %B %Y} ({b.preferred_time}).\n"
        f"Your booking ID is {b.reference_code}. We will confirm it shortly."
        + SIGNATURE,
    )


def _corporate_received(b):
    return (
        f"Corporate Booking Request - {b.reference_code}",
        _greeting(b)
        + f"Thanks for your {b.event_type} request for {b.company_name} on "
        f"{b.preferred_date:%A, %d %B %Y} ({b.preferred_time}).\n"
        f"Your booking reference is {b.reference_code}."
        + SIGNATURE,
    )


def _status_changed(entity, status):
    ref = entity.reference_code
    lines = {
        "confirmed": f"Good news! Your booking {ref} is confirmed.",
        "cancelled": f"Your booking {ref} has been cancelled.",
        "completed": f"Your booking {ref} is complete. We hope you enjoyed it!",
        "pending": f"Your booking {ref} is pending review again.",
    }
    return f"Booking Update - {ref}", _greeting(entity) + lines[status] + SIGNATURE


def _registration_welcome(r):
    return (
        "Welcome to the SmashLabs community!",
        _greeting(r) + f"Your registration ID is {r.reference_code}." + SIGNATURE,
    )


def _contact_ack(c):
    return (
        "Thank you for contacting SmashLabs",
        _greeting(c) + f"We received your message \"{c.subject}\" and will get back to you soon." + SIGNATURE,
    )


def _newsletter_welcome(s):
    return (
        "Welcome to SmashLabs Newsletter!",
        _greeting(s) + "You're subscribed. Expect news, offers and tips in your inbox." + SIGNATURE,
    )


TEMPLATES = {
    "booking_created": _booking_created,
    "corporate_received": _corporate_received,
    "confirmed": lambda e: _status_changed(e, "confirmed"),
    "cancelled": lambda e: _status_changed(e, "cancelled"),
    "completed": lambda e: _status_changed(e, "completed"),
    "pending": lambda e: _status_changed(e, "pending"),
    "registration_welcome": _registration_welcome,
    "contact_ack": _contact_ack,
    "newsletter_welcome": _newsletter_welcome,
}


def send_transition(entity, kind: str) -> bool:
    """Email the entity's contact address about ``kind``; never raises."""
    try:
        subject, body = TEMPLATES[kind](entity)
        ok, error = get_mailer().send(_recipient(entity), subject, body)
    except Exception:
        logger.exception("Notification %s for %s crashed", kind, type(entity).__name__)
        return False
    if not ok:
        logger.warning("Notification %s for %s not sent: %s", kind, type(entity).__name__, error)
    return ok


def send_reply(contact, response: str):
    """Email an admin reply to a contact ticket. Returns ``(ok, error)`` and never raises."""
    try:
        body = _greeting(contact) + response + SIGNATURE
        return get_mailer().send(contact.email, f"Re: {contact.subject}", body)
    except Exception as exc:
        logger.exception("Reply to contact %s crashed", contact.id)
        return False, str(exc)


def notify_admin(subject: str, body: str) -> bool:
    """Alert the configured admin inbox; skipped when ADMIN_EMAIL is unset."""
    to_email = current_app.config.get("ADMIN_EMAIL")
    if not to_email:
        return False
    try:
        ok, error = get_mailer().send(to_email, subject, body)
    except Exception:
        logger.exception("Admin alert %r crashed", subject)
        return False
    if not ok:
        logger.warning("Admin alert %r not sent: %s", subject, error)
    return ok

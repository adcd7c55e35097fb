"""
Request validation.

Each ``validate_*`` function takes the raw JSON body and returns
``(cleaned, errors)``: ``cleaned`` holds model-ready values keyed by column
name, ``errors`` is a list of messages. Callers must not touch the database
unless ``errors`` is empty.
"""
import math
import re
from datetime import datetime, timezone
from urllib.parse import urlparse

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
CORPORATE_EMAIL_RE = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
PHONE_RE = re.compile(r"^\+?[\d\s\-\(\)]{10,}$")
INDIAN_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")

PACKAGE_TYPES = ("basic", "premium", "ultimate")
PREFERRED_TIMES = ("morning", "afternoon", "evening")

TEAM_SIZES = ("5-10 people", "11-20 people", "21-30 people", "31-50 people", "50+ people")
CORPORATE_TIMES = ("Morning (9 AM - 12 PM)", "Afternoon (12 PM - 5 PM)", "Evening (5 PM - 8 PM)")
CORPORATE_DURATIONS = ("1 hour", "2 hours", "3 hours", "4 hours", "Half day", "Full day")
EVENT_TYPES = (
    "Team Building",
    "Stress Relief Session",
    "Company Celebration",
    "Product Launch Event",
    "Employee Appreciation",
    "Team Retreat",
    "Holiday Party",
    "Custom Event",
)

REGISTRATION_INTERESTS = (
    "Stress Relief",
    "Team Building",
    "Corporate Events",
    "Birthday Parties",
    "Date Night",
    "Solo Session",
    "Group Therapy",
    "Anger Management",
)
HEAR_ABOUT = ("Social Media", "Google Search", "Friend/Family", "Advertisement", "Event/Exhibition", "Other")
REGISTRATION_STATUSES = ("active", "inactive", "unsubscribed")

INQUIRY_TYPES = ("general", "booking", "support", "partnership", "feedback")
CONTACT_STATUSES = ("new", "in_progress", "resolved", "closed")
PRIORITIES = ("low", "medium", "high", "urgent")

NEWSLETTER_INTERESTS = ("packages", "events", "promotions", "tips", "news")
FREQUENCIES = ("daily", "weekly", "monthly", "special")
UNSUBSCRIBE_REASONS = ("too_frequent", "not_relevant", "never_subscribed", "technical_issues", "other")
NEWSLETTER_STATUSES = ("active", "unsubscribed", "bounced", "spam")
BOUNCE_TYPES = ("hard", "soft", "complaint")


# ---------- primitives ----------
def _text(data, key) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def to_int(value):
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if math.isfinite(number) and number.is_integer() else None


def to_float(value):
    """Finite float or None; NaN and infinities count as invalid."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_datetime(value) -> datetime:
    """Parse an ISO-8601 string to a naive UTC datetime; raises ValueError."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("empty datetime")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def check_choice(value, allowed, message):
    return None if value in allowed else message


def _check_length(errors, value, label, min_len=0, max_len=None, required=True):
    if not value:
        if required:
            errors.append(f"{label} is required")
        return
    if len(value) < min_len or (max_len is not None and len(value) > max_len):
        if min_len and max_len:
            errors.append(f"{label} must be between {min_len} and {max_len} characters")
        else:
            errors.append(f"{label} cannot exceed {max_len} characters")


def _future_date(errors, raw, now, label="Preferred date"):
    if raw in (None, ""):
        errors.append(f"{label} is required")
        return None
    try:
        dt = parse_datetime(raw)
    except ValueError:
        errors.append(f"{label} must be a valid ISO 8601 date")
        return None
    if dt <= now:
        errors.append(f"{label} must be in the future")
        return None
    return dt


def _string_list(errors, raw, allowed, message, min_items=0):
    if raw is None:
        if min_items:
            errors.append(message)
        return None
    if not isinstance(raw, list) or len(raw) < min_items or any(v not in allowed for v in raw):
        errors.append(message)
        return None
    # keep order, drop repeats
    return list(dict.fromkeys(raw))


# ---------- entities ----------
def validate_booking(data, now: datetime = None):
    now = now or datetime.utcnow()
    errors = []

    name = _text(data, "customerName")
    _check_length(errors, name, "Customer name", 2, 100)

    email = normalize_email(data.get("customerEmail") if isinstance(data.get("customerEmail"), str) else "")
    if not EMAIL_RE.match(email):
        errors.append("Please provide a valid email address")

    phone = _text(data, "customerPhone")
    if not PHONE_RE.match(phone):
        errors.append("Please provide a valid phone number")

    package_type = _text(data, "packageType")
    err = check_choice(package_type, PACKAGE_TYPES, "Package type must be one of: basic, premium, ultimate")
    if err:
        errors.append(err)

    package_name = _text(data, "packageName")
    if not package_name:
        errors.append("Package name is required")

    price = to_float(data.get("packagePrice"))
    if price is None or price < 0:
        errors.append("Package price must be a positive number")

    preferred_date = _future_date(errors, data.get("preferredDate"), now)

    preferred_time = _text(data, "preferredTime")
    err = check_choice(preferred_time, PREFERRED_TIMES, "Preferred time must be one of: morning, afternoon, evening")
    if err:
        errors.append(err)

    duration = to_int(data.get("duration"))
    if duration is None or not 30 <= duration <= 240:
        errors.append("Duration must be between 30 and 240 minutes")

    participants = to_int(data.get("participants"))
    if participants is None or not 1 <= participants <= 10:
        errors.append("Participants must be between 1 and 10")

    special_requests = _text(data, "specialRequests")
    _check_length(errors, special_requests, "Special requests", 0, 500, required=False)

    cleaned = {
        "customer_name": name,
        "customer_email": email,
        "customer_phone": phone,
        "package_type": package_type,
        "package_name": package_name,
        "package_price": price,
        "preferred_date": preferred_date,
        "preferred_time": preferred_time,
        "duration": duration,
        "participants": participants,
        "special_requests": special_requests or None,
    }
    return cleaned, errors


def validate_corporate_booking(data, now: datetime = None):
    now = now or datetime.utcnow()
    errors = []

    company_name = _text(data, "companyName")
    _check_length(errors, company_name, "Company name", 0, 100)

    contact_person = _text(data, "contactPerson")
    _check_length(errors, contact_person, "Contact person", 0, 50)

    email = normalize_email(data.get("email") if isinstance(data.get("email"), str) else "")
    if not email:
        errors.append("Email is required")
    elif not CORPORATE_EMAIL_RE.match(email):
        errors.append("Please enter a valid email address")

    raw_phone = _text(data, "phone")
    phone = re.sub(r"\D", "", raw_phone)
    if not raw_phone:
        errors.append("Phone number is required")
    elif len(phone) != 10:
        errors.append("Please enter a valid 10-digit phone number")

    job_title = _text(data, "jobTitle")
    _check_length(errors, job_title, "Job title", 0, 50)

    team_size = _text(data, "teamSize")
    if not team_size:
        errors.append("Team size is required")
    elif team_size not in TEAM_SIZES:
        errors.append("Please select a valid team size range")

    preferred_date = _future_date(errors, data.get("date"), now)

    preferred_time = _text(data, "time")
    if not preferred_time:
        errors.append("Preferred time is required")
    elif preferred_time not in CORPORATE_TIMES:
        errors.append("Please select a valid time slot")

    duration = _text(data, "duration")
    if not duration:
        errors.append("Event duration is required")
    elif duration not in CORPORATE_DURATIONS:
        errors.append("Please select a valid duration")

    event_type = _text(data, "eventType")
    if not event_type:
        errors.append("Event type is required")
    elif event_type not in EVENT_TYPES:
        errors.append("Please select a valid event type")

    special_requests = _text(data, "specialRequests")
    _check_length(errors, special_requests, "Special requests", 0, 500, required=False)

    cleaned = {
        "company_name": company_name,
        "contact_person": contact_person,
        "email": email,
        "phone": phone,
        "job_title": job_title,
        "team_size": team_size,
        "preferred_date": preferred_date,
        "preferred_time": preferred_time,
        "duration": duration,
        "event_type": event_type,
        "special_requests": special_requests,
    }
    return cleaned, errors


def validate_registration(data):
    errors = []

    name = _text(data, "name")
    _check_length(errors, name, "Name", 2, 100)

    email = normalize_email(data.get("email") if isinstance(data.get("email"), str) else "")
    if not EMAIL_RE.match(email):
        errors.append("Please provide a valid email address")

    phone = _text(data, "phone")
    if not INDIAN_MOBILE_RE.match(phone):
        errors.append("Please provide a valid 10-digit phone number")

    interests = _string_list(
        errors, data.get("interests"), REGISTRATION_INTERESTS,
        "Please select at least one interest", min_items=1,
    )

    hear_about = _text(data, "hearAbout")
    if not hear_about:
        errors.append("Please tell us how you heard about us")
    elif hear_about not in HEAR_ABOUT:
        errors.append("Please select a valid option for how you heard about us")

    message = _text(data, "message")
    _check_length(errors, message, "Message", 0, 1000, required=False)

    cleaned = {
        "name": name,
        "email": email,
        "phone": phone,
        "interests": interests or [],
        "hear_about": hear_about,
        "message": message or None,
    }
    return cleaned, errors


def validate_contact(data):
    errors = []

    name = _text(data, "name")
    _check_length(errors, name, "Name", 2, 100)

    email = normalize_email(data.get("email") if isinstance(data.get("email"), str) else "")
    if not EMAIL_RE.match(email):
        errors.append("Please provide a valid email address")

    phone = _text(data, "phone")
    if phone and not PHONE_RE.match(phone):
        errors.append("Please provide a valid phone number")

    subject = _text(data, "subject")
    _check_length(errors, subject, "Subject", 5, 200)

    message = _text(data, "message")
    _check_length(errors, message, "Message", 10, 2000)

    inquiry_type = _text(data, "inquiryType") or "general"
    if inquiry_type not in INQUIRY_TYPES:
        errors.append("Invalid inquiry type")

    cleaned = {
        "name": name,
        "email": email,
        "phone": phone or None,
        "subject": subject,
        "message": message,
        "inquiry_type": inquiry_type,
    }
    return cleaned, errors


def validate_subscribe(data):
    errors = []

    email = normalize_email(data.get("email") if isinstance(data.get("email"), str) else "")
    if not EMAIL_RE.match(email):
        errors.append("Please provide a valid email address")

    cleaned, pref_errors = validate_preferences(data)
    errors.extend(pref_errors)
    cleaned["email"] = email
    return cleaned, errors


def validate_preferences(data):
    errors = []

    name = _text(data, "name")
    _check_length(errors, name, "Name", 0, 100, required=False)

    interests = _string_list(errors, data.get("interests"), NEWSLETTER_INTERESTS, "Invalid interests provided")

    frequency = _text(data, "frequency")
    if frequency and frequency not in FREQUENCIES:
        errors.append("Frequency must be one of: daily, weekly, monthly, special")

    cleaned = {"name": name or None, "interests": interests, "frequency": frequency or None}
    return cleaned, errors


def validate_unsubscribe(data):
    errors = []

    email = normalize_email(data.get("email") if isinstance(data.get("email"), str) else "")
    if not EMAIL_RE.match(email):
        errors.append("Please provide a valid email address")

    reason = _text(data, "reason") or "other"
    if reason not in UNSUBSCRIBE_REASONS:
        errors.append("Invalid unsubscribe reason")

    feedback = _text(data, "feedback")
    _check_length(errors, feedback, "Feedback", 0, 500, required=False)

    return {"email": email, "reason": reason, "feedback": feedback or None}, errors


def validate_tracking(data, require_url: bool = False):
    """Open/click beacons carry the subscriber email and, for clicks, the target url."""
    errors = []

    email = normalize_email(data.get("email") if isinstance(data.get("email"), str) else "")
    if not EMAIL_RE.match(email):
        errors.append("Please provide a valid email address")

    url = _text(data, "url")
    if require_url:
        parts = urlparse(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            errors.append("A valid http(s) url is required")

    return {"email": email, "url": url or None}, errors


def validate_bounce(data):
    errors = []

    email = normalize_email(data.get("email") if isinstance(data.get("email"), str) else "")
    if not EMAIL_RE.match(email):
        errors.append("Please provide a valid email address")

    bounce_type = _text(data, "type")
    if bounce_type not in BOUNCE_TYPES:
        errors.append("Bounce type must be hard, soft or complaint")

    reason = _text(data, "reason")
    _check_length(errors, reason, "Reason", 1, 500)

    return {"email": email, "type": bounce_type, "reason": reason}, errors


# ---------- query strings ----------
def parse_pagination(args, default_limit: int = 10, max_limit: int = 100):
    """Returns (page, limit, errors) from request args."""
    errors = []
    page = to_int(args.get("page", 1))
    limit = to_int(args.get("limit", default_limit))
    if page is None or page < 1:
        errors.append("Page must be a positive integer")
        page = 1
    if limit is None or not 1 <= limit <= max_limit:
        errors.append(f"Limit must be between 1 and {max_limit}")
        limit = default_limit
    return page, limit, errors


def parse_date_range(args, start_key: str, end_key: str):
    """Returns (start, end, errors); missing bounds come back as None."""
    errors = []
    bounds = []
    for key in (start_key, end_key):
        raw = args.get(key)
        if not raw:
            bounds.append(None)
            continue
        try:
            bounds.append(parse_datetime(raw))
        except ValueError:
            errors.append(f"Invalid date format for {key}")
            bounds.append(None)
    return bounds[0], bounds[1], errors

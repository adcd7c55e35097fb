from datetime import datetime
from functools import wraps

from flask import current_app, jsonify

from models import db
from models.ip_rate_limit import IpRateLimit
from utils.audit import client_ip


def check_and_increment_submit_rate(scope: str = "submit") -> tuple[bool, int]:
    """
    Returns (allowed, retry_after_seconds).
    Fixed window per IP and form scope.
    """
    ip = client_ip() or "unknown"
    now = datetime.utcnow()

    window_seconds = current_app.config.get("SUBMIT_RATE_WINDOW_SECONDS", 900)
    max_requests = current_app.config.get("SUBMIT_RATE_MAX_REQUESTS", 100)

    row = IpRateLimit.query.filter_by(ip=ip, scope=scope).first()
    if not row:
        row = IpRateLimit(ip=ip, scope=scope, window_start=now, count=0)
        db.session.add(row)

    count = row.hit(now, window_seconds)
    db.session.commit()

    if count > max_requests:
        retry_after = int((row.window_end(window_seconds) - now).total_seconds())
        return False, max(retry_after, 1)

    return True, 0


def rate_limited(scope: str = "submit"):
    """
    Usage: @rate_limited("contact")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            allowed, retry_after = check_and_increment_submit_rate(scope)
            if not allowed:
                current_app.logger.warning("Rate limit hit for %s on scope %s", client_ip(), scope)
                resp = jsonify(
                    success=False,
                    message="Too many requests from this IP, please try again later.",
                    retryAfter=retry_after,
                )
                resp.status_code = 429
                resp.headers["Retry-After"] = str(retry_after)
                return resp
            return fn(*args, **kwargs)
        return wrapper
    return decorator

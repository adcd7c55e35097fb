from datetime import datetime, timedelta

from models.db import db


class IpRateLimit(db.Model):
    """Fixed-window submission counter, one row per client IP and form scope."""

    __tablename__ = "ip_rate_limits"

    id = db.Column(db.Integer, primary_key=True)
    ip = db.Column(db.String(64), nullable=False, index=True)
    scope = db.Column(db.String(40), nullable=False, default="submit")  # submit, contact, newsletter

    window_start = db.Column(db.DateTime, nullable=False)
    count = db.Column(db.Integer, default=0, nullable=False)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("ip", "scope", name="uq_ip_rate_limit_scope"),
    )

    def window_end(self, window_seconds: int) -> datetime:
        return self.window_start + timedelta(seconds=window_seconds)

    def hit(self, now: datetime, window_seconds: int) -> int:
        """Count one request, starting a fresh window if the old one expired."""
        if now >= self.window_end(window_seconds):
            self.window_start = now
            self.count = 0
        self.count += 1
        return self.count

from datetime import datetime

from sqlalchemy import event

from models.db import db
from lifecycle.reference import generate_reference_code


class ReferenceMixin:
    """Human-facing reference code, generated once on first insert."""

    REFERENCE_PREFIX = "REF"

    reference_code = db.Column(db.String(40), unique=True, nullable=False, index=True)


class LifecycleMixin:
    """Status plus the once-only transition timestamps shared by bookings."""

    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    # status values: pending, confirmed, cancelled, completed

    admin_notes = db.Column(db.Text, nullable=True)

    confirmed_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


@event.listens_for(ReferenceMixin, "before_insert", propagate=True)
def _assign_reference_code(mapper, connection, target):
    # Never overwrite a code that is already set
    if not target.reference_code:
        target.reference_code = generate_reference_code(target.REFERENCE_PREFIX)

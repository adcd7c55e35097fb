import json
from datetime import datetime

from models.db import db


class AuditLog(db.Model):
    """Append-only trail of state changes made through the API or CLI."""

    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(80), nullable=False, index=True)  # e.g. BOOKING_CREATE, CONTACT_RESPOND
    entity = db.Column(db.String(40), nullable=True)  # booking, corporate_booking, contact, ...
    entity_id = db.Column(db.String(80), nullable=True)
    reference_code = db.Column(db.String(40), nullable=True, index=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        db.Index("ix_audit_logs_entity", "entity", "entity_id"),
    )

    @property
    def details(self):
        return json.loads(self.metadata_json) if self.metadata_json else {}

    def to_dict(self):
        return {
            "id": self.id,
            "action": self.action,
            "entity": self.entity,
            "entityId": self.entity_id,
            "reference": self.reference_code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

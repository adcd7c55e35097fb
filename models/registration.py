import json
from datetime import datetime

from models.db import db
from models.mixins import ReferenceMixin


class Registration(ReferenceMixin, db.Model):
    __tablename__ = "registrations"

    REFERENCE_PREFIX = "REG"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(10), nullable=False)

    interests_json = db.Column(db.Text, nullable=False, default="[]")
    hear_about = db.Column(db.String(40), nullable=False)
    message = db.Column(db.String(1000), nullable=True)

    status = db.Column(db.String(20), nullable=False, default="active", index=True)
    # status values: active, inactive, unsubscribed

    source = db.Column(db.String(40), nullable=False, default="website")
    admin_notes = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def interests(self):
        return json.loads(self.interests_json or "[]")

    @interests.setter
    def interests(self, values):
        self.interests_json = json.dumps(list(values or []))

    def to_dict(self):
        return {
            "id": self.id,
            "registrationId": self.reference_code,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "interests": self.interests,
            "hearAbout": self.hear_about,
            "message": self.message,
            "status": self.status,
            "source": self.source,
            "adminNotes": self.admin_notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

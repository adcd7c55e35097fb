from datetime import datetime

from sqlalchemy import event

from models.db import db


class ContactMessage(db.Model):
    __tablename__ = "contact_messages"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(30), nullable=True)
    subject = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)

    inquiry_type = db.Column(db.String(20), nullable=False, default="general", index=True)
    status = db.Column(db.String(20), nullable=False, default="new", index=True)
    # status values: new, in_progress, resolved, closed
    priority = db.Column(db.String(10), nullable=False, default="medium", index=True)

    admin_response = db.Column(db.Text, nullable=True)
    responded_at = db.Column(db.DateTime, nullable=True, index=True)
    responded_by = db.Column(db.String(100), nullable=True)
    resolved_at = db.Column(db.DateTime, nullable=True)

    follow_up_required = db.Column(db.Boolean, default=False, nullable=False)
    follow_up_date = db.Column(db.DateTime, nullable=True)

    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    source = db.Column(db.String(20), nullable=False, default="website")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    notes = db.relationship(
        "ContactNote",
        back_populates="contact",
        order_by="ContactNote.added_at",
        cascade="all, delete-orphan",
    )

    @property
    def response_time_hours(self):
        if not self.responded_at or not self.created_at:
            return None
        return round((self.responded_at - self.created_at).total_seconds() / 3600)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "subject": self.subject,
            "message": self.message,
            "inquiryType": self.inquiry_type,
            "status": self.status,
            "priority": self.priority,
            "adminResponse": self.admin_response,
            "respondedAt": self.responded_at.isoformat() if self.responded_at else None,
            "respondedBy": self.responded_by,
            "resolvedAt": self.resolved_at.isoformat() if self.resolved_at else None,
            "responseTime": self.response_time_hours,
            "source": self.source,
            "internalNotes": [n.to_dict() for n in self.notes],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class ContactNote(db.Model):
    __tablename__ = "contact_notes"

    id = db.Column(db.Integer, primary_key=True)
    contact_id = db.Column(db.Integer, db.ForeignKey("contact_messages.id"), nullable=False, index=True)
    note = db.Column(db.String(500), nullable=False)
    added_by = db.Column(db.String(100), nullable=False)
    added_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    contact = db.relationship("ContactMessage", back_populates="notes")

    def to_dict(self):
        return {
            "note": self.note,
            "addedBy": self.added_by,
            "addedAt": self.added_at.isoformat() if self.added_at else None,
        }


@event.listens_for(ContactMessage, "before_insert")
@event.listens_for(ContactMessage, "before_update")
def _escalate_booking_inquiries(mapper, connection, target):
    # Booking questions are never left at low priority
    if target.inquiry_type == "booking" and target.priority == "low":
        target.priority = "medium"

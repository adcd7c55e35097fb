from models.db import db
from models.mixins import ReferenceMixin, LifecycleMixin


class Booking(ReferenceMixin, LifecycleMixin, db.Model):
    __tablename__ = "bookings"

    REFERENCE_PREFIX = "SL"

    id = db.Column(db.Integer, primary_key=True)

    customer_name = db.Column(db.String(100), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False, index=True)
    customer_phone = db.Column(db.String(30), nullable=False)

    package_type = db.Column(db.String(20), nullable=False)  # basic, premium, ultimate
    package_name = db.Column(db.String(120), nullable=False)
    package_price = db.Column(db.Float, nullable=False, default=0)

    preferred_date = db.Column(db.DateTime, nullable=False, index=True)
    preferred_time = db.Column(db.String(20), nullable=False)  # morning, afternoon, evening
    duration = db.Column(db.Integer, nullable=False)  # minutes
    participants = db.Column(db.Integer, nullable=False, default=1)
    special_requests = db.Column(db.String(500), nullable=True)

    payment_status = db.Column(db.String(20), nullable=False, default="pending")
    payment_method = db.Column(db.String(20), nullable=True)

    def to_dict(self, include_admin=False):
        out = {
            "id": self.id,
            "bookingId": self.reference_code,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "packageType": self.package_type,
            "packageName": self.package_name,
            "packagePrice": self.package_price,
            "preferredDate": self.preferred_date.isoformat(),
            "preferredTime": self.preferred_time,
            "duration": self.duration,
            "participants": self.participants,
            "specialRequests": self.special_requests,
            "status": self.status,
            "paymentStatus": self.payment_status,
            "paymentMethod": self.payment_method,
            "confirmedAt": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_admin:
            out["adminNotes"] = self.admin_notes
        return out

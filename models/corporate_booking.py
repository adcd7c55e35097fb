from datetime import datetime

from models.db import db
from models.mixins import ReferenceMixin, LifecycleMixin

# Midpoint of each team size bucket, used for averages in reports
TEAM_SIZE_MIDPOINTS = {
    "5-10 people": 7.5,
    "11-20 people": 15.5,
    "21-30 people": 25.5,
    "31-50 people": 40.5,
    "50+ people": 60,
}


class CorporateBooking(ReferenceMixin, LifecycleMixin, db.Model):
    __tablename__ = "corporate_bookings"

    REFERENCE_PREFIX = "CORP"

    id = db.Column(db.Integer, primary_key=True)

    company_name = db.Column(db.String(100), nullable=False, index=True)
    contact_person = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(10), nullable=False)
    job_title = db.Column(db.String(50), nullable=False)

    team_size = db.Column(db.String(20), nullable=False)
    preferred_date = db.Column(db.DateTime, nullable=False, index=True)
    preferred_time = db.Column(db.String(40), nullable=False)
    duration = db.Column(db.String(20), nullable=False)
    event_type = db.Column(db.String(40), nullable=False)
    special_requests = db.Column(db.String(500), nullable=False, default="")

    estimated_cost = db.Column(db.Float, nullable=False, default=0)
    actual_cost = db.Column(db.Float, nullable=True)

    __table_args__ = (
        db.Index("ix_corporate_company_email", "company_name", "email"),
    )

    @property
    def is_upcoming(self) -> bool:
        return self.preferred_date > datetime.utcnow() and self.status != "cancelled"

    @property
    def team_size_number(self) -> float:
        return TEAM_SIZE_MIDPOINTS.get(self.team_size, 0)

    def public_dict(self):
        return {
            "bookingReference": self.reference_code,
            "companyName": self.company_name,
            "contactPerson": self.contact_person,
            "eventType": self.event_type,
            "teamSize": self.team_size,
            "preferredDate": self.preferred_date.isoformat(),
            "preferredTime": self.preferred_time,
            "duration": self.duration,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "isUpcoming": self.is_upcoming,
        }

    def to_dict(self):
        out = self.public_dict()
        out.update({
            "id": self.id,
            "email": self.email,
            "phone": self.phone,
            "jobTitle": self.job_title,
            "specialRequests": self.special_requests,
            "estimatedCost": self.estimated_cost,
            "actualCost": self.actual_cost,
            "adminNotes": self.admin_notes,
            "confirmedAt": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        })
        return out

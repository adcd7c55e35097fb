from routes.health import health_bp
from routes.bookings import bookings_bp
from routes.corporate_bookings import corporate_bp
from routes.registrations import registrations_bp
from routes.contact import contact_bp
from routes.newsletter import newsletter_bp
from routes.admin import admin_bp

__all__ = [
    "health_bp",
    "bookings_bp",
    "corporate_bp",
    "registrations_bp",
    "contact_bp",
    "newsletter_bp",
    "admin_bp",
]

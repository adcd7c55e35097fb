from .db import db
from .audit_log import AuditLog
from .ip_rate_limit import IpRateLimit
from .booking import Booking
from .corporate_booking import CorporateBooking
from .registration import Registration
from .contact import ContactMessage, ContactNote
from .newsletter import NewsletterSubscriber, CampaignInteraction, NewsletterBounce

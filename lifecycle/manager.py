"""
Booking lifecycle: creation with reference codes, status transitions and the
corporate duplicate-submission guard.

States::

    pending -> confirmed -> completed
    pending/confirmed -> cancelled

``completed`` and ``cancelled`` are terminal. By default the manager does not
block leaving them (``strict=False``); with ``strict=True`` such a transition
raises :class:`InvalidTransition`.
"""
import logging
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.corporate_booking import CorporateBooking
from lifecycle.errors import (
    DuplicateSubmission,
    InvalidTransition,
    NotFound,
    ReferenceCollision,
    UniqueViolation,
)
from lifecycle.reference import assign_reference

logger = logging.getLogger(__name__)

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")
TERMINAL_STATUSES = ("cancelled", "completed")


def _is_unique_violation(exc: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed", postgres: "duplicate key value", mysql: "Duplicate entry"
    text = str(getattr(exc, "orig", exc)).lower()
    return "unique" in text or "duplicate" in text


def _is_reference_violation(exc: IntegrityError) -> bool:
    return _is_unique_violation(exc) and "reference_code" in str(getattr(exc, "orig", exc))


def append_note(existing: str, line: str) -> str:
    return f"{existing}\n{line}" if existing else line


class BookingLifecycle:
    def __init__(self, session, strict: bool = False, reference_retries: int = 0, clock=None):
        self.session = session
        self.strict = strict
        self.reference_retries = max(0, int(reference_retries))
        self.clock = clock or datetime.utcnow

    # ---------- lookups ----------
    def get_or_404(self, model, entity_id, label: str = None):
        entity = self.session.get(model, entity_id)
        if entity is None:
            raise NotFound(label or model.__name__)
        return entity

    def find_by_reference(self, model, reference_code: str):
        return model.query.filter_by(reference_code=(reference_code or "").strip().upper()).first()

    # ---------- creation ----------
    def create(self, entity, duplicate_message: str = None):
        """
        Persist a new bookable record, assigning its reference code.

        A reference-code unique violation is retried with a fresh code up to
        ``reference_retries`` times; any other unique violation is reported
        as :class:`UniqueViolation`. Other integrity errors (NOT NULL,
        foreign keys) propagate unchanged.
        """
        attempts = 0
        while True:
            assign_reference(entity)
            self.session.add(entity)
            try:
                self.session.commit()
                return entity
            except IntegrityError as exc:
                self.session.rollback()
                if not _is_unique_violation(exc):
                    raise
                if not _is_reference_violation(exc):
                    raise UniqueViolation(duplicate_message) from exc
                if attempts >= self.reference_retries:
                    raise ReferenceCollision(entity.reference_code) from exc
                attempts += 1
                logger.warning(
                    "Reference code %s collided, regenerating (attempt %s)",
                    entity.reference_code, attempts,
                )
                entity.reference_code = None

    def find_active_duplicate(self, company_name: str, email: str, preferred_date: datetime):
        return (
            CorporateBooking.query
            .filter(
                CorporateBooking.company_name == company_name.strip(),
                CorporateBooking.email == email.strip().lower(),
                CorporateBooking.preferred_date == preferred_date,
                CorporateBooking.status != "cancelled",
            )
            .first()
        )

    def create_corporate_booking(self, booking: CorporateBooking):
        # Point-in-time check; two identical concurrent submissions can both pass
        existing = self.find_active_duplicate(booking.company_name, booking.email, booking.preferred_date)
        if existing:
            raise DuplicateSubmission(existing)
        return self.create(booking)

    # ---------- transitions ----------
    def _check_transition(self, entity, target: str):
        if self.strict and entity.status in TERMINAL_STATUSES and entity.status != target:
            raise InvalidTransition(entity.status, target)

    def _commit(self, entity):
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return entity

    def save(self, entity):
        """Persist non-status edits (costs, notes) on an existing record."""
        return self._commit(entity)

    def confirm(self, entity):
        self._check_transition(entity, "confirmed")
        entity.status = "confirmed"
        if entity.confirmed_at is None:
            entity.confirmed_at = self.clock()
        return self._commit(entity)

    def cancel(self, entity, reason: str = None):
        self._check_transition(entity, "cancelled")
        entity.status = "cancelled"
        if entity.cancelled_at is None:
            entity.cancelled_at = self.clock()
        if reason:
            entity.admin_notes = append_note(entity.admin_notes, f"Cancelled: {reason}")
        return self._commit(entity)

    def complete(self, entity):
        self._check_transition(entity, "completed")
        entity.status = "completed"
        if entity.completed_at is None:
            entity.completed_at = self.clock()
        return self._commit(entity)

    def reopen(self, entity):
        self._check_transition(entity, "pending")
        entity.status = "pending"
        return self._commit(entity)

    def transition(self, entity, target: str, admin_notes: str = None):
        """Move ``entity`` to ``target``; ``admin_notes`` replaces existing notes when given."""
        if target not in BOOKING_STATUSES:
            raise ValueError(f"Unknown booking status: {target}")
        self._check_transition(entity, target)
        if admin_notes:
            entity.admin_notes = admin_notes
        if target == "confirmed":
            return self.confirm(entity)
        if target == "cancelled":
            return self.cancel(entity)
        if target == "completed":
            return self.complete(entity)
        return self.reopen(entity)


def get_lifecycle() -> BookingLifecycle:
    """Lifecycle bound to the current app's session and policy settings."""
    return BookingLifecycle(
        db.session,
        strict=current_app.config.get("STRICT_TRANSITIONS", False),
        reference_retries=current_app.config.get("REFERENCE_CODE_RETRIES", 0),
    )

class LifecycleError(Exception):
    """Base error for booking lifecycle operations; carries its HTTP status."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationFailed(LifecycleError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors, message: str = None):
        super().__init__(message)
        self.errors = list(errors)

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["errors"] = self.errors
        return out


class NotFound(LifecycleError):
    status_code = 404

    def __init__(self, label: str = "Record"):
        super().__init__(f"{label} not found")


class DuplicateSubmission(LifecycleError):
    status_code = 409
    default_message = (
        "A booking for this company and date already exists. Please choose a different "
        "date or contact us to modify the existing booking."
    )

    def __init__(self, existing, message: str = None):
        super().__init__(message)
        self.existing = existing

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["existingBooking"] = {
            "bookingReference": self.existing.reference_code,
            "status": self.existing.status,
        }
        return out


class ReferenceCollision(LifecycleError):
    status_code = 409
    default_message = "Booking ID already exists. Please try again."

    def __init__(self, reference_code: str = None):
        super().__init__()
        self.reference_code = reference_code


class UniqueViolation(LifecycleError):
    status_code = 400
    default_message = "Record already exists"


class InvalidTransition(LifecycleError):
    status_code = 409

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change status from {current} to {target}")
        self.current = current
        self.target = target

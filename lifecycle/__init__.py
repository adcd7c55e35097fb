from .errors import (
    LifecycleError,
    ValidationFailed,
    NotFound,
    DuplicateSubmission,
    ReferenceCollision,
    UniqueViolation,
    InvalidTransition,
)
from .reference import generate_reference_code, assign_reference

"""
Reference codes for bookable records.

Format: ``{PREFIX}-{base36 epoch millis}-{4 random}{4 random}``, uppercased,
e.g. ``SL-MF3K2Q1Z-7H2K9QXA``. The format is deterministic, uniqueness is not:
the database unique constraint on ``reference_code`` has the final say.
"""
import re
import secrets
import time

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
RANDOM_SEGMENT_LENGTH = 4


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def _random_segment(length: int = RANDOM_SEGMENT_LENGTH) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def generate_reference_code(prefix: str, now_ms: int = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    code = f"{prefix}-{to_base36(now_ms)}-{_random_segment()}{_random_segment()}"
    return code.upper()


def reference_pattern(prefix: str):
    return re.compile(rf"^{re.escape(prefix.upper())}-[0-9A-Z]+-[0-9A-Z]{{{RANDOM_SEGMENT_LENGTH * 2}}}$")


def assign_reference(entity) -> str:
    """Set ``entity.reference_code`` if it is empty and return the code in effect."""
    if not entity.reference_code:
        entity.reference_code = generate_reference_code(entity.REFERENCE_PREFIX)
    return entity.reference_code

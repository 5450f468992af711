"""
Value classification and confidence scoring.

Handles:
- Ignorability (values that are never correlation candidates)
- Value types (JWT, UUID, numeric ID, generic dynamic value)
- Confidence levels (HIGH / MEDIUM / LOW)
"""

from typing import Any, Optional, Sequence

from .constants import (
    ALNUM_RE,
    GENERIC_DYNAMIC_VALUE,
    HIGH,
    HIGH_CONFIDENCE_OCCURRENCES,
    IGNORED_LITERALS,
    JWT_RE,
    JWT_TOKEN,
    LOW,
    MEDIUM,
    MIN_LITERAL_LENGTH,
    NUMERIC_ID,
    NUMERIC_ID_RE,
    PARAMETER_REF_RE,
    UNKNOWN,
    UUID,
    UUID_RE,
)


def is_ignorable(value: Optional[str]) -> bool:
    """
    True for values that can never be correlation candidates:
    empty, shorter than 4 chars, "true"/"false", or already parameterized
    (carries a ${...} reference).
    """
    if not value:
        return True
    if PARAMETER_REF_RE.search(value):
        return True
    if value in IGNORED_LITERALS:
        return True
    return len(value) < MIN_LITERAL_LENGTH


def looks_like_jwt(value: str) -> bool:
    return JWT_RE.fullmatch(value) is not None


def looks_like_uuid(value: str) -> bool:
    return UUID_RE.fullmatch(value) is not None


def looks_like_numeric_id(value: str) -> bool:
    return NUMERIC_ID_RE.fullmatch(value) is not None


def looks_like_alphanumeric(value: str) -> bool:
    return ALNUM_RE.fullmatch(value) is not None


def classify_value(value: str) -> str:
    """
    Classify a literal; the first matching shape wins.

    Priority: JWT_TOKEN > UUID > NUMERIC_ID > GENERIC_DYNAMIC_VALUE > UNKNOWN.
    A UUID also satisfies the generic shape, a numeric ID too, so the order
    is what keeps the more specific tag.
    """
    if looks_like_jwt(value):
        return JWT_TOKEN
    if looks_like_uuid(value):
        return UUID
    if looks_like_numeric_id(value):
        return NUMERIC_ID
    if looks_like_alphanumeric(value):
        return GENERIC_DYNAMIC_VALUE
    return UNKNOWN


def calculate_confidence(value: str, occurrences: Sequence[Any]) -> str:
    """
    HIGH   - reused in 3+ requests, or a JWT / UUID shape
    MEDIUM - numeric ID
    LOW    - anything else
    """
    if len(occurrences) >= HIGH_CONFIDENCE_OCCURRENCES:
        return HIGH
    if looks_like_jwt(value) or looks_like_uuid(value):
        return HIGH
    if looks_like_numeric_id(value):
        return MEDIUM
    return LOW

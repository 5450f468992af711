"""
Extraction recommendations per value type.

A fixed lookup: the suggestion depends only on the value type, never on the
value text itself.
"""

from typing import Any, Dict

from .constants import JWT_TOKEN, NUMERIC_ID, UUID

_RECOMMENDATIONS: Dict[str, Dict[str, str]] = {
    JWT_TOKEN: {
        "extractor": "Regex Extractor",
        "variableName": "jwt_token",
        "regex": "eyJ[a-zA-Z0-9._-]+",
        "usage": "Extract token from login response and use in Authorization header",
    },
    UUID: {
        "extractor": "JSON Extractor",
        "variableName": "uuid_var",
        "jsonPath": "$..id",
        "usage": "Extract UUID from previous response",
    },
    NUMERIC_ID: {
        "extractor": "JSON Extractor",
        "variableName": "id_var",
        "jsonPath": "$..id",
        "usage": "Replace hardcoded numeric ID with extracted variable",
    },
}

_FALLBACK: Dict[str, str] = {
    "extractor": "Regex / JSON Extractor",
    "variableName": "dynamic_var",
    "usage": "Extract from previous response before reuse",
}


def build_recommendation(value_type: str) -> Dict[str, Any]:
    """Return a fresh copy of the recommendation template for `value_type`."""
    return dict(_RECOMMENDATIONS.get(value_type, _FALLBACK))

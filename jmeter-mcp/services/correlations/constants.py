"""
Constants and patterns for correlation candidate detection.

Shared across all correlation modules.
"""

import re
from typing import FrozenSet

# === Shape Patterns ===
# Each shape exists twice: a scanning form (sub-matches inside a larger string)
# and an anchored form used by the classifier on a whole value. Both are ASCII-only.

_UUID = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
_JWT = r"eyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"
_NUMERIC_RUN = r"\d{6,14}"
# 6-20 letters/digits containing at least one digit; pure words ("orders", "status") are static text
_ALNUM_RUN = r"(?=[A-Za-z0-9]*\d)[A-Za-z0-9]{6,20}"

UUID_SCAN_RE = re.compile(r"\b" + _UUID + r"\b", re.IGNORECASE | re.ASCII)
JWT_SCAN_RE = re.compile(r"(?<![A-Za-z0-9_.-])" + _JWT + r"(?![A-Za-z0-9_.-])", re.ASCII)
NUMERIC_SCAN_RE = re.compile(r"\b" + _NUMERIC_RUN + r"\b", re.ASCII)
ALNUM_SCAN_RE = re.compile(r"\b" + _ALNUM_RUN + r"\b", re.ASCII)

UUID_RE = re.compile(_UUID, re.IGNORECASE | re.ASCII)
JWT_RE = re.compile(_JWT, re.ASCII)
# Any all-digit value of 6+ digits; the scanner never yields shorter digit runs
NUMERIC_ID_RE = re.compile(r"\d{6,}", re.ASCII)
ALNUM_RE = re.compile(_ALNUM_RUN, re.ASCII)

# Scan order. UUID and JWT are structured tokens: plain runs found inside their
# spans are fragments of the token, not values of their own.
SCAN_PATTERNS = (
    ("uuid", UUID_SCAN_RE, True),
    ("jwt", JWT_SCAN_RE, True),
    ("numeric", NUMERIC_SCAN_RE, False),
    ("alphanumeric", ALNUM_SCAN_RE, False),
)

# JMeter parameter-substitution syntax: ${var}, ${__function()}
PARAMETER_REF_RE = re.compile(r"\$\{[^}]*\}")


# === Ignorability ===

MIN_LITERAL_LENGTH = 4
IGNORED_LITERALS: FrozenSet[str] = frozenset({"true", "false"})


# === JMX Element / Property Names ===

SAMPLER_TAG = "HTTPSamplerProxy"
HASH_TREE_TAG = "hashTree"
HEADER_MANAGER_TAG = "HeaderManager"

SAMPLER_NAME_ATTR = "testname"
SAMPLER_PATH_PROP = "HTTPSampler.path"
SAMPLER_METHOD_PROP = "HTTPSampler.method"
SAMPLER_ARGUMENTS_PROP = "HTTPsampler.Arguments"
ARGUMENT_NAME_PROP = "Argument.name"
ARGUMENT_VALUE_PROP = "Argument.value"
HEADER_NAME_PROP = "Header.name"
HEADER_VALUE_PROP = "Header.value"


# === Value Types ===

JWT_TOKEN = "JWT_TOKEN"
UUID = "UUID"
NUMERIC_ID = "NUMERIC_ID"
GENERIC_DYNAMIC_VALUE = "GENERIC_DYNAMIC_VALUE"
UNKNOWN = "UNKNOWN"

VALUE_TYPES = (JWT_TOKEN, UUID, NUMERIC_ID, GENERIC_DYNAMIC_VALUE, UNKNOWN)


# === Confidence Levels ===

HIGH = "HIGH"
MEDIUM = "MEDIUM"
LOW = "LOW"

# Reuse across this many requests is strong evidence regardless of shape
HIGH_CONFIDENCE_OCCURRENCES = 3


# === Traversal ===

DEFAULT_MAX_TREE_DEPTH = 256

"""
Correlation candidate detection for JMeter scripts.

This package scans a JMX test plan for literal values (tokens, IDs) that were
hardcoded from a recording and will likely need extraction from an earlier
response before the script can be replayed.
"""

from .engine import detect_correlations
from .exceptions import CorrelationError, DocumentNotFoundError, MalformedDocumentError
from .loader import load_jmx_document

__all__ = [
    "detect_correlations",
    "load_jmx_document",
    "CorrelationError",
    "DocumentNotFoundError",
    "MalformedDocumentError",
]

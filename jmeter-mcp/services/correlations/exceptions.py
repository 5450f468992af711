"""
Exceptions raised by the correlation engine and its document loader.

Only acquisition and root-structure failures raise; anything missing inside a
well-formed tree falls back to defaults.
"""


class CorrelationError(Exception):
    """Base class for correlation engine errors."""


class DocumentNotFoundError(CorrelationError, FileNotFoundError):
    """The JMX document could not be located or read."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"JMX file not found: {path}")


class MalformedDocumentError(CorrelationError, ValueError):
    """The document is not a tree (unparseable XML or a non-element root)."""

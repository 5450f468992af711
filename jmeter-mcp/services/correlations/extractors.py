"""
Literal extraction from request descriptors.

Three sources feed a request's literal set:
- query-string values of the sampler path (whole values, ignorability-filtered)
- shape-pattern sub-matches anywhere in the path (unconditional)
- argument/header values (whole value ignorability-filtered, sub-matches unconditional)

Literal sets are ordered (first insertion wins) so downstream index order, and
therefore the report, is reproducible across runs.
"""

from typing import Any, Dict, Iterable, List, Tuple
from urllib.parse import parse_qsl

from .classifiers import is_ignorable
from .constants import PARAMETER_REF_RE, SCAN_PATTERNS


def _add(literals: Dict[str, None], values: Iterable[str]) -> None:
    for value in values:
        literals.setdefault(value, None)


def split_query(path: str) -> Tuple[str, str]:
    """Split on the first '?' into (path, query)."""
    base, _, query = path.partition("?")
    return base, query


def extract_query_values(path: str) -> List[str]:
    """Decoded query parameter values of `path` (keys are ignored)."""
    _, query = split_query(path or "")
    if not query:
        return []
    return [value for _, value in parse_qsl(query, keep_blank_values=True)]


def scan_literals(text: str) -> List[str]:
    """
    Run the shape pattern suite over `text` and return every sub-match.

    All patterns run (UUID, JWT, numeric run, alphanumeric run). Runs that fall
    inside a UUID or JWT match are fragments of that token and are dropped;
    ${...} parameter references are masked before scanning.
    """
    if not text:
        return []

    # Same-length mask keeps match offsets aligned with the original text
    masked = PARAMETER_REF_RE.sub(lambda m: " " * len(m.group(0)), text)

    matches: List[str] = []
    token_spans: List[Tuple[int, int]] = []
    for _, pattern, is_token in SCAN_PATTERNS:
        for match in pattern.finditer(masked):
            start, end = match.span()
            if not is_token and any(s <= start and end <= e for s, e in token_spans):
                continue
            if is_token:
                token_spans.append((start, end))
            matches.append(match.group(0))
    return matches


def extract_request_literals(descriptor: Dict[str, Any]) -> List[str]:
    """Ordered, de-duplicated literal set for one request descriptor."""
    literals: Dict[str, None] = {}
    path = descriptor.get("path") or ""

    _add(literals, (v for v in extract_query_values(path) if not is_ignorable(v)))
    _add(literals, scan_literals(path))

    for argument in descriptor.get("arguments") or []:
        value = argument.get("value") or ""
        if not is_ignorable(value):
            _add(literals, [value])
        _add(literals, scan_literals(value))

    return list(literals)

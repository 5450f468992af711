"""
Cross-request value index: literal -> ordered occurrences.
"""

import logging
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .classifiers import is_ignorable

logger = logging.getLogger(__name__)


def build_value_index(
    requests: Iterable[Tuple[Dict[str, Any], Sequence[str]]]
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Build the reverse index from (descriptor, literal set) pairs in traversal order.

    Each request contributes at most one occurrence per value. Keys keep
    first-insertion order; lookups are exact and case-sensitive.
    """
    index: Dict[str, List[Dict[str, Any]]] = {}

    for descriptor, literals in requests:
        for value in dict.fromkeys(literals):
            if is_ignorable(value):
                continue
            index.setdefault(value, []).append({
                "samplerName": descriptor["name"],
                "order": descriptor["order"],
            })

    logger.debug("Indexed %d distinct value(s)", len(index))
    return index

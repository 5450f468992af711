"""
Correlation candidate detection engine.

Pipeline (each stage a pure function of the previous one):
  normalize -> collect samplers -> extract literals -> index values
  -> classify / score -> recommend -> assemble report

The engine holds no module state; detect_correlations() is safe to call
concurrently for independent documents.
"""

import logging
from typing import Any, Dict, List, Optional

from .classifiers import calculate_confidence, classify_value
from .collector import TraversalContext, collect_samplers
from .constants import DEFAULT_MAX_TREE_DEPTH
from .document import normalize_document
from .extractors import extract_request_literals
from .indexer import build_value_index
from .recommendations import build_recommendation

logger = logging.getLogger(__name__)


def build_suggestions(index: Dict[str, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """One suggestion per indexed value, in index order."""
    suggestions = []
    for value, occurrences in index.items():
        value_type = classify_value(value)
        suggestions.append({
            "detectedValue": value,
            "valueType": value_type,
            "confidence": calculate_confidence(value, occurrences),
            "usedInSamplers": [o["samplerName"] for o in occurrences],
            "recommendation": build_recommendation(value_type),
        })
    return suggestions


def assemble_report(
    source_id: str,
    samplers_scanned: int,
    suggestions: List[Dict[str, Any]],
) -> Dict[str, Any]:
    return {
        "jmxFile": source_id,
        "samplersScanned": samplers_scanned,
        "correlationCandidates": len(suggestions),
        "suggestions": suggestions,
    }


def detect_correlations(
    document: Any,
    source_id: str,
    max_depth: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Scan a parsed JMX document for hardcoded dynamic values.

    Args:
        document: Node, ET.Element / ET.ElementTree, or xml2js-style mapping.
        source_id: Identifier echoed back as "jmxFile" (usually the file name).
        max_depth: Tree depth bound for normalization and traversal.

    Returns:
        The correlation report dict.

    Raises:
        MalformedDocumentError: if `document` is not a tree.
    """
    depth = DEFAULT_MAX_TREE_DEPTH if max_depth is None else max_depth
    root = normalize_document(document, max_depth=depth)

    samplers = collect_samplers(root, TraversalContext(max_depth=depth))
    requests = [(sampler, extract_request_literals(sampler)) for sampler in samplers]
    index = build_value_index(requests)
    suggestions = build_suggestions(index)

    logger.info(
        "Correlation scan of '%s': %d sampler(s), %d candidate(s)",
        source_id, len(samplers), len(suggestions),
    )
    return assemble_report(source_id, len(samplers), suggestions)

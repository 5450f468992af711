"""
Sampler collection: flatten every HTTP sampler of a normalized JMX tree into an
ordered list of request descriptors.

A request descriptor is a plain dict:
    {
      "order": int,            # 1-based, global across the whole walk
      "name": str,             # testname, or "Sampler-<order>"
      "method": str,
      "path": str,
      "arguments": [{"name": Optional[str], "value": str, "source": "argument" | "header"}, ...],
    }
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    ARGUMENT_NAME_PROP,
    ARGUMENT_VALUE_PROP,
    DEFAULT_MAX_TREE_DEPTH,
    HASH_TREE_TAG,
    HEADER_MANAGER_TAG,
    HEADER_NAME_PROP,
    HEADER_VALUE_PROP,
    SAMPLER_ARGUMENTS_PROP,
    SAMPLER_METHOD_PROP,
    SAMPLER_NAME_ATTR,
    SAMPLER_PATH_PROP,
    SAMPLER_TAG,
)
from .document import Node, NodeKind, children_of, find_named

logger = logging.getLogger(__name__)


@dataclass
class TraversalContext:
    """Mutable walk state, threaded through one collection pass."""

    order: int = 0
    max_depth: int = DEFAULT_MAX_TREE_DEPTH
    truncated: int = 0

    def next_order(self) -> int:
        self.order += 1
        return self.order


# ============================================================
# Property Helpers
# ============================================================

def get_string_prop(node: Optional[Node], prop_name: str) -> Optional[str]:
    """Text of the <stringProp name=prop_name> child, or None if absent."""
    prop = find_named(node, "stringProp", prop_name)
    if prop is None:
        return None
    return prop.text


def _collection_items(container: Optional[Node]) -> List[Node]:
    items: List[Node] = []
    for collection in children_of(container, "collectionProp"):
        items.extend(children_of(collection, "elementProp"))
    return items


def extract_arguments(sampler: Node) -> List[Dict[str, Any]]:
    """Sampler arguments (query/form params or a raw body) with a non-empty value."""
    arguments = []
    for element_prop in children_of(sampler, "elementProp"):
        is_arguments = (
            element_prop.attributes.get("name") == SAMPLER_ARGUMENTS_PROP
            or element_prop.attributes.get("elementType") == "Arguments"
        )
        if not is_arguments:
            continue
        for arg in _collection_items(element_prop):
            value = (get_string_prop(arg, ARGUMENT_VALUE_PROP) or "").strip()
            if not value:
                continue
            arguments.append({
                "name": get_string_prop(arg, ARGUMENT_NAME_PROP),
                "value": value,
                "source": "argument",
            })
    return arguments


def extract_headers(hash_tree: Optional[Node]) -> List[Dict[str, Any]]:
    """Headers of the Header Manager(s) sitting directly in a sampler's hashTree."""
    headers = []
    for manager in children_of(hash_tree, HEADER_MANAGER_TAG):
        for header in _collection_items(manager):
            value = (get_string_prop(header, HEADER_VALUE_PROP) or "").strip()
            if not value:
                continue
            headers.append({
                "name": get_string_prop(header, HEADER_NAME_PROP),
                "value": value,
                "source": "header",
            })
    return headers


def build_request_descriptor(
    sampler: Node,
    order: int,
    hash_tree: Optional[Node] = None,
) -> Dict[str, Any]:
    """Convert one HTTPSamplerProxy node into a request descriptor."""
    return {
        "order": order,
        "name": sampler.attr(SAMPLER_NAME_ATTR) or f"Sampler-{order}",
        "method": (get_string_prop(sampler, SAMPLER_METHOD_PROP) or "").strip(),
        "path": (get_string_prop(sampler, SAMPLER_PATH_PROP) or "").strip(),
        "arguments": extract_arguments(sampler) + extract_headers(hash_tree),
    }


# ============================================================
# Traversal
# ============================================================

def collect_samplers(
    root: Node,
    context: Optional[TraversalContext] = None,
) -> List[Dict[str, Any]]:
    """
    Depth-first, document-order walk collecting every HTTP sampler.

    Uses an explicit work-list instead of recursion; subtrees deeper than
    context.max_depth are skipped (and counted in context.truncated).
    The hashTree right after a sampler is its child tree, so its Header
    Managers are attached to that sampler.
    """
    if context is None:
        context = TraversalContext()

    descriptors: List[Dict[str, Any]] = []
    # (node, depth, following sibling)
    stack: List[Tuple[Node, int, Optional[Node]]] = [(root, 0, None)]

    while stack:
        node, depth, next_sibling = stack.pop()

        if node.tag == SAMPLER_TAG:
            hash_tree = next_sibling if next_sibling is not None and next_sibling.tag == HASH_TREE_TAG else None
            descriptors.append(build_request_descriptor(node, context.next_order(), hash_tree))

        if node.kind is not NodeKind.CHILDREN:
            continue
        if depth >= context.max_depth:
            context.truncated += 1
            continue

        children = node.children
        for index in range(len(children) - 1, -1, -1):
            sibling = children[index + 1] if index + 1 < len(children) else None
            stack.append((children[index], depth + 1, sibling))

    if context.truncated:
        logger.warning(
            "Sampler walk hit max depth %d; %d subtree(s) skipped",
            context.max_depth, context.truncated,
        )
    logger.debug("Collected %d sampler(s)", len(descriptors))
    return descriptors

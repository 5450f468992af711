"""
Document normalization for parsed JMX scripts.

A parsed script reaches the engine in one of two raw shapes:
- an ElementTree element (ordered children, repeated tags)
- an xml2js-style mapping, where "$" holds attributes, "_" holds text and any
  other key is a field holding either ONE child or a LIST of children

Both are converted here into a single immutable Node tree, so traversal code
never has to ask whether a field happened to occur once or many times.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .constants import DEFAULT_MAX_TREE_DEPTH
from .exceptions import MalformedDocumentError

logger = logging.getLogger(__name__)

DOCUMENT_TAG = "#document"

_ATTRIBUTES_KEY = "$"
_TEXT_KEY = "_"


class NodeKind(Enum):
    LEAF = "leaf"              # text only
    ATTRIBUTES = "attributes"  # attributes (and maybe text), no children
    CHILDREN = "children"      # has child nodes


@dataclass(frozen=True)
class Node:
    tag: str
    attributes: Mapping[str, str] = dataclass_field(default_factory=dict)
    text: str = ""
    children: Tuple["Node", ...] = ()

    @property
    def kind(self) -> NodeKind:
        if self.children:
            return NodeKind.CHILDREN
        if self.attributes:
            return NodeKind.ATTRIBUTES
        return NodeKind.LEAF

    def attr(self, name: str, default: str = "") -> str:
        return self.attributes.get(name) or default

    def field(self, name: str) -> Tuple["Node", ...]:
        """All children stored under `name`, in document order (0..n)."""
        return tuple(child for child in self.children if child.tag == name)

    def first(self, name: str) -> Optional["Node"]:
        for child in self.children:
            if child.tag == name:
                return child
        return None


def children_of(node: Optional[Node], name: str) -> Tuple[Node, ...]:
    """Sequence view of a named field; absent fields (or nodes) give ()."""
    if node is None:
        return ()
    return node.field(name)


def find_named(node: Optional[Node], field_name: str, name: str) -> Optional[Node]:
    """First child under `field_name` whose `name` attribute equals `name`."""
    for child in children_of(node, field_name):
        if child.attributes.get("name") == name:
            return child
    return None


# ============================================================
# Normalization
# ============================================================

def normalize_document(raw: Any, max_depth: int = DEFAULT_MAX_TREE_DEPTH) -> Node:
    """
    Normalize a raw parse result into a Node tree.

    Accepts a Node (returned as is), an ET.ElementTree, an ET.Element or an
    xml2js-style mapping. Anything else is not a tree.

    Raises:
        MalformedDocumentError: if the root is not a tree.
    """
    if isinstance(raw, Node):
        return raw
    if isinstance(raw, ET.ElementTree):
        raw = raw.getroot()
        if raw is None:
            raise MalformedDocumentError("Document has no root element")
    if ET.iselement(raw):
        return _from_element(raw, max_depth)
    if isinstance(raw, Mapping):
        return _from_mapping(DOCUMENT_TAG, raw, max_depth)
    raise MalformedDocumentError(
        f"Document root must be an XML element or a mapping, got {type(raw).__name__}"
    )


def _from_element(root: ET.Element, max_depth: int) -> Node:
    truncated = 0

    def build(elem: ET.Element, depth: int) -> Node:
        nonlocal truncated
        children: Tuple[Node, ...] = ()
        if len(elem):
            if depth >= max_depth:
                truncated += 1
            else:
                children = tuple(build(child, depth + 1) for child in elem)
        return Node(
            tag=str(elem.tag),
            attributes=dict(elem.attrib),
            text=elem.text or "",
            children=children,
        )

    node = build(root, 0)
    if truncated:
        logger.warning("Document deeper than %d levels; %d subtree(s) skipped", max_depth, truncated)
    return node


def _from_mapping(tag: str, raw: Mapping[str, Any], max_depth: int) -> Node:
    truncated = 0

    def build(name: str, value: Any, depth: int) -> Node:
        nonlocal truncated
        if not isinstance(value, Mapping):
            # Bare scalar field: xml2js collapses text-only elements to strings
            return Node(tag=name, text="" if value is None else str(value))

        attributes: Dict[str, str] = {}
        raw_attributes = value.get(_ATTRIBUTES_KEY)
        if isinstance(raw_attributes, Mapping):
            attributes = {str(k): "" if v is None else str(v) for k, v in raw_attributes.items()}
        text = value.get(_TEXT_KEY)

        children: List[Node] = []
        fields = [(k, v) for k, v in value.items() if k not in (_ATTRIBUTES_KEY, _TEXT_KEY)]
        if fields and depth >= max_depth:
            truncated += 1
        elif fields:
            for key, field_value in fields:
                items = field_value if isinstance(field_value, list) else [field_value]
                for item in items:
                    children.append(build(key, item, depth + 1))

        return Node(
            tag=name,
            attributes=attributes,
            text="" if text is None else str(text),
            children=tuple(children),
        )

    node = build(tag, raw, 0)
    if truncated:
        logger.warning("Document deeper than %d levels; %d subtree(s) skipped", max_depth, truncated)
    return node

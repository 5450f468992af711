"""
JMX document acquisition: read a .jmx file and hand back a normalized tree.
"""

import logging
import os
import xml.etree.ElementTree as ET

from .constants import DEFAULT_MAX_TREE_DEPTH
from .document import Node, normalize_document
from .exceptions import DocumentNotFoundError, MalformedDocumentError

logger = logging.getLogger(__name__)


def load_jmx_document(path: str, max_depth: int = DEFAULT_MAX_TREE_DEPTH) -> Node:
    """
    Parse a JMX file into a Node tree.

    Raises:
        DocumentNotFoundError: if the file does not exist or cannot be read.
        MalformedDocumentError: if the file is not well-formed XML.
    """
    if not path or not os.path.isfile(path):
        raise DocumentNotFoundError(path)

    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        raise MalformedDocumentError(f"Invalid JMX XML in '{os.path.basename(path)}': {e}") from e
    except OSError as e:
        raise DocumentNotFoundError(path) from e

    logger.debug("Parsed JMX document: %s", path)
    return normalize_document(tree, max_depth=max_depth)

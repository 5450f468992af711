"""
services/jmx/config_elements.py

Functions that create JMeter config elements: HTTP Request Defaults and the
HTTP Header Manager.
"""
import xml.etree.ElementTree as ET

# === HTTP Request Defaults Element ===
def create_http_defaults(connect_timeout_ms=10000, response_timeout_ms=15000):
    """
    Creates an HTTP Request Defaults element carrying global timeouts.
    """
    defaults = ET.Element("ConfigTestElement", attrib={
        "guiclass": "HttpDefaultsGui",
        "testclass": "ConfigTestElement",
        "testname": "HTTP Request Defaults",
        "enabled": "true"
    })
    ET.SubElement(defaults, "stringProp", attrib={"name": "HTTPSampler.connect_timeout"}).text = str(connect_timeout_ms)
    ET.SubElement(defaults, "stringProp", attrib={"name": "HTTPSampler.response_timeout"}).text = str(response_timeout_ms)
    return defaults

# === HTTP Header Manager Element ===
# Headers to exclude from the Header Manager (handled by other JMeter components)
EXCLUDED_HEADERS = {
    "cookie",          # Handled by HTTP Cookie Manager
    "content-length",  # Automatically calculated by JMeter
}

def create_header_manager(headers):
    """
    Creates a Header Manager element.

    Args:
        headers: list of (name, value) pairs; order is preserved and
                 excluded headers are skipped (case-insensitive).

    Returns:
        The HeaderManager element, or None when no header survives filtering.
    """
    kept = [(name, value) for name, value in headers if name and name.lower() not in EXCLUDED_HEADERS]
    if not kept:
        return None

    header_manager = ET.Element("HeaderManager", attrib={
        "guiclass": "HeaderPanel",
        "testclass": "HeaderManager",
        "testname": "HTTP Header Manager",
        "enabled": "true"
    })
    collection = ET.SubElement(header_manager, "collectionProp", attrib={"name": "HeaderManager.headers"})

    for name, value in kept:
        header_element = ET.SubElement(collection, "elementProp", attrib={
            "name": "",
            "elementType": "Header"
        })
        ET.SubElement(header_element, "stringProp", attrib={"name": "Header.name"}).text = name
        ET.SubElement(header_element, "stringProp", attrib={"name": "Header.value"}).text = value or ""

    return header_manager

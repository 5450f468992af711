"""
services/jmx/samplers.py

Functions that create HTTP Request samplers and attach them to a hashTree.
"""
import xml.etree.ElementTree as ET


# === HTTP Request Sampler ===
def create_http_sampler(name, method, domain, protocol, path, arguments=None, raw_body=None):
    """
    Creates an HTTPSamplerProxy.

    Args:
        name: testname shown in JMeter.
        method: HTTP method (upper-cased).
        domain, protocol, path: request target; path may carry a query string.
        arguments: list of (name, value) pairs sent as form/query arguments.
        raw_body: raw request body; when given, it becomes the single
                  unnamed argument and postBodyRaw is switched on.

    Returns:
        The HTTPSamplerProxy element.
    """
    sampler = ET.Element("HTTPSamplerProxy", attrib={
        "guiclass": "HttpTestSampleGui",
        "testclass": "HTTPSamplerProxy",
        "testname": name,
        "enabled": "true"
    })
    ET.SubElement(sampler, "stringProp", attrib={"name": "HTTPSampler.domain"}).text = domain
    ET.SubElement(sampler, "stringProp", attrib={"name": "HTTPSampler.protocol"}).text = protocol
    ET.SubElement(sampler, "stringProp", attrib={"name": "HTTPSampler.path"}).text = path
    ET.SubElement(sampler, "stringProp", attrib={"name": "HTTPSampler.method"}).text = method.upper()
    ET.SubElement(sampler, "boolProp", attrib={"name": "HTTPSampler.follow_redirects"}).text = "true"
    ET.SubElement(sampler, "boolProp", attrib={"name": "HTTPSampler.use_keepalive"}).text = "true"

    if raw_body:
        ET.SubElement(sampler, "boolProp", attrib={"name": "HTTPSampler.postBodyRaw"}).text = "true"

    arguments_prop = ET.SubElement(sampler, "elementProp", attrib={
        "name": "HTTPsampler.Arguments",
        "elementType": "Arguments"
    })
    collection_prop = ET.SubElement(arguments_prop, "collectionProp", attrib={
        "name": "Arguments.arguments"
    })

    if raw_body:
        _append_argument(collection_prop, "", raw_body, always_encode=False)
    else:
        for arg_name, arg_value in arguments or []:
            _append_argument(collection_prop, arg_name, arg_value, always_encode=True)

    return sampler


def _append_argument(collection_prop, name, value, always_encode):
    arg_element = ET.SubElement(collection_prop, "elementProp", attrib={
        "name": name,
        "elementType": "HTTPArgument"
    })
    ET.SubElement(arg_element, "boolProp", attrib={"name": "HTTPArgument.always_encode"}).text = str(always_encode).lower()
    if name:
        ET.SubElement(arg_element, "stringProp", attrib={"name": "Argument.name"}).text = name
    ET.SubElement(arg_element, "stringProp", attrib={"name": "Argument.value"}).text = value or ""
    ET.SubElement(arg_element, "stringProp", attrib={"name": "Argument.metadata"}).text = "="
    ET.SubElement(arg_element, "boolProp", attrib={"name": "HTTPArgument.use_equals"}).text = "true"
    return arg_element


# === Append Sampler to Parent HashTree ===
def append_sampler(parent, sampler, header_manager=None):
    """
    Appends a sampler and its hashTree to the parent hashTree.
    JMeter expects that every sampler is immediately followed by a hashTree element;
    a HeaderManager goes inside it, followed by its own empty hashTree.

    Returns:
        ET.Element: The sampler's hashTree.
    """
    parent.append(sampler)
    sampler_hash_tree = ET.Element("hashTree")

    if header_manager is not None:
        sampler_hash_tree.append(header_manager)
        sampler_hash_tree.append(ET.Element("hashTree"))

    parent.append(sampler_hash_tree)
    return sampler_hash_tree

# ==============================================
# SOAP Codec
# ==============================================
#
# PURPOSE:
#   Build Metadata API request envelopes from Python values and
#   decode response envelopes back into Python values.
#
# WHY THIS FILE EXISTS:
#   MetadataClient should only decide WHICH call to make and what
#   to do with the result. Namespaces, xsi:type, boolean spelling,
#   repeated elements and fault detection all live here.
#
# ENCODING RULES (Python → XML):
# ------------------------------
#   dict        → child elements, one per key (insertion order)
#   list/tuple  → the element repeated once per item
#   bool        → "true" / "false"
#   str Enum    → its value
#   None        → element omitted
#   TypedValue  → element carrying xsi:type="met:<type>"
#   other       → str(value)
#
# DECODING RULES (XML → Python):
# ------------------------------
#   xsi:nil="true" or empty element  → None
#   leaf element                     → its text
#   element with children           → dict; repeated tags → list
#
# FUNCTIONS:
# ----------
# - build_envelope(session_id, method, args) -> bytes
# - parse_response(content) -> list
#     Raises ServiceFault for a SOAP fault or unparsable XML.
#
# ==============================================

import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from sfmeta.errors import ServiceFault

METADATA_NS = "http://soap.sforce.com/2006/04/metadata"
SOAPENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

PARSE_ERROR = "ParseError"

ET.register_namespace("soapenv", SOAPENV_NS)
ET.register_namespace("xsi", XSI_NS)
ET.register_namespace("met", METADATA_NS)


class TypedValue(NamedTuple):
    """A value sent with an explicit xsi:type, e.g. a metadata record."""
    type_name: str
    value: Any


def _met(name: str) -> str:
    return f"{{{METADATA_NS}}}{name}"


def _local_name(tag: str) -> str:
    return tag.split("}")[-1]


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def append_value(parent: ET.Element, name: str, value: Any) -> None:
    """Append `value` under `parent` as one or more <met:name> elements."""
    if value is None:
        return
    if isinstance(value, (list, tuple)) and not isinstance(value, TypedValue):
        for item in value:
            append_value(parent, name, item)
        return

    elem = ET.SubElement(parent, _met(name))
    if isinstance(value, TypedValue):
        elem.set(f"{{{XSI_NS}}}type", f"met:{_text(value.type_name)}")
        value = value.value

    if isinstance(value, dict):
        for key, child in value.items():
            append_value(elem, key, child)
    else:
        elem.text = _text(value)


def build_envelope(session_id: str, method: str, args: Sequence[Tuple[str, Any]]) -> bytes:
    """
    Build a complete request envelope.

    Args:
        session_id: Session id placed in the SessionHeader
        method: Metadata API operation, e.g. "createMetadata"
        args: Ordered (name, value) pairs for the operation's parameters

    Returns:
        UTF-8 encoded XML document
    """
    envelope = ET.Element(f"{{{SOAPENV_NS}}}Envelope")
    header = ET.SubElement(envelope, f"{{{SOAPENV_NS}}}Header")
    session_header = ET.SubElement(header, _met("SessionHeader"))
    ET.SubElement(session_header, _met("sessionId")).text = session_id

    body = ET.SubElement(envelope, f"{{{SOAPENV_NS}}}Body")
    call = ET.SubElement(body, _met(method))
    for name, value in args:
        append_value(call, name, value)

    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def element_to_value(elem: ET.Element) -> Any:
    """Decode one element into None, text or a dict."""
    if elem.get(f"{{{XSI_NS}}}nil") == "true":
        return None

    children = list(elem)
    if not children:
        return elem.text

    result: Dict[str, Any] = {}
    for child in children:
        tag = _local_name(child.tag)
        value = element_to_value(child)
        if tag in result:
            # Repeated element, convert to list
            if not isinstance(result[tag], list):
                result[tag] = [result[tag]]
            result[tag].append(value)
        else:
            result[tag] = value
    return result


def _find_fault(body: ET.Element) -> Optional[ET.Element]:
    for child in body:
        if _local_name(child.tag) == "Fault":
            return child
    return None


def parse_response(content: bytes) -> List[Any]:
    """
    Decode a response envelope into the list of its <result> values.

    Raises:
        ServiceFault: the body holds a SOAP fault, or the XML is unusable
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ServiceFault(PARSE_ERROR, f"Could not parse response: {e}") from e

    body = root.find(f"{{{SOAPENV_NS}}}Body")
    if body is None:
        raise ServiceFault(PARSE_ERROR, "Response has no SOAP body")

    fault = _find_fault(body)
    if fault is not None:
        code = message = None
        for child in fault:
            tag = _local_name(child.tag)
            if tag == "faultcode":
                code = child.text
            elif tag == "faultstring":
                message = child.text
        raise ServiceFault(code or "UNKNOWN", message or "")

    if len(body) == 0:
        return []
    response = body[0]
    return [element_to_value(r) for r in response if _local_name(r.tag) == "result"]

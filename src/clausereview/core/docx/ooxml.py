"""WordprocessingML namespace helpers, container part names and part parsing"""

from lxml import etree


NAMESPACES = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
}

_W = NAMESPACES["w"]

DOCUMENT_PART = "word/document.xml"
NUMBERING_PART = "word/numbering.xml"


def w(local: str) -> str:
    """Clark-notation tag/attribute name in the main WordprocessingML namespace."""
    return f"{{{_W}}}{local}"


def parse_part(data: bytes):
    """Parse a container part without resolving entities or touching the network.

    Raises lxml.etree.XMLSyntaxError on malformed XML.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    return etree.fromstring(data, parser)


def w_val(node, child: str, default: str | None = None) -> str | None:
    """Return the w:val attribute of the first w:<child> descendant of node, else default."""
    if node is None:
        return default
    found = node.find(f".//w:{child}", namespaces=NAMESPACES)
    if found is None:
        return default
    return found.get(w("val"), default)

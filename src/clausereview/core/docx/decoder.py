"""Structured decoding of .docx containers into paragraphs with styles and list numbering"""

import io
import logging
import re
import zipfile
from datetime import datetime

from lxml import etree

from clausereview.core.docx.numbering import NumberingResolver, NumberingDefinitions, parse_numbering
from clausereview.core.docx.ooxml import DOCUMENT_PART, NAMESPACES, NUMBERING_PART, parse_part, w, w_val
from clausereview.core.errors import DecodeError
from clausereview.core.models import Document, DocumentMetadata, Paragraph, ParagraphStatus


logger = logging.getLogger(__name__)

DIGITS_RE = re.compile(r'\d+')


def resolve_style(style_id: str | None) -> tuple[str, int]:
    """Normalize a paragraph style id to (style label, outline level)."""
    if not style_id:
        return "Normal", 0
    if style_id.lower().startswith("heading"):
        digits = "".join(DIGITS_RE.findall(style_id))
        if digits:
            return f"Heading {int(digits)}", int(digits)
        return style_id, 0
    if style_id.replace(" ", "").lower() == "listparagraph":
        return "List Paragraph", 0
    return style_id, 0


def paragraph_text(p) -> str:
    """Concatenate the w:t text of every run in a paragraph."""
    return "".join(t.text or "" for r in p.iter(w("r")) for t in r.iter(w("t")))


def _read_part(archive: zipfile.ZipFile, name: str) -> bytes | None:
    try:
        return archive.read(name)
    except KeyError:
        return None


def _load_numbering(xml_bytes: bytes | None) -> NumberingDefinitions:
    if xml_bytes is None:
        return NumberingDefinitions()
    try:
        return parse_numbering(xml_bytes)
    except etree.XMLSyntaxError as e:
        raise DecodeError(f"Invalid {NUMBERING_PART}: {e}") from e


def decode_paragraphs(document_xml: bytes, resolver: NumberingResolver) -> list[Paragraph]:
    """Walk the body part in document order and build Paragraph records."""
    try:
        root = parse_part(document_xml)
    except etree.XMLSyntaxError as e:
        raise DecodeError(f"Invalid {DOCUMENT_PART}: {e}") from e

    paragraphs: list[Paragraph] = []
    for position, p in enumerate(root.iter(w("p"))):
        text = paragraph_text(p)
        if not text.strip():
            continue

        ppr = p.find("w:pPr", namespaces=NAMESPACES)
        style, outline_level = resolve_style(w_val(ppr, "pStyle"))

        prefix = ""
        num_pr = ppr.find(".//w:numPr", namespaces=NAMESPACES) if ppr is not None else None
        if num_pr is not None:
            num_id = w_val(num_pr, "numId")
            ilvl = w_val(num_pr, "ilvl", "0")
            if num_id:
                prefix = resolver.prefix_for(num_id, int(ilvl) if ilvl.isdecimal() else 0)

        full_text = f"{prefix}{text}"
        paragraphs.append(Paragraph(
            id=f"docx_para_{position}",
            text=full_text,
            original_text=full_text,
            style=style,
            outline_level=outline_level,
            status=ParagraphStatus.original,
        ))
    return paragraphs


def decode_docx(data: bytes, filename: str) -> Document:
    """Decode a .docx byte string into a Document. Raises DecodeError on any structural failure."""
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise DecodeError(f"Not a packaged document: {e}") from e

    with archive:
        try:
            document_xml = _read_part(archive, DOCUMENT_PART)
            numbering_xml = _read_part(archive, NUMBERING_PART)
        except zipfile.BadZipFile as e:
            raise DecodeError(f"Corrupt container member: {e}") from e
        if document_xml is None:
            raise DecodeError(f"Invalid docx: missing {DOCUMENT_PART}")
        resolver = NumberingResolver(_load_numbering(numbering_xml))
        paragraphs = decode_paragraphs(document_xml, resolver)

    logger.info("Decoded %s: %d paragraphs", filename, len(paragraphs))
    return Document(
        metadata=DocumentMetadata(filename=filename, timestamp=datetime.now()),
        paragraphs=paragraphs,
    )

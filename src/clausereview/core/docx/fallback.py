"""Lenient plain-text extraction used when structured decoding fails"""

import io
import logging
import re
import zipfile
from datetime import datetime

import mammoth

from clausereview.core.models import Document, DocumentMetadata, Paragraph, ParagraphStatus


logger = logging.getLogger(__name__)

FALLBACK_BANNER = "Error parsing document structure. Text extracted via fallback: "
FALLBACK_PARAGRAPH_ID = "fallback_para_0"

TAG_RE = re.compile(r'<[^>]*>')
WS_RE = re.compile(r'\s+')


def extract_text(data: bytes) -> str:
    """Return all plain text from data, markup stripped and whitespace collapsed."""
    if zipfile.is_zipfile(io.BytesIO(data)):
        result = mammoth.extract_raw_text(io.BytesIO(data))
        for message in result.messages:
            logger.debug("mammoth: %s", message.message)
        text = result.value
    else:
        text = TAG_RE.sub(' ', data.decode('utf-8', errors='replace'))
    return WS_RE.sub(' ', text).strip()


def extract_fallback(data: bytes, filename: str, prior: Document | None = None) -> Document | None:
    """Degrade data to a single-paragraph Document; on extraction failure return prior unchanged."""
    try:
        text = extract_text(data)
    except Exception as e:
        logger.error("Fallback extraction failed for %s: %s", filename, e)
        return prior

    logger.warning("Using fallback text extraction for %s", filename)
    return Document(
        metadata=DocumentMetadata(filename=filename, timestamp=datetime.now()),
        paragraphs=[Paragraph(
            id=FALLBACK_PARAGRAPH_ID,
            text=FALLBACK_BANNER + text,
            style="Normal",
            outline_level=0,
            status=ParagraphStatus.original,
        )],
    )

"""Document loading by input format, and paragraph patching"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from clausereview.core.docx.decoder import decode_docx
from clausereview.core.docx.fallback import extract_fallback
from clausereview.core.errors import DecodeError, SnapshotError
from clausereview.core.models import Document, InputFormat, ParagraphStatus


logger = logging.getLogger(__name__)

SUFFIX_FORMATS = {
    '.docx': InputFormat.docx,
    '.json': InputFormat.json,
}


def detect_format(filename: str) -> InputFormat:
    """Map a filename suffix to its InputFormat; unknown suffixes are 'other'."""
    return SUFFIX_FORMATS.get(Path(filename).suffix.lower(), InputFormat.other)


def load_snapshot(data: bytes, filename: str = "snapshot.json") -> Document:
    """Validate a JSON document snapshot. Raises SnapshotError on any problem.

    Only the paragraphs array is required; missing metadata is filled from filename.
    """
    try:
        raw = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Invalid JSON snapshot: {e}") from e
    if not isinstance(raw, dict) or not isinstance(raw.get('paragraphs'), list):
        raise SnapshotError("Invalid JSON structure: missing paragraphs array")
    raw.setdefault('metadata', {"filename": filename})
    try:
        doc = Document.model_validate(raw)
    except ValidationError as e:
        raise SnapshotError(f"Invalid JSON snapshot: {e}") from e

    ids = [p.id for p in doc.paragraphs]
    if len(set(ids)) != len(ids):
        raise SnapshotError("Invalid JSON snapshot: duplicate paragraph ids")
    return doc


def load_document(
    data: bytes,
    filename: str,
    fmt: InputFormat | None = None,
    prior: Document | None = None,
    ) -> Document | None:
    """Load data as a Document, dispatching on fmt (detected from filename when None).

    docx falls back to lenient text extraction on DecodeError; json raises
    SnapshotError and leaves prior to the caller; other goes straight to the
    lenient extractor. The result is None only when fallback fails with no prior.
    """
    fmt = fmt or detect_format(filename)
    logger.info("Loading %s as %s", filename, fmt.value)

    if fmt == InputFormat.docx:
        try:
            return decode_docx(data, filename)
        except DecodeError as e:
            logger.warning("Structured decode failed for %s, falling back: %s", filename, e)
            return extract_fallback(data, filename, prior)
    if fmt == InputFormat.json:
        return load_snapshot(data, filename)
    return extract_fallback(data, filename, prior)


def apply_patch(doc: Document, paragraph_id: str, text: str) -> Document:
    """Return a copy of doc with paragraph_id's text replaced.

    original_text is recorded on the first edit and never overwritten.
    Unknown ids return an unchanged copy.
    """
    patched = doc.model_copy(deep=True)
    for p in patched.paragraphs:
        if p.id == paragraph_id:
            if p.original_text is None:
                p.original_text = p.text
            p.text = text
            p.status = ParagraphStatus.modified
            break
    else:
        logger.warning("Patch target %s not found in %s", paragraph_id, doc.metadata.filename)
    return patched

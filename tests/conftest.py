"""Root test configuration: runtime artifact cleanup and .docx builders"""

import io
import shutil
import zipfile
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["clausereview.db", "test.db"]
_CLEANUP_DIRS = [".clausereview"]

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

CONTENT_TYPES = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Override PartName="/word/document.xml" '
    'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
    '</Types>'
)

ROOT_RELS = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1" '
    'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" '
    'Target="word/document.xml"/>'
    '</Relationships>'
)


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files and staging directories created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


def _para_xml(item) -> str:
    """Build a w:p element from a string or a dict(text=, style=, num=(numId, ilvl))."""
    if isinstance(item, str):
        item = {"text": item}
    ppr = ""
    if item.get("style") or item.get("num"):
        style = f'<w:pStyle w:val="{item["style"]}"/>' if item.get("style") else ""
        num = ""
        if item.get("num"):
            num_id, ilvl = item["num"]
            num = f'<w:numPr><w:ilvl w:val="{ilvl}"/><w:numId w:val="{num_id}"/></w:numPr>'
        ppr = f"<w:pPr>{style}{num}</w:pPr>"
    runs = "".join(
        f'<w:r><w:t xml:space="preserve">{chunk}</w:t></w:r>'
        for chunk in (item["text"] if isinstance(item["text"], list) else [item["text"]])
    )
    return f"<w:p>{ppr}{runs}</w:p>"


def _document_xml(paragraphs) -> str:
    body = "".join(_para_xml(p) for p in paragraphs)
    return f'<?xml version="1.0" encoding="UTF-8"?><w:document xmlns:w="{W_NS}"><w:body>{body}</w:body></w:document>'


def _numbering_xml(abstracts: dict, nums: dict) -> str:
    """abstracts: {abstract_id: [(ilvl, start, fmt, lvl_text), ...]}, nums: {num_id: abstract_id}."""
    parts = []
    for abstract_id, levels in abstracts.items():
        lvls = "".join(
            f'<w:lvl w:ilvl="{ilvl}"><w:start w:val="{start}"/>'
            f'<w:numFmt w:val="{fmt}"/><w:lvlText w:val="{text}"/></w:lvl>'
            for ilvl, start, fmt, text in levels
        )
        parts.append(f'<w:abstractNum w:abstractNumId="{abstract_id}">{lvls}</w:abstractNum>')
    for num_id, abstract_id in nums.items():
        parts.append(f'<w:num w:numId="{num_id}"><w:abstractNumId w:val="{abstract_id}"/></w:num>')
    return f'<?xml version="1.0" encoding="UTF-8"?><w:numbering xmlns:w="{W_NS}">{"".join(parts)}</w:numbering>'


def _build_docx(paragraphs=(), numbering: str | None = None, document_xml: str | None = None,
                include_document: bool = True) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as z:
        z.writestr("[Content_Types].xml", CONTENT_TYPES)
        z.writestr("_rels/.rels", ROOT_RELS)
        if include_document:
            z.writestr("word/document.xml", document_xml if document_xml is not None else _document_xml(paragraphs))
        if numbering is not None:
            z.writestr("word/numbering.xml", numbering)
    return buf.getvalue()


@pytest.fixture(name="make_docx")
def make_docx_fixture():
    """Return a builder producing .docx bytes from paragraph descriptions."""
    return _build_docx


@pytest.fixture(name="make_numbering")
def make_numbering_fixture():
    """Return a builder producing word/numbering.xml text."""
    return _numbering_xml


@pytest.fixture(name="make_document_xml")
def make_document_xml_fixture():
    return _document_xml

"""Unit tests for core/docx/fallback.py"""

from clausereview.core.docx import fallback
from clausereview.core.docx.fallback import FALLBACK_BANNER, extract_fallback, extract_text
from clausereview.core.models import Document, DocumentMetadata, Paragraph


def _prior() -> Document:
    return Document(
        metadata=DocumentMetadata(filename="prior.docx"),
        paragraphs=[Paragraph(id="p0", text="kept")],
    )


def test_extract_text_strips_markup_from_non_zip():
    assert extract_text(b"<p>Hello <b>world</b></p>\n\n<p>again</p>") == "Hello world again"


def test_extract_text_reads_docx(make_docx):
    text = extract_text(make_docx(["Governing law", "England"]))
    assert "Governing law" in text
    assert "England" in text


def test_fallback_builds_single_paragraph():
    doc = extract_fallback(b"<div>Payment within 30 days</div>", "broken.docx")
    assert len(doc.paragraphs) == 1
    p = doc.paragraphs[0]
    assert p.text == FALLBACK_BANNER + "Payment within 30 days"
    assert p.style == "Normal"
    assert p.outline_level == 0
    assert doc.metadata.filename == "broken.docx"


def test_fallback_failure_returns_prior(monkeypatch):
    """If lenient extraction itself errors, the prior document is returned as-is."""
    def _boom(data):
        raise RuntimeError("unreadable")
    monkeypatch.setattr(fallback, "extract_text", _boom)
    prior = _prior()
    assert extract_fallback(b"x", "a.docx", prior) is prior


def test_fallback_failure_without_prior_returns_none(monkeypatch):
    monkeypatch.setattr(fallback, "extract_text", lambda data: (_ for _ in ()).throw(OSError("bad")))
    assert extract_fallback(b"x", "a.docx") is None

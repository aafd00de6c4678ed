"""Document and paragraph persistence: upsert, paragraph replacement, lookup, patching"""

from datetime import datetime

from sqlmodel import Session, select

from clausereview.core.ingest import apply_patch
from clausereview.core.models import Document, DocumentMetadata, Paragraph, StagedDocument
from clausereview.crud.models import DocumentRecord, FindingRecord, ParagraphRecord


def get_by_filename(session: Session, filename: str) -> DocumentRecord | None:
    """Return the DocumentRecord with the given filename, or None if not found."""
    return session.exec(select(DocumentRecord).where(DocumentRecord.filename == filename)).one_or_none()


def get_all_documents(session: Session) -> list[DocumentRecord]:
    """Return all documents ordered by filename."""
    return list(session.exec(select(DocumentRecord).order_by(DocumentRecord.filename)).all())


def get_paragraphs(session: Session, document_id) -> list[ParagraphRecord]:
    """Return a document's paragraphs in reading order."""
    return list(session.exec(
        select(ParagraphRecord)
        .where(ParagraphRecord.document_id == document_id)
        .order_by(ParagraphRecord.position)
    ).all())


def get_paragraph(session: Session, document_id, key: str) -> ParagraphRecord | None:
    return session.exec(
        select(ParagraphRecord)
        .where(ParagraphRecord.document_id == document_id)
        .where(ParagraphRecord.key == key)
    ).one_or_none()


def _replace_paragraphs(session: Session, doc_id, paragraphs: list[Paragraph]) -> None:
    """Delete a document's paragraphs and findings, then insert the new paragraphs."""
    for row in session.exec(select(FindingRecord).where(FindingRecord.document_id == doc_id)).all():
        session.delete(row)
    for row in session.exec(select(ParagraphRecord).where(ParagraphRecord.document_id == doc_id)).all():
        session.delete(row)
    session.flush()

    for position, p in enumerate(paragraphs):
        session.add(ParagraphRecord(
            document_id=doc_id,
            key=p.id,
            position=position,
            text=p.text,
            original_text=p.original_text,
            style=p.style,
            outline_level=p.outline_level,
            status=p.status,
        ))
    session.flush()


def commit_doc(
    session: Session,
    staged: StagedDocument,
    committed_at: datetime | None = None,
    ) -> tuple[DocumentRecord, str]:
    """Upsert a staged document by filename.

    Returns (record, status) where status is 'created', 'updated', or 'unchanged'.
    An update replaces all paragraphs and drops the document's findings.
    Flushes but does not commit; caller controls the transaction.
    """
    record = get_by_filename(session, staged.filename)

    if record:
        if record.hash == staged.hash:
            return record, 'unchanged'
        record.format = staged.format
        record.hash = staged.hash
        record.ingested_at = staged.document.metadata.timestamp
        record.updated_at = datetime.now()
        record.committed_at = committed_at
        session.add(record)
        session.flush()
        _replace_paragraphs(session, record.id, staged.document.paragraphs)
        return record, 'updated'

    record = DocumentRecord(
        filename=staged.filename,
        format=staged.format,
        hash=staged.hash,
        ingested_at=staged.document.metadata.timestamp,
        committed_at=committed_at,
    )
    session.add(record)
    session.flush()
    _replace_paragraphs(session, record.id, staged.document.paragraphs)
    return record, 'created'


def to_document(session: Session, record: DocumentRecord) -> Document:
    """Rebuild the Document snapshot for a stored record."""
    return Document(
        metadata=DocumentMetadata(filename=record.filename, timestamp=record.ingested_at),
        paragraphs=[
            Paragraph(
                id=row.key,
                text=row.text,
                original_text=row.original_text,
                style=row.style,
                outline_level=row.outline_level,
                status=row.status,
            )
            for row in get_paragraphs(session, record.id)
        ],
    )


def patch_paragraph(session: Session, record: DocumentRecord, key: str, text: str) -> ParagraphRecord | None:
    """Apply an edit to a stored paragraph through the snapshot patch rule. Flushes only.

    Returns the updated row, or None when the document has no paragraph with that key.
    """
    row = get_paragraph(session, record.id, key)
    if row is None:
        return None
    patched = apply_patch(to_document(session, record), key, text)
    p = next(p for p in patched.paragraphs if p.id == key)
    row.text = p.text
    row.original_text = p.original_text
    row.status = p.status
    session.add(row)
    session.flush()
    return row

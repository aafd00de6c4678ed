"""Finding persistence and the accept/reject review actions"""

from uuid import UUID

from sqlmodel import Session, select

from clausereview.core.models import Finding, FindingStatus
from clausereview.crud.documents import patch_paragraph
from clausereview.crud.models import DocumentRecord, FindingRecord, ParagraphRecord


def save_findings(session: Session, record: DocumentRecord, findings: list[Finding]) -> list[FindingRecord]:
    """Persist findings for a document. Flushes but does not commit."""
    rows = [
        FindingRecord(document_id=record.id, position=position, **f.model_dump())
        for position, f in enumerate(findings)
    ]
    session.add_all(rows)
    session.flush()
    return rows


def list_findings(
    session: Session,
    document_id: UUID,
    status: FindingStatus | None = None,
    ) -> list[FindingRecord]:
    """Return a document's findings in creation order, optionally filtered by status."""
    stmt = select(FindingRecord).where(FindingRecord.document_id == document_id)
    if status is not None:
        stmt = stmt.where(FindingRecord.status == status)
    return list(session.exec(stmt.order_by(FindingRecord.created_at, FindingRecord.position)).all())


def get_finding(session: Session, finding_id: UUID) -> FindingRecord | None:
    return session.get(FindingRecord, finding_id)


def _require_open(finding: FindingRecord) -> None:
    if finding.status == FindingStatus.resolved:
        raise ValueError(f"Finding {finding.id} is already resolved")


def accept_finding(
    session: Session,
    finding: FindingRecord,
    text: str | None = None,
    ) -> ParagraphRecord | None:
    """Apply the suggested (or edited) text to the target paragraph and resolve the finding.

    Returns the patched paragraph, or None when the target paragraph no longer exists.
    Raises ValueError if the finding is already resolved.
    """
    _require_open(finding)
    record = session.get(DocumentRecord, finding.document_id)
    row = patch_paragraph(session, record, finding.target_id, finding.suggested_text if text is None else text)
    finding.status = FindingStatus.resolved
    session.add(finding)
    session.flush()
    return row


def reject_finding(session: Session, finding: FindingRecord) -> FindingRecord:
    """Resolve a finding without touching the document. Raises ValueError if already resolved."""
    _require_open(finding)
    finding.status = FindingStatus.resolved
    session.add(finding)
    session.flush()
    return finding

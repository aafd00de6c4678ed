"""Pipeline step functions: ingest, commit, review and export orchestration"""

import json
import logging
from datetime import datetime
from pathlib import Path

from sqlmodel import Session

from clausereview.core.ingest import detect_format, load_document
from clausereview.core.models import Finding, InputFormat, StagedDocument
from clausereview.core.response import parse_findings
from clausereview.core.utils.hashing import sha256
from clausereview.core.utils.slug import slugify
from clausereview.crud.documents import commit_doc, get_by_filename, to_document
from clausereview.crud.findings import save_findings


logger = logging.getLogger(__name__)

DOCUMENT_EXTENSIONS = {'.docx', '.json'}


def discover_files(path: Path) -> list[Path]:
    """Return sorted .docx/.json files under path, or [path] if a single file of any type."""
    if path.is_file():
        return [path]
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix.lower() in DOCUMENT_EXTENSIONS)


def run_ingest(
    path: str,
    staging_dir: Path,
    fmt: InputFormat | None = None,
    ) -> list[tuple[Path, Path]]:
    """Decode path and write StagedDocument JSON to staging_dir. Returns (source_path, staging_file) pairs."""
    staging_dir.mkdir(parents=True, exist_ok=True)
    results = []
    for p in discover_files(Path(path)):
        try:
            data = p.read_bytes()
            file_fmt = fmt or detect_format(p.name)
            doc = load_document(data, p.name, file_fmt)
            if doc is None:
                raise ValueError("no text could be extracted")
            staged = StagedDocument(filename=p.name, format=file_fmt, hash=sha256(data), document=doc)
            out_file = staging_dir / f"{slugify(p.name)}.json"
            out_file.write_text(staged.model_dump_json(indent=2), encoding='utf-8')
            results.append((p, out_file))
        except Exception as e:
            raise RuntimeError(f"Failed to ingest {p}: {e}") from e
    return results


def run_commit(
    engine,
    staging_dir: Path,
    ) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Read staged documents and commit them to the database.

    Returns (counts, changes) where changes is a list of (status, filename) for
    created/updated docs. Returns ({}, []) when staging_dir is empty.
    """
    files = sorted(staging_dir.glob('*.json')) if staging_dir.exists() else []
    if not files:
        return {}, []

    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for f in files:
            staged = StagedDocument.model_validate_json(f.read_text(encoding='utf-8'))
            record, status = commit_doc(session, staged, committed_at)
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, record.filename))
        session.commit()
    logger.info("Committed %d staged document(s)", len(files))
    return counts, changes


def run_review(
    engine,
    response_path: Path,
    filename: str,
    output_dir: Path | None = None,
    ) -> tuple[list[Finding], Path | None]:
    """Parse a generation response, store its findings against filename, optionally export JSON.

    Raises ValueError if filename has not been committed.
    """
    findings = parse_findings(response_path.read_text(encoding='utf-8'))
    with Session(engine) as session:
        record = get_by_filename(session, filename)
        if record is None:
            raise ValueError(f"Document not found: {filename}")
        save_findings(session, record, findings)
        session.commit()

    out_file = None
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        out_file = output_dir / f"{slugify(filename)}.findings.json"
        out_file.write_text(
            json.dumps([f.model_dump(mode='json') for f in findings], indent=2, ensure_ascii=False),
            encoding='utf-8',
        )
    return findings, out_file


def run_export(engine, filename: str, output_dir: Path) -> Path:
    """Write the current paragraph snapshot of a committed document as JSON.

    The file is a valid snapshot input for run_ingest. Raises ValueError if
    filename has not been committed.
    """
    with Session(engine) as session:
        record = get_by_filename(session, filename)
        if record is None:
            raise ValueError(f"Document not found: {filename}")
        doc = to_document(session, record)

    output_dir.mkdir(parents=True, exist_ok=True)
    out_file = output_dir / f"{slugify(filename)}.snapshot.json"
    out_file.write_text(doc.model_dump_json(indent=2), encoding='utf-8')
    logger.info("Exported %s to %s", filename, out_file)
    return out_file

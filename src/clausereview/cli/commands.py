"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional
from uuid import UUID

import typer
from sqlmodel import Session, SQLModel

from clausereview.config import Settings, load_config
from clausereview.core.classifier import load_rules, rank_categories
from clausereview.core.models import FindingStatus, InputFormat
from clausereview.core.pipeline import run_commit, run_export, run_ingest, run_review
from clausereview.core.utils.diff import diff_summary, render_inline, word_diff
from clausereview.crud.database import init_db, make_engine
from clausereview.crud.documents import get_all_documents, get_by_filename
from clausereview.crud.findings import accept_finding, get_finding, list_findings, reject_finding


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def _echo_diff(original: str, proposed: str, timeout: float) -> None:
    spans = word_diff(original, proposed, timeout)
    typer.echo(render_inline(spans))
    counts = diff_summary(spans)
    typer.echo(f"{counts['added']} added, {counts['deleted']} deleted, {counts['unchanged']} unchanged (chars)")


def _finding_id(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        _fail(f"Invalid finding id: {value}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def ingest_cmd(
    path: Annotated[str, typer.Argument(help="Document file or directory to decode")],
    fmt: Annotated[Optional[InputFormat], typer.Option("--format", help="Input format; detected from suffix if omitted")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    ):
    """Decode documents into paragraph snapshots in the staging directory."""
    settings = _settings(overrides={"staging_dir": staging})
    staging_dir = Path(settings.staging_dir)
    try:
        results = run_ingest(path, staging_dir, fmt)
    except RuntimeError as e:
        _fail(str(e))
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Ingested {len(results)} document(s) to {staging_dir}/")


def commit_cmd(
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    ):
    """Upsert staged documents to the database."""
    settings = _settings(overrides={"staging_dir": staging})
    engine = _engine(settings)
    try:
        counts, changes = run_commit(engine, Path(settings.staging_dir))
    except Exception as e:
        _fail("Commit failed", e)
    if not counts:
        typer.echo("Nothing staged. Run 'clausereview ingest <path>' first.")
        raise typer.Exit(1)
    for status, filename in changes:
        typer.echo(f"  {status}: {filename}")
    typer.echo(
        f"Commit complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )


def list_cmd():
    """List committed documents with paragraph and open finding counts."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        docs = get_all_documents(session)
        if not docs:
            typer.echo("No documents found in database.")
            raise typer.Exit(1)
        for d in docs:
            open_count = len(list_findings(session, d.id, FindingStatus.open))
            typer.echo(f"{d.filename}\t{d.format.value}\t{len(d.paragraphs)} paragraphs\t{open_count} open findings")


def review_cmd(
    response: Annotated[Path, typer.Argument(help="Raw generation response text file")],
    document: Annotated[str, typer.Option("--document", help="Filename of the committed document")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory for findings JSON")] = None,
    ):
    """Parse a generation response into findings and store them for a document."""
    settings = _settings(overrides={"output_dir": out})
    engine = _engine(settings)
    try:
        findings, out_file = run_review(engine, response, document, Path(settings.output_dir))
    except (OSError, ValueError) as e:
        _fail("Review failed", e)
    for f in findings:
        typer.echo(f"  [{f.risk_level.value}] {f.target_id}: {f.issue_type}")
    typer.echo(f"Stored {len(findings)} finding(s); wrote {out_file}")


def export_cmd(
    document: Annotated[str, typer.Argument(help="Filename of the committed document")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory for the snapshot JSON")] = None,
    ):
    """Export a committed document's current paragraphs as a JSON snapshot."""
    settings = _settings(overrides={"output_dir": out})
    engine = _engine(settings)
    try:
        out_file = run_export(engine, document, Path(settings.output_dir))
    except (OSError, ValueError) as e:
        _fail("Export failed", e)
    typer.echo(f"Wrote {out_file}")


def findings_cmd(
    document: Annotated[str, typer.Argument(help="Filename of the committed document")],
    status: Annotated[Optional[FindingStatus], typer.Option("--status", help="Filter by status")] = None,
    ):
    """List stored findings for a document."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        record = get_by_filename(session, document)
        if record is None:
            _fail(f"Document not found: {document}")
        rows = list_findings(session, record.id, status)
        if not rows:
            typer.echo("No findings.")
            raise typer.Exit(0)
        for row in rows:
            typer.echo(f"{row.id}\t{row.status.value}\t{row.risk_level.value}\t{row.target_id}\t{row.issue_type}")


def show_cmd(
    finding_id: Annotated[str, typer.Argument(help="Finding id")],
    text: Annotated[Optional[str], typer.Option("--text", help="Edited text to preview instead of the suggestion")] = None,
    ):
    """Show a finding and a word-level diff of its suggested (or edited) rewrite."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        finding = get_finding(session, _finding_id(finding_id))
        if finding is None:
            _fail(f"Finding not found: {finding_id}")
        typer.echo(f"[{finding.risk_level.value}] {finding.target_id}: {finding.issue_type} ({finding.status.value})")
        typer.echo(finding.reasoning)
        typer.echo("")
        _echo_diff(finding.original_text, finding.suggested_text if text is None else text, settings.diff_timeout)


def accept_cmd(
    finding_id: Annotated[str, typer.Argument(help="Finding id")],
    text: Annotated[Optional[str], typer.Option("--text", help="Edited text to apply instead of the suggestion")] = None,
    ):
    """Accept a finding: apply its (or the edited) text to the target paragraph."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        finding = get_finding(session, _finding_id(finding_id))
        if finding is None:
            _fail(f"Finding not found: {finding_id}")
        try:
            row = accept_finding(session, finding, text)
        except ValueError as e:
            _fail(str(e))
        session.commit()
        if row is None:
            typer.echo(f"Resolved; target paragraph {finding.target_id} no longer exists.")
        else:
            typer.echo(f"Applied to {row.key}.")
            _echo_diff(finding.original_text, row.text, settings.diff_timeout)


def reject_cmd(
    finding_id: Annotated[str, typer.Argument(help="Finding id")],
    ):
    """Reject a finding without changing the document."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        finding = get_finding(session, _finding_id(finding_id))
        if finding is None:
            _fail(f"Finding not found: {finding_id}")
        try:
            reject_finding(session, finding)
        except ValueError as e:
            _fail(str(e))
        session.commit()
    typer.echo("Rejected.")


def rank_cmd(
    text_file: Annotated[Path, typer.Argument(help="Text chunk to classify")],
    rules: Annotated[Path, typer.Option("--rules", help="Rule catalogue (YAML or JSON)")],
    limit: Annotated[Optional[int], typer.Option("--limit", help="Max categories to return")] = None,
    ):
    """Rank rule categories likely relevant to a text chunk."""
    settings = _settings(overrides={"max_categories": limit})
    try:
        catalogue = load_rules(rules)
        text = text_file.read_text(encoding='utf-8')
    except (OSError, ValueError) as e:
        _fail("Could not read input", e)
    ranked = rank_categories(
        text, catalogue, settings.max_categories,
        settings.keyword_weight, settings.synonym_weight, settings.default_category,
    )
    if not ranked:
        typer.echo("No matching categories.")
        raise typer.Exit(0)
    for category in ranked:
        typer.echo(category)


def diff_cmd(
    original: Annotated[Path, typer.Argument(help="File with the original text")],
    proposed: Annotated[Path, typer.Argument(help="File with the proposed text")],
    ):
    """Show a word-level diff between two text files."""
    settings = _settings()
    try:
        a = original.read_text(encoding='utf-8')
        b = proposed.read_text(encoding='utf-8')
    except OSError as e:
        _fail("Could not read input", e)
    _echo_diff(a, b, settings.diff_timeout)

"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from clausereview.core.models import (
    Document, DocumentMetadata, InputFormat, Paragraph, StagedDocument,
)
from clausereview.core.utils.hashing import sha256
from clausereview.crud.documents import commit_doc


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


def _make_staged(texts=("Term", "The term is one year."), filename="msa.docx", source=b"v1") -> StagedDocument:
    return StagedDocument(
        filename=filename,
        format=InputFormat.docx,
        hash=sha256(source),
        document=Document(
            metadata=DocumentMetadata(filename=filename),
            paragraphs=[
                Paragraph(id=f"docx_para_{i}", text=t, original_text=t)
                for i, t in enumerate(texts)
            ],
        ),
    )


@pytest.fixture(name="staged")
def staged_fixture():
    return _make_staged()


@pytest.fixture(name="make_staged")
def make_staged_fixture():
    """Return a builder for StagedDocument values."""
    return _make_staged


@pytest.fixture(name="record")
def record_fixture(session, staged):
    """A committed document with two paragraphs."""
    record, _ = commit_doc(session, staged)
    return record

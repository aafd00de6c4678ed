"""Database table definitions for documents, paragraphs, and review findings"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, Text, String, UniqueConstraint

from clausereview.core.models import FindingStatus, InputFormat, ParagraphStatus, RiskLevel


class DocumentRecord(SQLModel, table=True):
    """An ingested document; replaced wholesale when its source changes"""
    __tablename__ = "documents"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    filename: str = Field(..., sa_column=Column(Text, nullable=False, unique=True))
    format: InputFormat = Field(..., nullable=False)
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    ingested_at: datetime = Field(..., sa_column=Column(DateTime(timezone=False), nullable=False))
    committed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    paragraphs: List["ParagraphRecord"] = Relationship(back_populates="document")
    findings: List["FindingRecord"] = Relationship(back_populates="document")


class ParagraphRecord(SQLModel, table=True):
    """One paragraph of a document in reading order"""
    __tablename__ = "paragraphs"
    __table_args__ = (UniqueConstraint("document_id", "key", name="uq_paragraph_doc_key"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    document_id: UUID = Field(..., foreign_key="documents.id", index=True, nullable=False)
    key: str = Field(..., nullable=False, description="Order-derived paragraph identifier (e.g. docx_para_3)")
    position: int = Field(..., nullable=False)
    text: str = Field(..., sa_column=Column(Text, nullable=False))
    original_text: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    style: str = Field(default="Normal", nullable=False)
    outline_level: int = Field(default=0, nullable=False)
    status: ParagraphStatus = Field(default=ParagraphStatus.original, nullable=False)
    document: Optional[DocumentRecord] = Relationship(back_populates="paragraphs")


class FindingRecord(SQLModel, table=True):
    """A reviewable finding parsed from a generation response"""
    __tablename__ = "findings"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    document_id: UUID = Field(..., foreign_key="documents.id", index=True, nullable=False)
    target_id: str = Field(..., nullable=False, description="Paragraph key the finding refers to")
    position: int = Field(default=0, nullable=False, description="Order within the response it was parsed from")
    issue_type: str = Field(..., sa_column=Column(Text, nullable=False))
    risk_level: RiskLevel = Field(..., nullable=False)
    reasoning: str = Field(..., sa_column=Column(Text, nullable=False))
    suggested_text: str = Field(default="", sa_column=Column(Text, nullable=False))
    original_text: str = Field(default="", sa_column=Column(Text, nullable=False))
    status: FindingStatus = Field(default=FindingStatus.open, nullable=False)
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    document: Optional[DocumentRecord] = Relationship(back_populates="findings")

"""Data models shared by the decode, response-parsing, and diff steps"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ParagraphStatus(str, Enum):
    original = "original"
    modified = "modified"


class RiskLevel(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"


class FindingStatus(str, Enum):
    open = "open"
    resolved = "resolved"


class DiffOp(str, Enum):
    equal = "equal"
    insert = "insert"
    delete = "delete"


class InputFormat(str, Enum):
    """Closed set of document sources accepted by ingest."""
    docx = "docx"
    json = "json"
    other = "other"


class Paragraph(BaseModel):
    """One addressable paragraph of a decoded document."""
    id: str
    text: str
    original_text: Optional[str] = None     # None means never edited
    style: str = "Normal"
    outline_level: int = 0                  # 0 = body text
    status: ParagraphStatus = ParagraphStatus.original


class DocumentMetadata(BaseModel):
    filename: str
    timestamp: datetime = Field(default_factory=datetime.now)


class Document(BaseModel):
    """Decoded document: metadata plus ordered paragraphs. Also the JSON snapshot shape."""
    metadata: DocumentMetadata
    paragraphs: list[Paragraph]


class StagedDocument(BaseModel):
    """Staging contract written by ingest, read by commit."""
    filename: str
    format: InputFormat
    hash: str                       # sha256 of the source bytes
    document: Document


class ResponseClauseBlock(BaseModel):
    """One delimited clause block recovered from a generation response."""
    id: str
    sections: dict[str, str] = {}
    parse_error: Optional[str] = None

    @property
    def recovered(self) -> bool:
        return self.parse_error is not None


class Finding(BaseModel):
    """Reviewable record derived from one clause block."""
    target_id: str
    issue_type: str
    risk_level: RiskLevel
    reasoning: str
    suggested_text: str
    original_text: str
    status: FindingStatus = FindingStatus.open


class PlaybookRule(BaseModel):
    """A review rule; only its category and matching vocabulary matter to the prefilter."""
    id: Optional[str] = None
    category: Optional[str] = None
    topic: Optional[str] = None
    signal_keywords: list[str] = []
    synonyms: list[str] = []


class DiffSpan(BaseModel):
    op: DiffOp
    text: str

"""Pydantic models for exam result extraction.

This module defines the data structures used throughout the extraction
pipeline, from the raw uploaded document to the merged per-document result.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class RawDocument(BaseModel):
    """Decoded content of one uploaded exam results file."""
    file_name: str = Field(description="Original file name, e.g. 'Deneme 1.xlsx'")
    content: str = Field(description="Full extracted text of the file")


class TextChunk(BaseModel):
    """An ordered slice of a document's text sent to the model in one call."""
    index: int = Field(description="0-based position of the chunk in the document")
    total: int = Field(description="Total number of chunks in the document")
    text: str = Field(description="Chunk text; always ends on a line boundary")


class TopicResult(BaseModel):
    """How a student answered the question(s) of one topic or learning outcome."""
    topic: str = Field(description="Topic or learning outcome name")
    result: Literal["D", "Y", "B"] = Field(
        description="D = correct, Y = wrong, B = empty"
    )


class SubjectBreakdown(BaseModel):
    """Per-subject answer counts for one student."""
    correct: int = Field(default=0, description="Number of correct answers")
    wrong: int = Field(default=0, description="Number of wrong answers")
    empty: int = Field(default=0, description="Number of unanswered questions")
    net: float = Field(default=0.0, description="Net score for the subject")
    topics: List[TopicResult] = Field(
        default_factory=list,
        description="Topic-level results; empty when the report has no topic detail"
    )


class StudentRecord(BaseModel):
    """Exam result of a single student.

    Subject keys are whatever the model reports ("Türkçe", "Matematik", ...)
    since the subject set depends on the exam type.
    """
    student_name: str = Field(description="Student full name")
    student_number: str = Field(
        default="",
        description="School number; kept as text because sources contain artifacts"
    )
    class_name: str = Field(default="", description="Class label, e.g. '8-A'")
    date: Optional[str] = Field(default=None, description="Exam date as reported, if any")
    total_correct: Optional[int] = Field(default=None, description="Total correct answers")
    total_wrong: Optional[int] = Field(default=None, description="Total wrong answers")
    total_score: float = Field(default=0.0, description="Total exam score")
    total_net: float = Field(default=0.0, description="Total net correct count")
    subjects: Dict[str, SubjectBreakdown] = Field(
        default_factory=dict,
        description="Breakdown per subject name"
    )


class RejectedRecord(BaseModel):
    """A student entry from the model output that failed validation."""
    raw: Any = Field(description="The entry exactly as the model returned it")
    reason: str = Field(description="Why the entry was rejected")


class ExtractionResult(BaseModel):
    """Partial extraction result for one chunk."""
    exam_name: str = Field(default="", description="Exam name; empty if not found")
    students: List[StudentRecord] = Field(default_factory=list)
    rejected: List[RejectedRecord] = Field(default_factory=list)


class AggregateResult(BaseModel):
    """Merged extraction result for a whole document."""
    exam_name: str = Field(description="First exam name found, else the file name stem")
    students: List[StudentRecord] = Field(
        default_factory=list,
        description="Students from all chunks in chunk order, not de-duplicated"
    )
    rejected: List[RejectedRecord] = Field(default_factory=list)
    chunk_count: int = Field(default=0, description="Number of chunks processed")
    failed_chunks: List[int] = Field(
        default_factory=list,
        description="0-based indices of chunks whose processing failed"
    )


class ExtractionRequest(BaseModel):
    """Body of POST /api/extractions."""
    file_name: str = Field(min_length=1, description="Original file name")
    content: str = Field(description="Decoded text content of the file")
    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key; the server key is used when omitted"
    )

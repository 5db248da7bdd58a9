"""
Validate student entries parsed from model output.

Model output is untrusted: every entry is checked field by field and turned
into either a StudentRecord or a RejectedRecord. Missing numeric fields are
coerced to 0 here, not later when results are stored.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from exam_extraction.errors import ModelJSONParseError
from exam_extraction.models.extraction import (
    ExtractionResult,
    RejectedRecord,
    StudentRecord,
    SubjectBreakdown,
    TopicResult,
)
from exam_extraction.utils.normalizers import (
    normalize_answer,
    normalize_count,
    normalize_number,
    normalize_student_number,
    normalize_subject,
    normalize_text,
)

logger = logging.getLogger(__name__)

# Accepted keys per field, in priority order. The Turkish keys match the
# column names the dashboard has always stored.
NAME_KEYS = ("name", "studentName", "student_name", "ogrenci_adi", "ad_soyad")
NUMBER_KEYS = ("studentNumber", "student_number", "student_no", "ogrenci_no", "no")
CLASS_KEYS = ("className", "class_name", "class", "sinif")
SCORE_KEYS = ("totalScore", "total_score", "toplam_puan", "puan")
NET_KEYS = ("totalNet", "total_net", "toplam_net")
TOTAL_CORRECT_KEYS = ("totalCorrect", "total_correct", "toplam_dogru")
TOTAL_WRONG_KEYS = ("totalWrong", "total_wrong", "toplam_yanlis")
DATE_KEYS = ("date", "examDate")
EXAM_NAME_KEYS = ("examName", "exam_name", "sinav_adi")

CORRECT_KEYS = ("correct", "dogru", "D")
WRONG_KEYS = ("wrong", "yanlis", "Y")
EMPTY_KEYS = ("empty", "bos", "B")
SUBJECT_NET_KEYS = ("net", "N")
TOPIC_LIST_KEYS = ("topics", "kazanimlar")
TOPIC_NAME_KEYS = ("topic", "konu")
TOPIC_RESULT_KEYS = ("result", "sonuc")


def _first_present(data: Dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _validate_topics(raw_topics: Any) -> List[TopicResult]:
    topics: List[TopicResult] = []
    if not isinstance(raw_topics, list):
        return topics

    for raw_topic in raw_topics:
        if not isinstance(raw_topic, dict):
            logger.warning(f"Skipping malformed topic entry: {raw_topic!r}")
            continue
        name = normalize_text(_first_present(raw_topic, TOPIC_NAME_KEYS))
        result = normalize_answer(_first_present(raw_topic, TOPIC_RESULT_KEYS))
        if not name or result is None:
            logger.warning(f"Skipping malformed topic entry: {raw_topic!r}")
            continue
        topics.append(TopicResult(topic=name, result=result))
    return topics


def _optional_count(value: Any) -> Optional[int]:
    if normalize_number(value) is None:
        return None
    return normalize_count(value)


def _validate_subjects(raw_subjects: Any) -> Dict[str, SubjectBreakdown]:
    subjects: Dict[str, SubjectBreakdown] = {}
    if not isinstance(raw_subjects, dict):
        return subjects

    for raw_name, raw_breakdown in raw_subjects.items():
        name = normalize_subject(str(raw_name))
        if not name or not isinstance(raw_breakdown, dict):
            logger.warning(f"Skipping malformed subject entry: {raw_name!r}")
            continue
        subjects[name] = SubjectBreakdown(
            correct=normalize_count(_first_present(raw_breakdown, CORRECT_KEYS)),
            wrong=normalize_count(_first_present(raw_breakdown, WRONG_KEYS)),
            empty=normalize_count(_first_present(raw_breakdown, EMPTY_KEYS)),
            net=normalize_number(_first_present(raw_breakdown, SUBJECT_NET_KEYS)) or 0.0,
            topics=_validate_topics(_first_present(raw_breakdown, TOPIC_LIST_KEYS)),
        )
    return subjects


def validate_student_record(raw: Any) -> Union[StudentRecord, RejectedRecord]:
    """
    Validate one student entry from the model output.

    Args:
        raw: One element of the "students" array

    Returns:
        StudentRecord when the entry identifies a student, RejectedRecord otherwise
    """
    if not isinstance(raw, dict):
        return RejectedRecord(raw=raw, reason="student entry is not an object")

    name = normalize_text(_first_present(raw, NAME_KEYS))
    number = normalize_student_number(_first_present(raw, NUMBER_KEYS))
    if not name and not number:
        return RejectedRecord(raw=raw, reason="student entry has no name or number")

    return StudentRecord(
        student_name=name,
        student_number=number,
        class_name=normalize_text(_first_present(raw, CLASS_KEYS)),
        date=normalize_text(_first_present(raw, DATE_KEYS)) or None,
        total_correct=_optional_count(_first_present(raw, TOTAL_CORRECT_KEYS)),
        total_wrong=_optional_count(_first_present(raw, TOTAL_WRONG_KEYS)),
        total_score=normalize_number(_first_present(raw, SCORE_KEYS)) or 0.0,
        total_net=normalize_number(_first_present(raw, NET_KEYS)) or 0.0,
        subjects=_validate_subjects(raw.get("subjects")),
    )


def validate_extraction_payload(payload: Any) -> ExtractionResult:
    """
    Turn a parsed model response into an ExtractionResult.

    Args:
        payload: JSON value parsed from the model output

    Returns:
        ExtractionResult with valid students and rejected entries

    Raises:
        ModelJSONParseError: If the payload is not an object with a students list
    """
    if not isinstance(payload, dict):
        raise ModelJSONParseError(
            "The model returned JSON in an unexpected shape (expected an object).",
            raw_text=str(payload),
        )

    raw_students = payload.get("students", [])
    if raw_students is None:
        raw_students = []
    if not isinstance(raw_students, list):
        raise ModelJSONParseError(
            "The model returned JSON in an unexpected shape ('students' is not a list).",
            raw_text=str(payload),
        )

    students: List[StudentRecord] = []
    rejected: List[RejectedRecord] = []
    for raw in raw_students:
        record = validate_student_record(raw)
        if isinstance(record, RejectedRecord):
            logger.warning(f"Rejected student entry: {record.reason}")
            rejected.append(record)
        else:
            students.append(record)

    return ExtractionResult(
        exam_name=normalize_text(_first_present(payload, EXAM_NAME_KEYS)),
        students=students,
        rejected=rejected,
    )

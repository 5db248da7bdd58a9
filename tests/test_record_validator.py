"""Tests for validating student entries from model output."""

import json

import pytest

from exam_extraction.errors import ModelJSONParseError
from exam_extraction.models.extraction import RejectedRecord, StudentRecord
from exam_extraction.services.record_validator import (
    validate_extraction_payload,
    validate_student_record,
)
from exam_extraction.utils.normalizers import (
    normalize_answer,
    normalize_count,
    normalize_number,
    normalize_student_number,
    normalize_subject,
)


class TestNormalizers:

    @pytest.mark.parametrize(
        "value, expected",
        [(12, 12.0), (12.5, 12.5), ("12,5", 12.5), (" 90 ", 90.0), ("-3.25", -3.25)],
    )
    def test_normalize_number(self, value, expected):
        assert normalize_number(value) == expected

    @pytest.mark.parametrize(
        "value", [None, "", "yok", True, float("inf"), float("-inf"), float("nan"), 10 ** 400, "9" * 400]
    )
    def test_normalize_number_unparseable(self, value):
        assert normalize_number(value) is None

    def test_normalize_count(self):
        assert normalize_count("7") == 7
        assert normalize_count(None) == 0
        assert normalize_count(-2) == 0
        assert normalize_count(3.6) == 4

    def test_normalize_count_non_finite_is_zero(self):
        assert normalize_count(float("inf")) == 0
        assert normalize_count(float("nan")) == 0

    @pytest.mark.parametrize(
        "value, expected",
        [("D", "D"), (" y ", "Y"), ("boş", "B"), ("correct", "D"), ("?", None), (1, None)],
    )
    def test_normalize_answer(self, value, expected):
        assert normalize_answer(value) == expected

    def test_normalize_student_number(self):
        assert normalize_student_number(123.0) == "123"
        assert normalize_student_number(" 45a ") == "45a"
        assert normalize_student_number(None) == ""

    def test_normalize_subject(self):
        assert normalize_subject("mat") == "Matematik"
        assert normalize_subject(" Türkçe ") == "Türkçe"
        assert normalize_subject("Sosyal Bilgiler") == "Sosyal Bilgiler"
        assert normalize_subject("  ") == ""


class TestValidateStudentRecord:

    def test_full_camel_case_entry(self):
        record = validate_student_record({
            "name": "Ali Yılmaz",
            "studentNumber": "123",
            "className": "8-A",
            "totalScore": 412.5,
            "totalNet": "62,25",
            "subjects": {
                "Türkçe": {"correct": 18, "wrong": 2, "empty": 0, "net": 17.33},
            },
        })

        assert isinstance(record, StudentRecord)
        assert record.student_name == "Ali Yılmaz"
        assert record.student_number == "123"
        assert record.class_name == "8-A"
        assert record.total_score == 412.5
        assert record.total_net == 62.25
        assert record.subjects["Türkçe"].correct == 18
        assert record.subjects["Türkçe"].net == 17.33

    def test_turkish_keys_and_missing_numbers_default_to_zero(self):
        record = validate_student_record({
            "ogrenci_adi": "Ayşe Kaya",
            "ogrenci_no": 456,
            "sinif": "8-B",
            "subjects": {"mat": {"dogru": 10, "yanlis": "4"}},
        })

        assert isinstance(record, StudentRecord)
        assert record.student_number == "456"
        assert record.total_score == 0.0
        assert record.total_net == 0.0
        assert record.subjects["Matematik"].correct == 10
        assert record.subjects["Matematik"].wrong == 4
        assert record.subjects["Matematik"].empty == 0
        assert record.subjects["Matematik"].net == 0.0

    def test_malformed_subject_is_skipped(self):
        record = validate_student_record({"name": "Ali", "subjects": {"Fen": 12, "Din": {}}})

        assert isinstance(record, StudentRecord)
        assert list(record.subjects) == ["Din Kültürü ve Ahlak Bilgisi"]

    def test_non_object_is_rejected(self):
        record = validate_student_record("Ali,5,90")

        assert isinstance(record, RejectedRecord)
        assert record.raw == "Ali,5,90"

    def test_entry_without_name_or_number_is_rejected(self):
        record = validate_student_record({"totalScore": 90})

        assert isinstance(record, RejectedRecord)
        assert "no name or number" in record.reason

    def test_number_only_entry_is_kept(self):
        record = validate_student_record({"studentNumber": "77"})

        assert isinstance(record, StudentRecord)
        assert record.student_name == ""

    def test_non_finite_numbers_fall_back_to_defaults(self):
        payload = json.loads(
            '{"name": "Ali", "totalScore": 1e999, "totalNet": NaN,'
            ' "subjects": {"Mat": {"correct": 1e999, "wrong": NaN, "net": -1e999}}}'
        )

        record = validate_student_record(payload)

        assert isinstance(record, StudentRecord)
        assert record.total_score == 0.0
        assert record.total_net == 0.0
        assert record.subjects["Matematik"].correct == 0
        assert record.subjects["Matematik"].wrong == 0
        assert record.subjects["Matematik"].net == 0.0

    def test_topics_date_and_totals(self):
        record = validate_student_record({
            "name": "Ali",
            "date": "2024-03-15",
            "totalCorrect": 33,
            "totalWrong": "5",
            "subjects": {
                "Türkçe": {
                    "correct": 1,
                    "wrong": 1,
                    "topics": [
                        {"topic": "Sözcükte Anlam", "result": "D"},
                        {"topic": "Paragraf", "result": "wrong"},
                    ],
                },
            },
        })

        assert record.date == "2024-03-15"
        assert record.total_correct == 33
        assert record.total_wrong == 5
        topics = record.subjects["Türkçe"].topics
        assert [(t.topic, t.result) for t in topics] == [("Sözcükte Anlam", "D"), ("Paragraf", "Y")]

    def test_turkish_topic_keys(self):
        record = validate_student_record({
            "ogrenci_adi": "Ayşe",
            "toplam_dogru": 40,
            "toplam_yanlis": 0,
            "subjects": {
                "mat": {"dogru": 1, "kazanimlar": [{"konu": "Üslü İfadeler", "sonuc": "B"}]},
            },
        })

        assert record.total_correct == 40
        assert record.total_wrong == 0
        assert record.subjects["Matematik"].topics[0].topic == "Üslü İfadeler"
        assert record.subjects["Matematik"].topics[0].result == "B"

    def test_malformed_topics_are_skipped(self):
        record = validate_student_record({
            "name": "Ali",
            "subjects": {
                "Fen": {"topics": ["Kuvvet", {"topic": "Işık", "result": "?"}, {"result": "D"}]},
            },
        })

        assert record.subjects["Fen Bilimleri"].topics == []

    def test_missing_date_and_totals_stay_unset(self):
        record = validate_student_record({"name": "Ali", "totalCorrect": "yok"})

        assert record.date is None
        assert record.total_correct is None
        assert record.total_wrong is None


class TestValidateExtractionPayload:

    def test_valid_and_rejected_entries_are_separated(self):
        result = validate_extraction_payload({
            "examName": " Deneme 1 ",
            "students": [{"name": "Ali"}, 42, {"name": "Ayşe"}],
        })

        assert result.exam_name == "Deneme 1"
        assert [s.student_name for s in result.students] == ["Ali", "Ayşe"]
        assert len(result.rejected) == 1

    def test_missing_exam_name_and_students(self):
        result = validate_extraction_payload({})

        assert result.exam_name == ""
        assert result.students == []

    def test_null_students_is_empty(self):
        assert validate_extraction_payload({"students": None}).students == []

    @pytest.mark.parametrize("payload", [[{"name": "Ali"}], "text", {"students": {"name": "Ali"}}])
    def test_unexpected_shape_raises(self, payload):
        with pytest.raises(ModelJSONParseError):
            validate_extraction_payload(payload)

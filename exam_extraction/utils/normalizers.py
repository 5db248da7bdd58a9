"""Normalize numbers, identifiers and subject names reported by the model."""

import math
import re
from typing import Any, Optional

SUBJECT_MAPPINGS: dict[str, str] = {
    "turkce": "Türkçe",
    "türkçe": "Türkçe",
    "mat": "Matematik",
    "matematik": "Matematik",
    "fen": "Fen Bilimleri",
    "fen bilimleri": "Fen Bilimleri",
    "tarih": "T.C. İnkılap Tarihi ve Atatürkçülük",
    "inkılap": "T.C. İnkılap Tarihi ve Atatürkçülük",
    "inkilap": "T.C. İnkılap Tarihi ve Atatürkçülük",
    "din": "Din Kültürü ve Ahlak Bilgisi",
    "din kültürü": "Din Kültürü ve Ahlak Bilgisi",
    "ing": "İngilizce",
    "ingilizce": "İngilizce",
    "yabancı dil": "İngilizce",
}

_NUMBER_PATTERN = re.compile(r"-?\d+(?:[.,]\d+)?")


def normalize_subject(subject: str) -> str:
    """Map short or ASCII subject names to their display name. Unknown names are kept."""
    if not subject or not subject.strip():
        return ""
    key = subject.strip().lower()
    return SUBJECT_MAPPINGS.get(key, subject.strip())


def normalize_number(value: Any) -> Optional[float]:
    """
    Convert a model-reported number to float.

    Accepts ints, floats and strings such as "12,5" or "  90 ". Returns None
    when nothing numeric can be found, so callers decide the default.
    Infinity, NaN and integers too large for a float also give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            result = float(value)
        except OverflowError:
            return None
    else:
        match = _NUMBER_PATTERN.search(str(value))
        if not match:
            return None
        result = float(match.group().replace(",", "."))
    if not math.isfinite(result):
        return None
    return result


def normalize_count(value: Any) -> int:
    """Convert an answer count to a non-negative int. Missing values become 0."""
    number = normalize_number(value)
    if number is None or number < 0:
        return 0
    return int(round(number))


def normalize_student_number(value: Any) -> str:
    """Student numbers stay text; 123.0 from a spreadsheet becomes '123'."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


ANSWER_MAPPINGS: dict[str, str] = {
    "d": "D",
    "dogru": "D",
    "doğru": "D",
    "correct": "D",
    "y": "Y",
    "yanlis": "Y",
    "yanlış": "Y",
    "wrong": "Y",
    "b": "B",
    "bos": "B",
    "boş": "B",
    "empty": "B",
}


def normalize_answer(value: Any) -> Optional[str]:
    """Map a topic answer ('D', 'yanlış', 'empty', ...) to D/Y/B, or None if unknown."""
    if not isinstance(value, str):
        return None
    return ANSWER_MAPPINGS.get(value.strip().lower())

"""
Prompt templates for exam result extraction.

The prompt asks the model for strict JSON only, with an output example the
model can copy. Source documents are usually Turkish exam reports, so the
rules explain the usual column abbreviations.
"""

EXTRACTION_OUTPUT_EXAMPLE = """{
  "examName": "Deneme Sınavı 1",
  "students": [
    {
      "name": "Ali Yılmaz",
      "studentNumber": "123",
      "className": "8-A",
      "date": "2024-03-15",
      "totalCorrect": 33,
      "totalWrong": 5,
      "totalScore": 412.5,
      "totalNet": 62.25,
      "subjects": {
        "Türkçe": {
          "correct": 18, "wrong": 2, "empty": 0, "net": 17.33,
          "topics": [
            {"topic": "Sözcükte Anlam", "result": "D"},
            {"topic": "Paragraf", "result": "Y"}
          ]
        },
        "Matematik": {"correct": 15, "wrong": 3, "empty": 2, "net": 14.0, "topics": []}
      }
    }
  ]
}"""


def build_extraction_prompt(
    chunk: str,
    file_name: str,
    chunk_index: int,
    total_chunks: int,
) -> str:
    """
    Render the extraction instructions around one chunk of document text.

    Args:
        chunk: Chunk text, embedded verbatim
        file_name: Name of the uploaded file (may contain the exam name)
        chunk_index: 0-based index of this chunk
        total_chunks: Number of chunks in the document

    Returns:
        Prompt string ready to send to the model
    """
    part_note = ""
    if total_chunks > 1:
        part_note = (
            f"\nThis is part {chunk_index + 1} of {total_chunks} of the file. "
            "Extract only the students that appear in this part.\n"
        )

    return f"""You are a data extraction expert. Convert the exam results below into strict JSON.

FILE NAME: {file_name}
{part_note}
RULES:
1. Find EVERY student row in the content and create one object per student.
2. Column names vary (e.g. 'Öğrenci Adı' or 'Ad Soyad'); map them to the fields of the example.
3. Abbreviations: 'D' = correct, 'Y' = wrong, 'B' = empty, 'N' = net.
4. Put each subject (Türkçe, Matematik, Fen, ...) under "subjects" using the subject name as it appears.
5. Numbers must be JSON numbers; convert decimal commas to dots. Use 0 for missing values.
6. "studentNumber" is always a string.
7. "examName" is the exam title if the content shows one, otherwise an empty string.
8. If the content lists topic or learning outcome results (e.g. "Üslü İfadeler: D"), add them to that subject's "topics" with "result" D, Y or B. Otherwise leave "topics" empty.
9. "date" is the exam date (YYYY-MM-DD) if the content shows one, otherwise omit it.
10. Do not invent students or values. Do not summarize.

OUTPUT FORMAT (return ONLY this JSON, no explanations, no Markdown):
{EXTRACTION_OUTPUT_EXAMPLE}

CONTENT:
---
{chunk}
---"""

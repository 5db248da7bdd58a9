"""Split extracted document text into model-sized chunks on line boundaries."""

from typing import List

from exam_extraction.models.extraction import RawDocument, TextChunk

DEFAULT_CHUNK_SIZE = 8000


def split_into_chunks(text: str, max_chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """
    Split text into ordered chunks of at most max_chunk_size characters.

    Lines are never cut. Within a chunk, lines are joined with newlines and
    the chunk carries no trailing newline, so a line of exactly
    max_chunk_size characters fits on its own. A line longer than the budget
    becomes its own chunk, which is then the only kind allowed to exceed it.
    A blank line never forms a chunk by itself; it is kept with a
    neighboring line, and only in that case can a chunk reach
    max_chunk_size + 1 characters.
    A trailing newline ends the last line and is not kept.

    Args:
        text: Full document text
        max_chunk_size: Character budget per chunk (default: 8000)

    Returns:
        List of non-empty chunks in document order. Text that already fits
        is returned unchanged as a single chunk; empty text gives [].
        "\\n".join(chunks) gives back the original lines in order.

    Raises:
        ValueError: If max_chunk_size is not positive
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

    if not text:
        return []

    if len(text) <= max_chunk_size:
        return [text]

    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()

    chunks: List[str] = []
    current: List[str] = []
    current_size = 0

    for line in lines:
        added = len(line) + (1 if current else 0)
        if current_size > 0 and current_size + added > max_chunk_size:
            chunks.append("\n".join(current))
            current = []
            added = len(line)
            current_size = 0
        current.append(line)
        current_size += added

    if current_size > 0:
        chunks.append("\n".join(current))
    elif current:
        # Lone blank line left over after the last flush
        chunks[-1] += "\n"

    return chunks


def chunk_document(
    document: RawDocument, max_chunk_size: int = DEFAULT_CHUNK_SIZE
) -> List[TextChunk]:
    """Split a document into indexed TextChunk objects."""
    texts = split_into_chunks(document.content, max_chunk_size)
    return [
        TextChunk(index=index, total=len(texts), text=text)
        for index, text in enumerate(texts)
    ]

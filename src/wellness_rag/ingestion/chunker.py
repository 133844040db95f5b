"""Text chunking strategies."""

from __future__ import annotations

from langchain_text_splitters import RecursiveCharacterTextSplitter

# Paragraph, line, sentence, word, character.
DEFAULT_SEPARATORS: list[str] = ["\n\n", "\n", ". ", " ", ""]


def split_text(
    text: str,
    chunk_size: int = 512,
    chunk_overlap: int = 100,
    separators: list[str] | None = None,
) -> list[str]:
    """Split *text* into overlapping chunks for embedding.

    Parameters
    ----------
    text:
        Plain text of one document.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of characters shared by consecutive chunks; must be smaller
        than *chunk_size*.
    separators:
        Split boundaries in priority order.  The default ends with ``""``
        so no chunk can exceed *chunk_size*; a list without it lets an
        unsplittable span through as an oversized chunk.

    Returns
    -------
    list[str]
        All chunks of the document, in order; empty for blank input.  Text
        that fits in one chunk comes back unchanged; chunks of a longer text
        have their edge whitespace stripped.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ValueError(f"chunk_overlap must be non-negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ValueError(f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})")

    if not text.strip():
        return []
    if len(text) <= chunk_size:
        return [text]

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=separators if separators is not None else DEFAULT_SEPARATORS,
    )
    return splitter.split_text(text)

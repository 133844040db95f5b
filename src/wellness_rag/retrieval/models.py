"""Domain models for stored chunks and search hits."""

from __future__ import annotations

from pydantic import BaseModel, Field


class StoredRecord(BaseModel):
    """One persisted chunk: its embedding and its text.

    Records are written once during ingestion and never updated.  ``id``
    and ``distance`` are only populated on records returned by a search.

    Attributes
    ----------
    vector:
        Embedding of ``text``; its length must equal the collection dimension.
    text:
        The chunk text used to ground generation.
    id:
        Store-assigned identifier.
    distance:
        Distance to the query vector under the collection metric
        (lower = more similar).
    """

    vector: list[float] = Field(default_factory=list)
    text: str
    id: str | None = None
    distance: float | None = None

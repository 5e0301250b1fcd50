"""Data models for DistrictRAG."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class Document(BaseModel):
    """A source file read once during ingestion.

    Attributes:
        filename: The source file name (e.g., "handbook.pdf").
        text: The full extracted text.
    """

    filename: str
    text: str


class Chunk(BaseModel):
    """A contiguous slice of a document's text.

    Attributes:
        content: The chunk text.
        filename: The source file name.
        chunk_index: Zero-based position within the document.
        total_chunks: Number of chunks the document was split into.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    filename: str
    chunk_index: int
    total_chunks: int

    @property
    def key(self) -> tuple[str, int, str]:
        """Deduplication identity: (filename, chunk_index, content)."""
        return (self.filename, self.chunk_index, self.content)


class EmbeddedChunk(Chunk):
    """A chunk together with its embedding vector."""

    embedding: list[float]

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted corpus record layout."""
        return {
            "content": self.content,
            "filename": self.filename,
            "embedding": list(self.embedding),
            "metadata": {
                "chunkIndex": self.chunk_index,
                "totalChunks": self.total_chunks,
            },
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "EmbeddedChunk":
        metadata = record.get("metadata", {})
        return cls(
            content=record["content"],
            filename=record["filename"],
            embedding=record["embedding"],
            chunk_index=metadata.get("chunkIndex", 0),
            total_chunks=metadata.get("totalChunks", 1),
        )


class ScoredIndex(BaseModel):
    """Similarity score of one corpus vector against a query."""

    index: int
    score: float


class Answer(BaseModel):
    """A synthesized answer plus its (possibly identical) translation."""

    question: str
    answer: str
    translated: str

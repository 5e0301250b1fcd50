from models import Chunk, Document
from .base import BaseTextSplitter

DEFAULT_CHUNK_SIZE = 1000


def chunk_text(text: str, size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Slice text into consecutive, non-overlapping pieces of at most size characters.

    The final piece may be shorter. Joining the result reproduces text exactly;
    no whitespace or encoding normalization is applied.
    """
    if size <= 0:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [text[i : i + size] for i in range(0, len(text), size)]


class FixedSizeTextSplitter(BaseTextSplitter):
    """Splits documents into fixed-size character windows."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def split_text(self, text: str) -> list[str]:
        return chunk_text(text, self.chunk_size)

    def split_document(self, document: Document) -> list[Chunk]:
        pieces = self.split_text(document.text)
        return [
            Chunk(
                content=piece,
                filename=document.filename,
                chunk_index=idx,
                total_chunks=len(pieces),
            )
            for idx, piece in enumerate(pieces)
        ]

    def split_documents(self, documents: list[Document]) -> list[Chunk]:
        chunks = []
        for document in documents:
            chunks.extend(self.split_document(document))
        return chunks

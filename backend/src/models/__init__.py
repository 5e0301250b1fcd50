from .chunk import Answer, Chunk, Document, EmbeddedChunk, ScoredIndex

__all__ = ["Answer", "Chunk", "Document", "EmbeddedChunk", "ScoredIndex"]

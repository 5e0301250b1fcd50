from .base import BaseTextSplitter
from .fixed import DEFAULT_CHUNK_SIZE, FixedSizeTextSplitter, chunk_text

TextSplitter = FixedSizeTextSplitter

__all__ = [
    "BaseTextSplitter",
    "DEFAULT_CHUNK_SIZE",
    "FixedSizeTextSplitter",
    "TextSplitter",
    "chunk_text",
]

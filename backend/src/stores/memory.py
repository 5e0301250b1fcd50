from models import EmbeddedChunk
from .base import BaseCorpusStore


class InMemoryCorpusStore(BaseCorpusStore):
    """Process-local corpus store, mainly for tests and ephemeral runs."""

    def __init__(self):
        self._chunks: list[EmbeddedChunk] = []
        self._keys: set[tuple[str, int, str]] = set()

    async def add(self, chunk: EmbeddedChunk) -> None:
        if chunk.key in self._keys:
            return
        self._chunks.append(chunk)
        self._keys.add(chunk.key)

    async def contains(self, key: tuple[str, int, str]) -> bool:
        return key in self._keys

    async def all(self) -> list[EmbeddedChunk]:
        return list(self._chunks)

    async def count(self) -> int:
        return len(self._chunks)

    async def delete_all(self) -> None:
        self._chunks = []
        self._keys = set()

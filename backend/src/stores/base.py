from abc import ABC, abstractmethod

from models import EmbeddedChunk


class BaseCorpusStore(ABC):
    """Abstract base class for the corpus store.

    Implementations raise ``StoreUnavailable`` when the backing storage
    cannot be read or written.
    """

    @abstractmethod
    async def add(self, chunk: EmbeddedChunk) -> None:
        """Persist one embedded chunk."""
        pass

    @abstractmethod
    async def contains(self, key: tuple[str, int, str]) -> bool:
        """Whether a chunk with this (filename, chunk_index, content) key is stored."""
        pass

    @abstractmethod
    async def all(self) -> list[EmbeddedChunk]:
        """Return every stored chunk in insertion order."""
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    @abstractmethod
    async def delete_all(self) -> None:
        pass

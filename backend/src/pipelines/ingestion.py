import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from adapters import BaseEmbedder
from config import get_config_value, get_ingestion_dir
from errors import DimensionMismatch, EmbeddingUnavailable, StoreUnavailable
from loaders import BaseDocumentLoader, create_loader
from models import Chunk, Document, EmbeddedChunk
from splitters import BaseTextSplitter, TextSplitter
from stores import BaseCorpusStore
from .base import (
    DEFAULT_CHUNK_SIZE,
    create_embedder_from_config,
    create_store_from_config,
)

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Chunks documents, embeds each chunk and stores it once.

    Chunks are identified by (filename, chunk_index, content); a chunk
    already present in the store is skipped, so re-running ingestion over
    the same documents stores nothing new. A chunk that fails to embed or
    persist is logged and skipped without aborting the batch.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        splitter: BaseTextSplitter,
        store: BaseCorpusStore,
        loader: Optional[BaseDocumentLoader] = None,
    ):
        self.embedder = embedder
        self.splitter = splitter
        self.store = store
        self.loader = loader

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        config_path: Path,
        embedder: Optional[BaseEmbedder] = None,
        store: Optional[BaseCorpusStore] = None,
    ) -> "IngestionPipeline":
        """Create pipeline from configuration, reusing an embedder/store if given."""
        chunk_size = get_config_value(config, "ingestion.chunk_size", DEFAULT_CHUNK_SIZE)
        loader_provider = get_config_value(config, "ingestion.loader", "auto")

        return cls(
            embedder=embedder or create_embedder_from_config(config),
            splitter=TextSplitter(chunk_size=chunk_size),
            store=store or create_store_from_config(config, config_path),
            loader=create_loader(loader_provider, get_ingestion_dir(config, config_path)),
        )

    async def _store_chunk(self, chunk: Chunk) -> bool:
        """Embed and persist one chunk. Returns False if it was already stored."""
        if await self.store.contains(chunk.key):
            logger.debug(
                f"Skipping duplicate chunk: {chunk.filename} #{chunk.chunk_index}"
            )
            return False

        embedding = await self.embedder.aembed(chunk.content)
        if len(embedding) != self.embedder.dimension:
            raise DimensionMismatch(self.embedder.dimension, len(embedding))

        await self.store.add(
            EmbeddedChunk(**chunk.model_dump(), embedding=embedding)
        )
        return True

    async def ingest(self, documents: list[Document]) -> int:
        """Ingest documents and return the number of newly stored chunks."""
        stored = 0
        skipped = 0
        failed = 0

        for document in documents:
            for chunk in self.splitter.split_documents([document]):
                try:
                    if await self._store_chunk(chunk):
                        stored += 1
                    else:
                        skipped += 1
                except (EmbeddingUnavailable, StoreUnavailable, DimensionMismatch) as e:
                    failed += 1
                    logger.error(
                        f"Error embedding or saving chunk {chunk.filename} "
                        f"#{chunk.chunk_index}: {e}"
                    )

        logger.info(
            f"Ingestion finished: {stored} stored, {skipped} skipped, {failed} failed"
        )
        return stored

    async def load_documents(self) -> list[Document]:
        if self.loader is None:
            return []
        try:
            return await asyncio.to_thread(self.loader.load)
        except FileNotFoundError as e:
            logger.warning(f"No documents to ingest: {e}")
            return []

    async def run(self) -> int:
        """Load every document from the configured loader and ingest it."""
        documents = await self.load_documents()
        logger.info(f"Loaded {len(documents)} documents")
        return await self.ingest(documents)

    async def reset(self) -> None:
        logger.info("Clearing corpus store")
        await self.store.delete_all()

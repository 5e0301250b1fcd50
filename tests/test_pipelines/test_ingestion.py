from pathlib import Path

from conftest import MockEmbedder, StaticLoader
from errors import StoreUnavailable
from models import Document, EmbeddedChunk
from pipelines import IngestionPipeline
from splitters import TextSplitter
from stores import InMemoryCorpusStore, JSONLCorpusStore


class WrongDimensionEmbedder(MockEmbedder):
    def embed(self, text: str) -> list[float]:
        return [1.0, 2.0]


class UnwritableChunkStore(InMemoryCorpusStore):
    """Store whose writes fail for chunks containing a marker."""

    def __init__(self, marker: str):
        super().__init__()
        self.marker = marker

    async def add(self, chunk: EmbeddedChunk) -> None:
        if self.marker in chunk.content:
            raise StoreUnavailable("disk full", {"path": "corpus.jsonl"})
        await super().add(chunk)


class TestIngestionPipeline:
    async def test_two_documents_scenario(
        self,
        ingestion_pipeline: IngestionPipeline,
        memory_store: InMemoryCorpusStore,
        district_documents: list[Document],
    ) -> None:
        stored = await ingestion_pipeline.ingest(district_documents)

        assert stored == 3
        chunks = await memory_store.all()
        assert [(c.filename, c.chunk_index, c.total_chunks) for c in chunks] == [
            ("A.pdf", 0, 2),
            ("A.pdf", 1, 2),
            ("B.pdf", 0, 1),
        ]
        assert all(len(c.embedding) == 8 for c in chunks)

    async def test_reingestion_is_idempotent(
        self,
        ingestion_pipeline: IngestionPipeline,
        memory_store: InMemoryCorpusStore,
        mock_embedder: MockEmbedder,
        district_documents: list[Document],
    ) -> None:
        assert await ingestion_pipeline.ingest(district_documents) == 3
        embed_calls = len(mock_embedder.calls)

        assert await ingestion_pipeline.ingest(district_documents) == 0
        assert await memory_store.count() == 3
        assert len(mock_embedder.calls) == embed_calls

    async def test_changed_chunk_is_stored_alongside_old_one(
        self, ingestion_pipeline: IngestionPipeline, memory_store: InMemoryCorpusStore
    ) -> None:
        await ingestion_pipeline.ingest([Document(filename="A.pdf", text="old text")])
        stored = await ingestion_pipeline.ingest([Document(filename="A.pdf", text="new text")])

        assert stored == 1
        assert await memory_store.count() == 2

    async def test_failed_chunk_does_not_abort_batch(
        self, memory_store: InMemoryCorpusStore
    ) -> None:
        pipeline = IngestionPipeline(
            embedder=MockEmbedder(fail_on="BAD"),
            splitter=TextSplitter(chunk_size=4),
            store=memory_store,
        )

        stored = await pipeline.ingest(
            [Document(filename="doc.txt", text="goodBAD!more"), Document(filename="e.txt", text="fine")]
        )

        assert stored == 3
        assert [c.content for c in await memory_store.all()] == ["good", "more", "fine"]

    async def test_wrong_embedding_dimension_is_not_stored(
        self, memory_store: InMemoryCorpusStore, district_documents: list[Document]
    ) -> None:
        pipeline = IngestionPipeline(
            embedder=WrongDimensionEmbedder(),
            splitter=TextSplitter(),
            store=memory_store,
        )

        assert await pipeline.ingest(district_documents) == 0
        assert await memory_store.count() == 0

    async def test_empty_document_yields_nothing(
        self, ingestion_pipeline: IngestionPipeline
    ) -> None:
        assert await ingestion_pipeline.ingest([Document(filename="empty.pdf", text="")]) == 0

    async def test_run_uses_loader(
        self,
        ingestion_pipeline: IngestionPipeline,
        static_loader: StaticLoader,
    ) -> None:
        assert await ingestion_pipeline.run() == 3
        assert static_loader.load_calls == 1

    async def test_run_with_missing_directory_stores_nothing(
        self, tmp_path: Path, mock_embedder: MockEmbedder, memory_store: InMemoryCorpusStore
    ) -> None:
        from loaders import DocumentLoader

        pipeline = IngestionPipeline(
            embedder=mock_embedder,
            splitter=TextSplitter(),
            store=memory_store,
            loader=DocumentLoader(tmp_path / "missing"),
        )

        assert await pipeline.run() == 0

    async def test_reset_clears_store(
        self, ingestion_pipeline: IngestionPipeline, memory_store: InMemoryCorpusStore
    ) -> None:
        await ingestion_pipeline.run()
        await ingestion_pipeline.reset()
        assert await memory_store.count() == 0
        assert await ingestion_pipeline.run() == 3

    async def test_idempotent_across_store_reloads(
        self, tmp_path: Path, district_documents: list[Document]
    ) -> None:
        path = tmp_path / "corpus.jsonl"
        first = IngestionPipeline(MockEmbedder(), TextSplitter(), JSONLCorpusStore(path))
        second = IngestionPipeline(MockEmbedder(), TextSplitter(), JSONLCorpusStore(path))

        assert await first.ingest(district_documents) == 3
        assert await second.ingest(district_documents) == 0
        assert len(path.read_text().splitlines()) == 3
        assert await JSONLCorpusStore(path).count() == 3

    async def test_second_store_instance_skips_embedding_stored_chunks(
        self, tmp_path: Path, district_documents: list[Document]
    ) -> None:
        path = tmp_path / "corpus.jsonl"
        second_store = JSONLCorpusStore(path)
        await IngestionPipeline(MockEmbedder(), TextSplitter(), JSONLCorpusStore(path)).ingest(
            district_documents
        )
        embedder = MockEmbedder()

        assert await IngestionPipeline(embedder, TextSplitter(), second_store).ingest(
            district_documents
        ) == 0
        assert embedder.calls == []
        assert await second_store.count() == 3

    async def test_persist_failure_does_not_abort_batch(self) -> None:
        store = UnwritableChunkStore(marker="BAD")
        pipeline = IngestionPipeline(
            embedder=MockEmbedder(), splitter=TextSplitter(chunk_size=4), store=store
        )

        stored = await pipeline.ingest([Document(filename="doc.txt", text="goodBAD!more")])

        assert stored == 2
        assert [c.content for c in await store.all()] == ["good", "more"]

    def test_from_config(self, temp_config: Path) -> None:
        from config import load_config

        pipeline = IngestionPipeline.from_config(load_config(temp_config), temp_config)

        assert pipeline.splitter.chunk_size == 500
        assert pipeline.embedder.dimension == 1536
        assert isinstance(pipeline.store, JSONLCorpusStore)
        assert pipeline.store.path == temp_config.parent.resolve() / "storage" / "corpus.jsonl"
        assert pipeline.loader.directory == temp_config.parent.resolve() / "pdfs"

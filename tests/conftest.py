import threading
import time
from pathlib import Path
from typing import Any

import pytest

from adapters.base import BaseEmbedder, BaseLLM
from adapters.translation import EchoTranslator
from loaders import BaseDocumentLoader
from models import Document
from pipelines import AnswerSynthesizer, IngestionPipeline, SynthesizerSettings
from splitters import TextSplitter
from stores import InMemoryCorpusStore, JSONLCorpusStore

LETTERS = "abcdefgh"


class MockEmbedder(BaseEmbedder):
    """Deterministic embedder: one dimension per letter count, offset to stay non-zero."""

    def __init__(self, dimension: int = len(LETTERS), fail_on: str | None = None, **kwargs: Any):
        super().__init__("mock-embedder", **kwargs)
        self._dimension = dimension
        self.fail_on = fail_on
        self.calls: list[str] = []
        self._calls_lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        with self._calls_lock:
            self.calls.append(text)
        if self.fail_on and self.fail_on in text:
            raise RuntimeError("model inference failed")
        vector = [1.0 + text.lower().count(ch) for ch in LETTERS]
        return (vector * (self._dimension // len(LETTERS) + 1))[: self._dimension]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.embed(text) for text in texts]


class MockLLM(BaseLLM):
    """Mock chat model that can fail a fixed number of times first."""

    def __init__(
        self,
        model: str = "mock-llm",
        response: str = "Mock chat response",
        failures: int = 0,
        **kwargs: Any,
    ):
        super().__init__(model, **kwargs)
        self.response = response
        self.failures = failures
        self.calls: list[dict[str, Any]] = []

    def generate(self, prompt: str, **kwargs: Any) -> str:
        return self.chat([{"role": "user", "content": prompt}], **kwargs)

    def chat(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        self.calls.append({"messages": messages, **kwargs})
        if len(self.calls) <= self.failures:
            raise ConnectionError("provider unreachable")
        return self.response


class StaticLoader(BaseDocumentLoader):
    """Loader returning a fixed document list; counts load() calls."""

    def __init__(self, documents: list[Document], delay: float = 0.0):
        self.documents = documents
        self.delay = delay
        self.load_calls = 0

    def load(self) -> list[Document]:
        self.load_calls += 1
        if self.delay:
            time.sleep(self.delay)
        return list(self.documents)

    def load_file(self, file_path: Path | str) -> Document:
        name = Path(file_path).name
        return next(d for d in self.documents if d.filename == name)


@pytest.fixture
def mock_embedder() -> MockEmbedder:
    return MockEmbedder()


@pytest.fixture
def mock_llm() -> MockLLM:
    return MockLLM()


@pytest.fixture
def memory_store() -> InMemoryCorpusStore:
    return InMemoryCorpusStore()


@pytest.fixture
def temp_storage_dir(tmp_path: Path) -> Path:
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return storage_dir


@pytest.fixture
def jsonl_store(temp_storage_dir: Path) -> JSONLCorpusStore:
    return JSONLCorpusStore(temp_storage_dir / "corpus.jsonl")


@pytest.fixture
def district_documents() -> list[Document]:
    return [
        Document(filename="A.pdf", text="a" * 1500),
        Document(filename="B.pdf", text="b" * 800),
    ]


@pytest.fixture
def static_loader(district_documents: list[Document]) -> StaticLoader:
    return StaticLoader(district_documents)


@pytest.fixture
def ingestion_pipeline(
    mock_embedder: MockEmbedder,
    memory_store: InMemoryCorpusStore,
    static_loader: StaticLoader,
) -> IngestionPipeline:
    return IngestionPipeline(
        embedder=mock_embedder,
        splitter=TextSplitter(chunk_size=1000),
        store=memory_store,
        loader=static_loader,
    )


@pytest.fixture
def fast_settings() -> SynthesizerSettings:
    return SynthesizerSettings(retry_delay=0)


@pytest.fixture
def synthesizer(
    mock_embedder: MockEmbedder,
    mock_llm: MockLLM,
    memory_store: InMemoryCorpusStore,
    ingestion_pipeline: IngestionPipeline,
    fast_settings: SynthesizerSettings,
) -> AnswerSynthesizer:
    return AnswerSynthesizer(
        embedder=mock_embedder,
        llm=mock_llm,
        store=memory_store,
        ingestion=ingestion_pipeline,
        translator=EchoTranslator(),
        settings=fast_settings,
    )


@pytest.fixture
def temp_config(tmp_path: Path) -> Path:
    config_content = """
[embedding]
provider = "openai"
model = "text-embedding-3-small"
api_key = "test-key"

[llm]
provider = "openai"
model = "gpt-4o-mini"
api_key = "${TEST_LLM_KEY:-test-key}"

[storage]
provider = "jsonl"
directory = "storage"

[ingestion]
directory = "pdfs"
chunk_size = 500

[retrieval]
top_k = 2
retry_delay = 0
"""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_content)
    return config_path

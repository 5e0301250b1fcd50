import logging
import os
import threading
from typing import Any, Optional

from openai import OpenAI

from adapters.base import BaseEmbedder
from adapters.utils import create_session_with_pooling
from errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

DEFAULT_LOCAL_MODEL = "nomic-ai/nomic-embed-text-v1"
DEFAULT_LOCAL_DIMENSION = 768
DEFAULT_OLLAMA_DIMENSION = 768


class LocalEmbedder(BaseEmbedder):
    """Feature-extraction embedder backed by a local sentence-transformers model.

    The model handle is loaded on first use and reused for the lifetime of
    the embedder. Loading is guarded by a lock so concurrent first callers
    share a single load. Outputs are mean-pooled and normalized to unit
    length by the model's pooling configuration plus ``normalize_embeddings``.
    """

    def __init__(
        self,
        model: str = DEFAULT_LOCAL_MODEL,
        dimension: int = DEFAULT_LOCAL_DIMENSION,
        device: str = "cpu",
        trust_remote_code: bool = True,
        batch_size: int = 32,
        **kwargs: Any,
    ):
        super().__init__(model, **kwargs)
        self._dimension = dimension
        self._device = device
        self._trust_remote_code = trust_remote_code
        self._batch_size = batch_size
        self._model = None
        self._model_lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def _get_model(self):
        if self._model is None:
            with self._model_lock:
                if self._model is None:
                    self._model = self._load_model()
        return self._model

    def _load_model(self):
        try:
            from sentence_transformers import SentenceTransformer

            model = SentenceTransformer(
                self.model,
                device=self._device,
                trust_remote_code=self._trust_remote_code,
            )
        except Exception as e:
            raise EmbeddingUnavailable(
                f"Failed to load embedding model {self.model}: {e}",
                {"model": self.model},
            ) from e
        logger.info(f"Loaded embedding model {self.model} on {self._device}")
        return model

    def embed(self, text: str) -> list[float]:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        vectors = self._get_model().encode(
            texts,
            batch_size=self._batch_size,
            show_progress_bar=False,
            convert_to_numpy=True,
            normalize_embeddings=True,
        )
        return [v.tolist() for v in vectors]


class OpenAIEmbedder(BaseEmbedder):
    """OpenAI embedding provider."""

    def __init__(self, model: str = "text-embedding-3-small", **kwargs: Any):
        api_key = kwargs.pop("api_key", None) or os.environ.get("OPENAI_API_KEY")
        base_url = kwargs.pop("base_url", None) or None
        super().__init__(model, **kwargs)

        self.client = OpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self._dimension: Optional[int] = kwargs.get("dimensions")

    @property
    def dimension(self) -> int:
        return self._dimension or EMBEDDING_DIMENSIONS.get(self.model, 1536)

    def _embedding_params(self, input_data: str | list[str]) -> dict[str, Any]:
        params: dict[str, Any] = {"model": self.model, "input": input_data}
        if self._dimension is not None:
            params["dimensions"] = self._dimension
        return params

    def embed(self, text: str) -> list[float]:
        response = self.client.embeddings.create(**self._embedding_params(text))
        return response.data[0].embedding

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        response = self.client.embeddings.create(**self._embedding_params(texts))
        return [item.embedding for item in response.data]


class OllamaEmbedder(BaseEmbedder):
    """Ollama embedding provider over a pooled HTTP session."""

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        timeout: float = 30,
        **kwargs: Any,
    ):
        super().__init__(model, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._dimension = kwargs.get("dimension", DEFAULT_OLLAMA_DIMENSION)
        self.session = create_session_with_pooling()

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        response = self.session.post(
            f"{self.base_url}/api/embeddings",
            json={"model": self.model, "prompt": text},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()["embedding"]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        response = self.session.post(
            f"{self.base_url}/api/embed",
            json={"model": self.model, "input": texts},
            timeout=self.timeout * len(texts),
        )
        response.raise_for_status()
        return response.json().get("embeddings", [])

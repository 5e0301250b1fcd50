import asyncio
from abc import ABC, abstractmethod
from typing import Any

from errors import EmbeddingUnavailable


class BaseEmbedder(ABC):
    """Abstract base class for embedding providers.

    Providers implement the blocking ``embed``/``embed_batch`` calls; the
    pipelines use ``aembed``, which runs them off the event loop.
    """

    def __init__(self, model: str, **kwargs: Any):
        self.model = model
        self.kwargs = kwargs

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        pass

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        pass

    async def aembed(self, text: str) -> list[float]:
        """Embed text without blocking the loop.

        Raises:
            EmbeddingUnavailable: If the model fails to load or to infer.
        """
        try:
            return await asyncio.to_thread(self.embed, text)
        except EmbeddingUnavailable:
            raise
        except Exception as e:
            raise EmbeddingUnavailable(
                f"Embedding with {self.model} failed: {e}",
                {"model": self.model},
            ) from e


class BaseLLM(ABC):
    """Abstract base class for chat-completion providers."""

    def __init__(self, model: str, **kwargs: Any):
        self.model = model
        self.kwargs = kwargs

    @abstractmethod
    def generate(self, prompt: str, **kwargs: Any) -> str:
        pass

    @abstractmethod
    def chat(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        pass

    async def achat(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        return await asyncio.to_thread(self.chat, messages, **kwargs)


class BaseTranslator(ABC):
    """Abstract base class for answer translation."""

    @abstractmethod
    async def translate(self, text: str, target_language: str) -> str:
        pass

from typing import Any, Type

from adapters.base import BaseEmbedder, BaseLLM, BaseTranslator

_EMBEDDER_REGISTRY: dict[str, Type[BaseEmbedder]] = {}
_LLM_REGISTRY: dict[str, Type[BaseLLM]] = {}
_TRANSLATOR_REGISTRY: dict[str, Type[BaseTranslator]] = {}


def register_embedder(provider: str, cls: Type[BaseEmbedder]) -> None:
    _EMBEDDER_REGISTRY[provider] = cls


def register_llm(provider: str, cls: Type[BaseLLM]) -> None:
    _LLM_REGISTRY[provider] = cls


def register_translator(provider: str, cls: Type[BaseTranslator]) -> None:
    _TRANSLATOR_REGISTRY[provider] = cls


def _create(registry: dict[str, type], kind: str, provider: str, **kwargs: Any) -> Any:
    if provider not in registry:
        available = list(registry.keys())
        raise ValueError(f"Unknown {kind} provider: {provider}. Available: {available}")
    return registry[provider](**kwargs)


def create_embedder(provider: str, **kwargs: Any) -> BaseEmbedder:
    """Create an embedder instance based on provider.

    Raises:
        ValueError: If provider is not registered
    """
    return _create(_EMBEDDER_REGISTRY, "embedder", provider, **kwargs)


def create_llm(provider: str, **kwargs: Any) -> BaseLLM:
    """Create an LLM instance based on provider.

    Raises:
        ValueError: If provider is not registered
    """
    return _create(_LLM_REGISTRY, "LLM", provider, **kwargs)


def create_translator(provider: str, **kwargs: Any) -> BaseTranslator:
    """Create a translator; the "llm" provider needs an ``llm`` keyword argument."""
    return _create(_TRANSLATOR_REGISTRY, "translator", provider, **kwargs)


def list_embedder_providers() -> list[str]:
    return list(_EMBEDDER_REGISTRY.keys())


from adapters.embedding import LocalEmbedder, OllamaEmbedder, OpenAIEmbedder
from adapters.llm import OllamaLLM, OpenAILLM
from adapters.translation import EchoTranslator, LLMTranslator

register_embedder("local", LocalEmbedder)
register_embedder("openai", OpenAIEmbedder)
register_embedder("ollama", OllamaEmbedder)
register_llm("openai", OpenAILLM)
register_llm("ollama", OllamaLLM)
register_translator("echo", EchoTranslator)
register_translator("llm", LLMTranslator)

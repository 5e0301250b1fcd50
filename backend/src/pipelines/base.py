from pathlib import Path
from typing import Any, Callable

from adapters import (
    BaseEmbedder,
    BaseLLM,
    BaseTranslator,
    create_embedder,
    create_llm,
    create_translator,
)
from config import get_config_value, get_storage_dir
from stores import BaseCorpusStore, create_corpus_store

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_TOP_K = 3
DEFAULT_TEMPERATURE = 0.3
DEFAULT_ORGANIZATION = "LAUSD"


def _create_adapter_from_config(
    config: dict[str, Any],
    section: str,
    create_fn: Callable[..., Any],
    defaults: dict[str, str],
) -> Any:
    """Create an adapter (embedder or LLM) from a config section.

    Keys other than ``provider`` and ``model`` are passed through as
    provider-specific keyword arguments.
    """
    section_config = config.get(section, {})
    provider = section_config.get("provider", defaults["provider"])
    model = section_config.get("model", defaults["model"])

    extra_kwargs = {
        k: v for k, v in section_config.items() if k not in ("provider", "model")
    }

    return create_fn(provider, model=model, **extra_kwargs)


def create_embedder_from_config(config: dict[str, Any]) -> BaseEmbedder:
    defaults = {"provider": "local", "model": "nomic-ai/nomic-embed-text-v1"}
    return _create_adapter_from_config(config, "embedding", create_embedder, defaults)


def create_llm_from_config(config: dict[str, Any]) -> BaseLLM:
    defaults = {"provider": "openai", "model": "gpt-4o-mini"}
    return _create_adapter_from_config(config, "llm", create_llm, defaults)


def create_translator_from_config(
    config: dict[str, Any], llm: BaseLLM
) -> BaseTranslator:
    """Create the translator; the "llm" provider reuses the completion model."""
    section_config = dict(config.get("translation", {}))
    provider = section_config.pop("provider", "echo")
    if provider == "llm":
        section_config["llm"] = llm
    return create_translator(provider, **section_config)


def create_store_from_config(
    config: dict[str, Any], config_path: Path
) -> BaseCorpusStore:
    provider = get_config_value(config, "storage.provider", "jsonl")
    filename = get_config_value(config, "storage.filename", "corpus.jsonl")
    return create_corpus_store(
        provider,
        storage_dir=get_storage_dir(config, config_path),
        filename=filename,
    )

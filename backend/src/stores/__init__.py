from pathlib import Path
from typing import Any

from .base import BaseCorpusStore
from .jsonl import JSONLCorpusStore
from .memory import InMemoryCorpusStore

DEFAULT_CORPUS_FILE = "corpus.jsonl"


def create_corpus_store(
    provider: str,
    storage_dir: Path | None = None,
    **kwargs: Any,
) -> BaseCorpusStore:
    """Create a corpus store instance based on provider.

    Args:
        provider: Provider name ("jsonl" or "memory")
        storage_dir: Directory holding the corpus file (jsonl only)
        **kwargs: Additional provider-specific parameters

    Returns:
        BaseCorpusStore instance
    """
    if provider == "jsonl":
        if storage_dir is None:
            raise ValueError("The jsonl corpus store requires a storage directory")
        filename = kwargs.get("filename", DEFAULT_CORPUS_FILE)
        return JSONLCorpusStore(Path(storage_dir) / filename)
    elif provider == "memory":
        return InMemoryCorpusStore()
    else:
        raise ValueError(f"Unknown corpus store provider: {provider}")


__all__ = [
    "BaseCorpusStore",
    "InMemoryCorpusStore",
    "JSONLCorpusStore",
    "create_corpus_store",
]

from pathlib import Path
from typing import Any

from .base import BaseDocumentLoader
from .pdf import SUPPORTED_EXTENSIONS, DirectoryLoader

DocumentLoader = DirectoryLoader


def create_loader(
    provider: str,
    directory: Path | str,
    **kwargs: Any,
) -> BaseDocumentLoader:
    """Create a document loader based on provider.

    Args:
        provider: Provider name ("pdf", "text" or "auto")
        directory: Directory to load documents from
        **kwargs: Additional provider-specific parameters

    Returns:
        BaseDocumentLoader instance
    """
    if provider == "auto":
        return DirectoryLoader(directory, **kwargs)
    elif provider == "pdf":
        return DirectoryLoader(directory, extensions=(".pdf",), **kwargs)
    elif provider == "text":
        return DirectoryLoader(directory, extensions=(".txt",), **kwargs)
    else:
        raise ValueError(f"Unknown loader provider: {provider}")


__all__ = [
    "BaseDocumentLoader",
    "DirectoryLoader",
    "DocumentLoader",
    "SUPPORTED_EXTENSIONS",
    "create_loader",
]

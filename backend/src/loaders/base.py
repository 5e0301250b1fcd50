from abc import ABC, abstractmethod
from pathlib import Path

from models import Document


class BaseDocumentLoader(ABC):
    """Abstract base class for document loaders."""

    @abstractmethod
    def load(self) -> list[Document]:
        """Load all documents from the configured directory."""
        pass

    @abstractmethod
    def load_file(self, file_path: Path | str) -> Document:
        """Load a single file."""
        pass

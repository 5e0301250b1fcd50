import logging
from pathlib import Path

from llama_index.core import SimpleDirectoryReader

from models import Document
from .base import BaseDocumentLoader

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".txt")


class DirectoryLoader(BaseDocumentLoader):
    """Loads PDF and plain-text files from a directory using llama-index.

    llama-index yields one node per PDF page; pages of a file are joined
    back into a single Document so chunk positions are per file.
    """

    def __init__(
        self,
        directory: Path | str,
        extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS,
    ):
        self.directory = Path(directory)
        self.extensions = tuple(ext.lower() for ext in extensions)

    def discover(self) -> list[Path]:
        if not self.directory.exists():
            raise FileNotFoundError(f"Directory not found: {self.directory}")
        return sorted(
            path
            for path in self.directory.iterdir()
            if path.is_file() and path.suffix.lower() in self.extensions
        )

    def load(self) -> list[Document]:
        documents = []
        for file_path in self.discover():
            try:
                documents.append(self.load_file(file_path))
                logger.info(f"Extracted text from {file_path.name}")
            except Exception as e:
                logger.error(f"Error processing {file_path.name}: {e}")
        return documents

    def load_file(self, file_path: Path | str) -> Document:
        file_path = Path(file_path)
        reader = SimpleDirectoryReader(input_files=[str(file_path)])
        pages = reader.load_data()
        text = "\n".join(page.get_content() for page in pages)
        return Document(filename=file_path.name, text=text)

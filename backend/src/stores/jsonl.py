import asyncio
import fcntl
import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from errors import StoreUnavailable
from models import EmbeddedChunk
from .base import BaseCorpusStore

logger = logging.getLogger(__name__)


class JSONLCorpusStore(BaseCorpusStore):
    """Corpus store persisted as one JSON record per line.

    Records use the layout
    ``{content, filename, embedding, metadata: {chunkIndex, totalChunks}}``.
    The corpus is cached in memory together with the byte offset read so far.
    Every operation first picks up lines appended by other instances (the
    server and the ingest CLI may share the file), and appends happen under
    an exclusive lock after that re-read, so a key is written at most once.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()
        self._chunks: list[EmbeddedChunk] = []
        self._keys: set[tuple[str, int, str]] = set()
        self._offset = 0
        if self.path.exists():
            self._merge(*self._guard("read", self._read_locked))

    @contextmanager
    def _locked_file(self, mode: str) -> Iterator[BinaryIO]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path.with_suffix(".lock"), "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                with open(self.path, mode) as f:
                    yield f
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _guard(self, action: str, operation, *args):
        try:
            return operation(*args)
        except (OSError, ValueError, KeyError) as e:
            raise StoreUnavailable(
                f"Failed to {action} corpus store {self.path}: {e}",
                {"path": str(self.path)},
            ) from e

    def _read_new(self, f: BinaryIO) -> tuple[list[EmbeddedChunk], bool]:
        """Parse complete lines written past the cached offset.

        The flag is True when the file shrank below that offset (cleared by
        another instance) and the cache must be rebuilt from these records.
        """
        size = f.seek(0, os.SEEK_END)
        truncated = size < self._offset
        start = 0 if truncated else self._offset
        f.seek(start)
        data = f.read()
        end = data.rfind(b"\n") + 1
        chunks = [
            EmbeddedChunk.from_record(json.loads(line))
            for line in data[:end].splitlines()
            if line.strip()
        ]
        self._offset = start + end
        return chunks, truncated

    def _read_locked(self) -> tuple[list[EmbeddedChunk], bool]:
        if not self.path.exists():
            removed = self._offset > 0
            self._offset = 0
            return [], removed
        with self._locked_file("rb") as f:
            return self._read_new(f)

    def _append_locked(self, chunk: EmbeddedChunk) -> tuple[list[EmbeddedChunk], bool, bool]:
        with self._locked_file("ab+") as f:
            fresh, truncated = self._read_new(f)
            known = set() if truncated else self._keys
            if chunk.key in known or any(c.key == chunk.key for c in fresh):
                return fresh, truncated, False
            f.write((json.dumps(chunk.to_record()) + "\n").encode("utf-8"))
            self._offset = f.tell()
            return fresh, truncated, True

    def _truncate(self) -> None:
        with self._locked_file("wb"):
            pass
        self._offset = 0

    def _merge(self, chunks: list[EmbeddedChunk], truncated: bool = False) -> None:
        if truncated:
            self._chunks = []
            self._keys = set()
        for chunk in chunks:
            if chunk.key in self._keys:
                logger.debug(f"Ignoring duplicate corpus record {chunk.key[:2]}")
                continue
            self._chunks.append(chunk)
            self._keys.add(chunk.key)

    async def _refresh(self) -> None:
        async with self._lock:
            self._merge(*await asyncio.to_thread(self._guard, "read", self._read_locked))

    async def add(self, chunk: EmbeddedChunk) -> None:
        async with self._lock:
            fresh, truncated, appended = await asyncio.to_thread(
                self._guard, "write to", self._append_locked, chunk
            )
            self._merge(fresh, truncated)
            if appended:
                self._merge([chunk])

    async def contains(self, key: tuple[str, int, str]) -> bool:
        if key in self._keys:
            return True
        await self._refresh()
        return key in self._keys

    async def all(self) -> list[EmbeddedChunk]:
        await self._refresh()
        return list(self._chunks)

    async def count(self) -> int:
        await self._refresh()
        return len(self._chunks)

    async def delete_all(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._guard, "clear", self._truncate)
            self._chunks = []
            self._keys = set()
            logger.info(f"Cleared corpus store {self.path}")

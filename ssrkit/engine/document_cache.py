"""
Document Cache - read-once memo of template documents by file path.
"""

from typing import Callable, Dict, Optional
import asyncio
import logging
import os

from ..faults import DocumentReadFault


logger = logging.getLogger(__name__)


def read_text_file(path: str, encoding: str = "utf-8") -> str:
    """Default storage reader."""
    with open(path, encoding=encoding) as f:
        return f.read()


class DocumentCache:
    """
    Memoizes document content by path for the lifetime of the cache.

    A path is read from storage at most once; entries are never replaced.
    Failed reads are not cached, so the next call retries the read.

    Concurrent first reads of the same path may both hit storage. The file
    is immutable for the process lifetime, so both see the same content.

    Args:
        reader: Callable ``(path, encoding) -> str`` doing the storage read
        encoding: Text encoding passed to the reader
    """

    def __init__(
        self,
        reader: Optional[Callable[[str, str], str]] = None,
        encoding: str = "utf-8",
    ):
        self._reader = reader or read_text_file
        self.encoding = encoding
        self._documents: Dict[str, str] = {}

    def get_sync(self, path: str) -> str:
        """
        Return document content, reading storage on first access.

        Blocks the calling thread on a miss. Used by the compiler's
        resource loader, which Jinja2 calls synchronously.

        Raises:
            DocumentReadFault: If the document cannot be read
        """
        key = os.fspath(path)
        document = self._documents.get(key)
        if document is not None:
            return document

        document = self._read(key)
        return self._documents.setdefault(key, document)

    async def get(self, path: str) -> str:
        """
        Return document content without blocking the event loop.

        Raises:
            DocumentReadFault: If the document cannot be read
        """
        key = os.fspath(path)
        document = self._documents.get(key)
        if document is not None:
            return document

        loop = asyncio.get_running_loop()
        document = await loop.run_in_executor(None, self._read, key)
        return self._documents.setdefault(key, document)

    def _read(self, path: str) -> str:
        logger.debug("Reading document %s", path)
        try:
            return self._reader(path, self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Document read failed for %s: %s", path, e)
            raise DocumentReadFault(path, str(e)) from e

    def __contains__(self, path: str) -> bool:
        return os.fspath(path) in self._documents

    def __len__(self) -> int:
        return len(self._documents)

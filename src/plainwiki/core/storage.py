"""Storage abstraction for wiki pages."""

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path

from anyio import to_thread

from plainwiki.core.models import TITLE_PATTERN, Page

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A page could not be read or written."""


class PageNotFoundError(StorageError):
    """The requested page has no backing file."""


class Storage(ABC):
    """Abstract base class for page storage."""

    @abstractmethod
    async def load(self, title: str) -> Page:
        """Load a page by title. Raises StorageError if it cannot be read."""
        ...

    @abstractmethod
    async def save(self, title: str, body: bytes | str) -> Page:
        """Save a page. Creates if doesn't exist, replaces otherwise."""
        ...

    @abstractmethod
    async def list_pages(self) -> list[str]:
        """List all page titles."""
        ...


class FileStorage(Storage):
    """File-based storage implementation.

    Each page lives in its own file named ``<title>.txt`` holding the raw
    body bytes, with no header or encoding metadata. Titles are not
    sanitized here; callers must only pass titles that went through the
    router.

    There is no locking: two concurrent saves of the same title race at
    the filesystem level and the last writer wins.
    """

    FILE_SUFFIX = ".txt"
    FILE_MODE = 0o600
    TITLE_RE = re.compile(rf"^{TITLE_PATTERN}$")

    def __init__(self, base_path: Path):
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_path(self, title: str) -> Path:
        """Get full path for a page."""
        return self.base_path / (title + self.FILE_SUFFIX)

    def _write(self, path: Path, body: bytes) -> None:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(body)

    async def load(self, title: str) -> Page:
        """Load a page by title."""
        path = self._get_path(title)
        try:
            body = await to_thread.run_sync(path.read_bytes)
        except FileNotFoundError as exc:
            raise PageNotFoundError(str(exc)) from exc
        except OSError as exc:
            logger.warning("Failed to read page %s: %s", title, exc)
            raise StorageError(str(exc)) from exc
        return Page(title=title, body=body)

    async def save(self, title: str, body: bytes | str) -> Page:
        """Save a page."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        page = Page(title=title, body=body)
        path = self._get_path(title)
        try:
            await to_thread.run_sync(self._write, path, body)
        except OSError as exc:
            logger.warning("Failed to write page %s: %s", title, exc)
            raise StorageError(str(exc)) from exc
        logger.debug("Saved page %s (%d bytes)", title, len(body))
        return page

    def _scan(self) -> list[str]:
        pages = []
        for path in self.base_path.glob("*" + self.FILE_SUFFIX):
            if self.TITLE_RE.fullmatch(path.stem) and path.is_file():
                pages.append(path.stem)
        return sorted(pages)

    async def list_pages(self) -> list[str]:
        """List all page titles."""
        return await to_thread.run_sync(self._scan)

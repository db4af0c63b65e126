"""Watermark persistence for incremental sync.

Each destination subdirectory remembers the greatest filename copied into it
so far. A later run only copies source files whose names sort after that
watermark. The storage mechanism sits behind ``WatermarkStore`` so traversal
and filtering never deal with files on disk directly.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..exceptions import FilesystemError
from ..utils import WATERMARK_FILE_NAME

logger = logging.getLogger(__name__)

# Filenames are not guaranteed to be valid UTF-8
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class WatermarkStore(ABC):
    """Key-value store mapping a destination directory to its watermark."""

    @abstractmethod
    def read(self, dest_dir: Path) -> str:
        """Return the watermark for a destination directory.

        Args:
            dest_dir: Destination subdirectory

        Returns:
            Stored filename, or an empty string when none is stored
        """

    @abstractmethod
    def write(self, dest_dir: Path, filename: str) -> None:
        """Replace the watermark for a destination directory."""


class SentinelFileStore(WatermarkStore):
    """Stores each watermark in a sentinel file inside its directory.

    The sentinel lives in the destination tree only, so it can never be
    picked up as a source candidate.
    """

    def __init__(self, file_name: str = WATERMARK_FILE_NAME):
        """Initialize sentinel store.

        Args:
            file_name: Name of the sentinel file in each destination directory
        """
        self.file_name = file_name

    def sentinel_path(self, dest_dir: Path) -> Path:
        """Get the sentinel file path for a destination directory."""
        return dest_dir / self.file_name

    def read(self, dest_dir: Path) -> str:
        sentinel = self.sentinel_path(dest_dir)
        try:
            content = sentinel.read_text(encoding=_ENCODING, errors=_ERRORS)
        except FileNotFoundError:
            logger.debug(f"No watermark at {sentinel}")
            return ""
        except OSError as e:
            raise FilesystemError(
                f"Failed to read watermark: {e}", path=sentinel
            ) from e

        watermark = content.strip()
        logger.debug(f"Read watermark {watermark!r} from {sentinel}")
        return watermark

    def write(self, dest_dir: Path, filename: str) -> None:
        sentinel = self.sentinel_path(dest_dir)
        try:
            with open(sentinel, "w", encoding=_ENCODING, errors=_ERRORS) as f:
                f.write(filename)
        except OSError as e:
            raise FilesystemError(
                f"Failed to write watermark: {e}", path=sentinel
            ) from e
        logger.debug(f"Wrote watermark {filename!r} to {sentinel}")


class MemoryWatermarkStore(WatermarkStore):
    """In-memory store, useful for tests and for embedding the engine."""

    def __init__(self, initial: Optional[dict[Path, str]] = None):
        self._watermarks: dict[Path, str] = dict(initial or {})

    def read(self, dest_dir: Path) -> str:
        return self._watermarks.get(dest_dir, "")

    def write(self, dest_dir: Path, filename: str) -> None:
        self._watermarks[dest_dir] = filename

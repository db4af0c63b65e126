"""Directory scanning utilities for sync operations."""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from ..config import SyncConfig
from ..exceptions import FilesystemError
from ..utils import extension_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateFile:
    """A regular source file eligible for watermark comparison."""

    name: str
    """Bare filename, the watermark comparison key"""

    size: int
    """File size in bytes"""

    path: Path
    """Absolute path to the source file"""


@dataclass
class DirectoryListing:
    """Result of filtering a single directory's entries."""

    candidates: list[CandidateFile] = field(default_factory=list)
    """Eligible files, sorted ascending by name"""

    excluded: int = 0
    """Regular files dropped because of their extension"""

    empty: int = 0
    """Regular files dropped because they are zero bytes"""


class DirectoryScanner:
    """Walks a source tree and lists eligible files per directory.

    Examples:
        >>> scanner = DirectoryScanner(config)
        >>> for directory, relative in scanner.walk(config.source_root):
        ...     listing = scanner.list_candidates(directory)
    """

    def __init__(self, config: SyncConfig):
        """Initialize directory scanner.

        Args:
            config: Sync configuration providing the excluded extensions
        """
        self.config = config

    def _sorted_entries(self, directory: Path) -> list[Path]:
        try:
            return sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise FilesystemError(
                f"Failed to list directory: {e}", path=directory
            ) from e

    def walk(self, root: Path) -> Iterator[tuple[Path, str]]:
        """Recursively yield every subdirectory below root.

        Directories are visited depth-first, parents before children,
        siblings in lexical order. The root itself is not yielded and
        symlinked directories are not followed.

        Args:
            root: Source root directory

        Yields:
            Tuples of (absolute directory path, relative path in posix form)

        Raises:
            FilesystemError: If root is not a directory or a listing fails
        """
        if not root.exists():
            raise FilesystemError("Source directory does not exist", path=root)
        if not root.is_dir():
            raise FilesystemError("Source path is not a directory", path=root)

        yield from self._walk(root, root)

    def _walk(self, directory: Path, root: Path) -> Iterator[tuple[Path, str]]:
        for entry in self._sorted_entries(directory):
            if entry.is_symlink() or not entry.is_dir():
                continue
            relative = entry.relative_to(root).as_posix()
            logger.debug(f"Visiting {relative}")
            yield entry, relative
            yield from self._walk(entry, root)

    def _scan_entries(self, directory: Path) -> list[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise FilesystemError(
                f"Failed to list directory: {e}", path=directory
            ) from e

    def list_candidates(self, directory: Path) -> DirectoryListing:
        """List the files of one directory that may be copied.

        Only regular files qualify. Files whose extension is excluded and
        zero-byte files are dropped; the rest are sorted by name. The size
        of a file is only read once its extension has passed.

        Args:
            directory: Source directory to list (not recursive)

        Returns:
            DirectoryListing with sorted candidates and drop counts

        Raises:
            FilesystemError: If the directory or an entry cannot be read
        """
        listing = DirectoryListing()

        for entry in self._scan_entries(directory):
            path = Path(entry.path)
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
            except OSError as e:
                raise FilesystemError(
                    f"Failed to read file type: {e}", path=path
                ) from e

            if self.config.is_excluded(extension_of(entry.name)):
                listing.excluded += 1
                continue

            try:
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                raise FilesystemError(
                    f"Failed to read file metadata: {e}", path=path
                ) from e

            if size == 0:
                listing.empty += 1
                continue

            listing.candidates.append(
                CandidateFile(name=entry.name, size=size, path=path)
            )

        logger.debug(
            f"{directory}: {len(listing.candidates)} candidate(s), "
            f"{listing.excluded} excluded, {listing.empty} empty"
        )
        return listing

"""Filesystem operations used by the sync engine."""

import logging
import shutil
from pathlib import Path

from ..exceptions import FilesystemError
from .scanner import CandidateFile

logger = logging.getLogger(__name__)


class SyncOperations:
    """Copy primitives with uniform error reporting."""

    def ensure_directory(self, directory: Path) -> None:
        """Create a destination directory including missing parents.

        Args:
            directory: Directory to create

        Raises:
            FilesystemError: If the directory cannot be created
        """
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(
                f"Failed to create directory: {e}", path=directory
            ) from e

    def copy_file(self, source: CandidateFile, dest_dir: Path) -> Path:
        """Copy a source file's full content into a destination directory.

        An existing file with the same name is overwritten. Permissions and
        timestamps are not carried over.

        Args:
            source: Candidate file to copy
            dest_dir: Existing destination directory

        Returns:
            Path of the written file

        Raises:
            FilesystemError: If reading the source or writing the copy fails
        """
        destination = dest_dir / source.name
        try:
            shutil.copyfile(source.path, destination)
        except OSError as e:
            raise FilesystemError(
                f"Failed to copy {source.path}: {e}", path=destination
            ) from e

        logger.debug(f"Copied {source.size} bytes to {destination}")
        return destination

"""Core sync engine for executing incremental sync runs."""

import logging
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config import SyncConfig
from ..output import OutputFormatter
from .operations import SyncOperations
from .scanner import CandidateFile, DirectoryScanner
from .state import SentinelFileStore, WatermarkStore

logger = logging.getLogger(__name__)


def select_new_files(
    candidates: Iterable[CandidateFile], watermark: str
) -> list[CandidateFile]:
    """Select the candidates that sort strictly after the watermark.

    An empty watermark selects everything. Names that sort at or below a
    non-empty watermark are never selected, even if they were never copied.

    Args:
        candidates: Candidate files sorted ascending by name
        watermark: Greatest filename copied so far, or ""

    Returns:
        Selected files, preserving the input order
    """
    if not watermark:
        return list(candidates)
    return [c for c in candidates if c.name > watermark]


@dataclass
class DirectoryPlan:
    """What a sync run would do for one source subdirectory."""

    relative_path: str
    """Path of the subdirectory relative to both roots (posix form)"""

    source_dir: Path
    dest_dir: Path

    watermark: str
    """Watermark read before selection ("" if none)"""

    to_copy: list[CandidateFile] = field(default_factory=list)
    """Selected files in ascending name order"""

    up_to_date: int = 0
    """Candidates at or below the watermark"""

    excluded: int = 0
    empty: int = 0

    @property
    def new_watermark(self) -> Optional[str]:
        """Watermark after copying, None if nothing is selected.

        Selected names are ascending, so the last one is the maximum.
        """
        if not self.to_copy:
            return None
        return self.to_copy[-1].name

    @property
    def bytes_to_copy(self) -> int:
        return sum(f.size for f in self.to_copy)

    def to_dict(self) -> dict:
        """Convert plan to dictionary for JSON output."""
        return {
            "directory": self.relative_path,
            "watermark": self.watermark,
            "pending": [f.name for f in self.to_copy],
            "pending_bytes": self.bytes_to_copy,
            "up_to_date": self.up_to_date,
        }


class SyncEngine:
    """Copies newly arrived files from the source tree to the destination.

    Every subdirectory of the source root is processed on its own: list
    the eligible files, keep those that sort after the directory's
    watermark, copy them in order and move the watermark forward.
    """

    def __init__(
        self,
        config: SyncConfig,
        output: Optional[OutputFormatter] = None,
        store: Optional[WatermarkStore] = None,
    ):
        """Initialize sync engine.

        Args:
            config: Sync configuration for this run
            output: Output formatter for per-file lines and summary
            store: Watermark store, defaults to sentinel files
        """
        self.config = config
        self.output = output or OutputFormatter()
        self.store = store or SentinelFileStore()
        self.scanner = DirectoryScanner(config)
        self.operations = SyncOperations()

    def plan_directory(
        self, source_dir: Path, relative_path: str
    ) -> Optional[DirectoryPlan]:
        """Work out which files of one subdirectory need copying.

        Args:
            source_dir: Source subdirectory
            relative_path: Its path relative to the source root

        Returns:
            DirectoryPlan, or None if the directory has no candidates at all.
            In that case the watermark is not read.
        """
        listing = self.scanner.list_candidates(source_dir)
        if not listing.candidates:
            return None

        dest_dir = self.config.dest_root / relative_path
        watermark = self.store.read(dest_dir)
        to_copy = select_new_files(listing.candidates, watermark)

        return DirectoryPlan(
            relative_path=relative_path,
            source_dir=source_dir,
            dest_dir=dest_dir,
            watermark=watermark,
            to_copy=to_copy,
            up_to_date=len(listing.candidates) - len(to_copy),
            excluded=listing.excluded,
            empty=listing.empty,
        )

    def plan(self) -> Iterator[DirectoryPlan]:
        """Yield a plan for every subdirectory that has candidates.

        Read-only: nothing is created or written.
        """
        for source_dir, relative_path in self.scanner.walk(self.config.source_root):
            plan = self.plan_directory(source_dir, relative_path)
            if plan is not None:
                yield plan

    def sync(self, dry_run: bool = False) -> dict:
        """Run one incremental sync over the whole source tree.

        Directories are handled one at a time; the first error aborts the
        run without rolling back what was already copied.

        Args:
            dry_run: If True, report what would be copied without writing

        Returns:
            Dictionary with sync statistics

        Raises:
            FilesystemError: On any failure listing, reading or writing

        Examples:
            >>> engine = SyncEngine(load_config("config.json"))
            >>> stats = engine.sync()
            >>> print(f"Copied {stats['files_copied']} files")
        """
        start_time = time.time()
        logger.debug(
            f"Starting sync {self.config.source_root} -> {self.config.dest_root}"
            f"{' (dry run)' if dry_run else ''}"
        )
        stats = self._create_empty_stats()

        for source_dir, relative_path in self.scanner.walk(self.config.source_root):
            stats["directories_scanned"] += 1
            plan = self.plan_directory(source_dir, relative_path)
            if plan is None:
                logger.debug(f"{relative_path}: no candidates, skipping")
                continue

            stats["up_to_date"] += plan.up_to_date
            stats["excluded"] += plan.excluded
            stats["empty"] += plan.empty
            self._execute_plan(plan, stats, dry_run)

        logger.debug(f"Sync finished in {time.time() - start_time:.2f}s")

        if not self.output.quiet:
            self._display_summary(stats, dry_run)

        return stats

    def _create_empty_stats(self) -> dict:
        """Create an empty statistics dictionary.

        Returns:
            Dictionary with zero counts for all stat categories
        """
        return {
            "directories_scanned": 0,
            "directories_synced": 0,
            "files_copied": 0,
            "bytes_copied": 0,
            "up_to_date": 0,
            "excluded": 0,
            "empty": 0,
        }

    def _execute_plan(self, plan: DirectoryPlan, stats: dict, dry_run: bool) -> None:
        """Copy a directory's selected files and advance its watermark.

        Args:
            plan: Plan for the directory
            stats: Statistics dictionary (modified in place)
            dry_run: If True, only report the copies
        """
        new_watermark = plan.new_watermark
        if new_watermark is None:
            logger.debug(
                f"{plan.relative_path}: up to date (watermark {plan.watermark!r})"
            )
            return

        if dry_run:
            for candidate in plan.to_copy:
                self.output.info(
                    f"Would copy: {candidate.path} -> {plan.dest_dir / candidate.name}"
                )
        else:
            self.operations.ensure_directory(plan.dest_dir)
            for candidate in plan.to_copy:
                destination = self.operations.copy_file(candidate, plan.dest_dir)
                self.output.info(f"Copied: {candidate.path} -> {destination}")

            self.store.write(plan.dest_dir, new_watermark)

        stats["directories_synced"] += 1
        stats["files_copied"] += len(plan.to_copy)
        stats["bytes_copied"] += plan.bytes_to_copy

    def _display_summary(self, stats: dict, dry_run: bool) -> None:
        """Display sync summary.

        Args:
            stats: Statistics dictionary
            dry_run: Whether this was a dry run
        """
        self.output.print("")
        verb = "Would copy" if dry_run else "Copied"

        if stats["files_copied"] > 0:
            self.output.info(
                f"{verb} {stats['files_copied']} file(s) "
                f"({self.output.format_size(stats['bytes_copied'])}) "
                f"in {stats['directories_synced']} directory(ies)"
            )
        else:
            self.output.info("No new files - everything is in sync!")

        if stats["up_to_date"] > 0:
            self.output.info(f"  Already synced: {stats['up_to_date']}")
        if stats["excluded"] > 0:
            self.output.info(f"  Excluded by extension: {stats['excluded']}")
        if stats["empty"] > 0:
            self.output.info(f"  Skipped empty: {stats['empty']}")

"""Sync engine for pyincsync - incremental watermark-based copying."""

from .engine import DirectoryPlan, SyncEngine, select_new_files
from .operations import SyncOperations
from .scanner import CandidateFile, DirectoryListing, DirectoryScanner
from .state import MemoryWatermarkStore, SentinelFileStore, WatermarkStore

__all__ = [
    "SyncEngine",
    "DirectoryPlan",
    "select_new_files",
    "SyncOperations",
    "DirectoryScanner",
    "DirectoryListing",
    "CandidateFile",
    "WatermarkStore",
    "SentinelFileStore",
    "MemoryWatermarkStore",
]

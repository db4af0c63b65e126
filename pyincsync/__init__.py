"""pyincsync - incrementally copy newly arrived files between directory trees."""

from .config import SyncConfig, load_config
from .exceptions import ConfigError, FilesystemError, PyIncSyncError
from .sync import SyncEngine
from .utils import WATERMARK_FILE_NAME, extension_of

__all__ = [
    "SyncConfig",
    "SyncEngine",
    "load_config",
    "PyIncSyncError",
    "ConfigError",
    "FilesystemError",
    "WATERMARK_FILE_NAME",
    "extension_of",
]

"""Configuration loading for pyincsync.

The configuration is a small JSON document naming the source tree, the
destination tree and the file extensions that are never copied:

    {
        "SRC_DIR": "/data/incoming",
        "DIST_DIR": "/data/mirror",
        "EXCLUDED_EXT": [".tmp", ".log"]
    }

It is read once per run and handed to the sync engine as an immutable
``SyncConfig`` value.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Union

from .exceptions import ConfigError
from .utils import normalize_extension

logger = logging.getLogger(__name__)

# Accepted keys for each field, first match wins
_SOURCE_KEYS = ("SRC_DIR", "source")
_DEST_KEYS = ("DIST_DIR", "destination")
_EXCLUDED_KEYS = ("EXCLUDED_EXT", "excluded_extensions")


@dataclass(frozen=True)
class SyncConfig:
    """Immutable settings for a single sync run."""

    source_root: Path
    """Root of the tree new files are picked up from"""

    dest_root: Path
    """Root of the mirrored tree files are copied into"""

    excluded_extensions: frozenset[str] = field(default_factory=frozenset)
    """Case-folded extensions (e.g. ".log") that are never copied"""

    def __post_init__(self) -> None:
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "source_root", Path(self.source_root))
        object.__setattr__(self, "dest_root", Path(self.dest_root))
        object.__setattr__(
            self,
            "excluded_extensions",
            frozenset(normalize_extension(e) for e in self.excluded_extensions),
        )

    @classmethod
    def create(
        cls,
        source_root: Union[str, Path],
        dest_root: Union[str, Path],
        excluded_extensions: Iterable[str] = (),
    ) -> "SyncConfig":
        """Build a config from loosely typed values."""
        return cls(
            source_root=Path(source_root),
            dest_root=Path(dest_root),
            excluded_extensions=frozenset(excluded_extensions),
        )

    def is_excluded(self, extension: str) -> bool:
        """Check whether a file extension is in the excluded set.

        Args:
            extension: Extension as returned by ``extension_of``

        Returns:
            True if files with this extension must not be copied
        """
        return normalize_extension(extension) in self.excluded_extensions

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncConfig":
        """Create SyncConfig from a parsed configuration document.

        Args:
            data: Dictionary with source, destination and excluded extensions

        Returns:
            SyncConfig instance

        Raises:
            ConfigError: If required fields are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object")

        source = _pick(data, _SOURCE_KEYS)
        dest = _pick(data, _DEST_KEYS)

        missing = []
        if source is None:
            missing.append(_SOURCE_KEYS[0])
        if dest is None:
            missing.append(_DEST_KEYS[0])
        if missing:
            raise ConfigError(f"Missing required fields: {', '.join(missing)}")

        for key, value in ((_SOURCE_KEYS[0], source), (_DEST_KEYS[0], dest)):
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"{key} must be a non-empty string")

        excluded = _pick(data, _EXCLUDED_KEYS)
        if excluded is None:
            excluded = []
        if not isinstance(excluded, list) or not all(
            isinstance(e, str) for e in excluded
        ):
            raise ConfigError(f"{_EXCLUDED_KEYS[0]} must be a list of strings")

        return cls.create(
            source_root=_to_path(source),
            dest_root=_to_path(dest),
            excluded_extensions=excluded,
        )


def _pick(data: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _to_path(value: str) -> Path:
    # Path() drops trailing separators on its own
    return Path(os.path.expanduser(value))


def load_config(path: Union[str, Path]) -> SyncConfig:
    """Load and validate a JSON configuration file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated SyncConfig

    Raises:
        ConfigError: If the file cannot be read or is not a valid configuration
    """
    config_path = Path(path)
    logger.debug(f"Loading configuration from {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError("Configuration file not found", path=config_path) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON: {e}", path=config_path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(
            f"Cannot read configuration: {e}", path=config_path
        ) from e

    config = SyncConfig.from_dict(data)
    logger.debug(
        f"Loaded configuration: {config.source_root} -> {config.dest_root}, "
        f"{len(config.excluded_extensions)} excluded extension(s)"
    )
    return config

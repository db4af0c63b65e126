"""Utility functions for pyincsync."""

# =============================================================================
# Constants
# =============================================================================

# Config file looked up in the working directory when none is given
DEFAULT_CONFIG_FILE: str = "config.json"

# Environment variable that overrides the config file location
CONFIG_ENV_VAR: str = "PYINCSYNC_CONFIG"

# Sentinel holding the watermark inside each destination subdirectory
WATERMARK_FILE_NAME: str = "last_copied.txt"


# =============================================================================
# Filename utilities
# =============================================================================


def extension_of(name: str) -> str:
    """Return the extension of a filename, including the leading dot.

    The extension is everything from the final dot to the end of the name.
    A name without a dot has no extension, and a dot file such as
    ``.bashrc`` is its own extension.

    Args:
        name: Bare filename (no directory components)

    Returns:
        Extension string (e.g., ".txt") or an empty string

    Examples:
        >>> extension_of("report.tar.gz")
        '.gz'
        >>> extension_of("README")
        ''
    """
    index = name.rfind(".")
    if index < 0:
        return ""
    return name[index:]


def normalize_extension(extension: str) -> str:
    """Case-fold an extension token for comparison."""
    return extension.lower()


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable size string (e.g., "1.5 MB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"

"""
Input compression detection.

The first input file is checked for a gzip or bzip2 signature when the user
did not force a compression mode.
"""

from __future__ import annotations

import logging
import stat
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

GZIP_SIGNATURE = b"\x1f\x8b"
BZIP2_SIGNATURE = b"BZ"


class CompressionMode(str, Enum):
    """Compression of the input read files."""

    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"

    @classmethod
    def from_flags(cls, *, gzip_compressed: bool, bzip2_compressed: bool) -> CompressionMode | None:
        """Forced mode from the CLI flags, or None when detection should run."""
        if gzip_compressed:
            return cls.GZIP
        if bzip2_compressed:
            return cls.BZIP2
        return None


def _is_regular_file(path: Path) -> bool:
    try:
        return stat.S_ISREG(path.stat().st_mode)
    except OSError:
        return False


def detect_compression(path: str | Path) -> CompressionMode:
    """Classify a file by its first two bytes.

    Only regular files are read; named pipes, devices and missing paths
    are reported as uncompressed so no stream bytes are consumed. The check
    uses its own handle, closed before returning.

    Args:
        path: First input file.

    Returns:
        GZIP for 1F 8B, BZIP2 for "BZ", NONE otherwise (including files
        shorter than two bytes).
    """
    path = Path(path)
    if not _is_regular_file(path):
        logger.debug("Not probing %s for compression (not a regular file)", path)
        return CompressionMode.NONE

    with path.open("rb") as handle:
        magic = handle.read(2)

    if magic == GZIP_SIGNATURE:
        mode = CompressionMode.GZIP
    elif magic == BZIP2_SIGNATURE:
        mode = CompressionMode.BZIP2
    else:
        mode = CompressionMode.NONE

    logger.debug("Detected %s compression for %s", mode.value, path)
    return mode


def resolve_compression(
    inputs: list[str],
    *,
    gzip_compressed: bool,
    bzip2_compressed: bool,
) -> CompressionMode:
    """Forced mode if one was given, otherwise detect from the first input."""
    forced = CompressionMode.from_flags(
        gzip_compressed=gzip_compressed,
        bzip2_compressed=bzip2_compressed,
    )
    if forced is not None:
        return forced
    if not inputs:
        return CompressionMode.NONE
    return detect_compression(inputs[0])

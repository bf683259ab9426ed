"""
Wrappers for the gzip and bzip2 command-line filters.

Both are run as `<tool> -dc <file>` and stream decompressed data to stdout.
"""

from __future__ import annotations

from pathlib import Path

from kraken2_iter.external.base import ExternalTool


class _DecompressFilter(ExternalTool):
    def build_command(self, *, path: str | Path) -> list[str]:
        """Build `<tool> -dc <path>`."""
        exe = str(self.get_executable())
        return [exe, "-dc", str(path)]


class Gzip(_DecompressFilter):
    """Wrapper for gzip decompression."""

    TOOL_NAME = "gzip"
    INSTALL_HINT = "apt install gzip  # or: conda install -c conda-forge gzip"


class Bzip2(_DecompressFilter):
    """Wrapper for bzip2 decompression."""

    TOOL_NAME = "bzip2"
    INSTALL_HINT = "apt install bzip2  # or: conda install -c conda-forge bzip2"

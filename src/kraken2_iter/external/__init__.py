"""
Wrappers for external executables.

Provides Python interfaces to the engine phase executables
and the gzip/bzip2 decompression filters.
"""

from kraken2_iter.external.base import (
    ExternalTool,
    ToolNotFoundError,
    ToolResult,
)
from kraken2_iter.external.compression import Bzip2, Gzip
from kraken2_iter.external.engine import ClassifyPhase, EnginePhase, SearchPhase

__all__ = [
    "Bzip2",
    "ClassifyPhase",
    "EnginePhase",
    "ExternalTool",
    "Gzip",
    "SearchPhase",
    "ToolNotFoundError",
    "ToolResult",
]

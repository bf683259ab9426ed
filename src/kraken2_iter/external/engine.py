"""
Wrappers for the classification engine executables.

The engine runs in two phases that accept the same flag vocabulary:
- SearchPhase: extends the additional hash map from the input reads
- ClassifyPhase: classifies the reads using the hash table and additional map
"""

from __future__ import annotations

from collections.abc import Sequence

from kraken2_iter.external.base import ExternalTool

_ENGINE_HINT = (
    "The engine executables are installed next to kraken2-iter. "
    "Set KRAKEN2_DIR to the directory that contains them."
)


class EnginePhase(ExternalTool):
    """Common command layout of both engine phases: flags, then inputs."""

    INSTALL_HINT = _ENGINE_HINT

    def build_command(
        self,
        *,
        flags: Sequence[str],
        inputs: Sequence[str],
    ) -> list[str]:
        """Build the phase command.

        Args:
            flags: Flag vector from build_flag_vector().
            inputs: Input paths, possibly rewritten to /dev/fd streams.

        Returns:
            Command as list of strings.
        """
        exe = str(self.get_executable())
        return [exe, *flags, *inputs]


class SearchPhase(EnginePhase):
    """Search phase executable (builds the additional hash map)."""

    TOOL_NAME = "kraken2-search"


class ClassifyPhase(EnginePhase):
    """Classify phase executable."""

    TOOL_NAME = "kraken2-classify"

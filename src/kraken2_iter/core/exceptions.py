"""
Custom exceptions with actionable guidance.

Provides specific error types for each failure scenario of a run,
each with helpful suggestions for resolution.
"""

from __future__ import annotations

from pathlib import Path


class Kraken2IterError(Exception):
    """Base exception for kraken2-iter errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigurationError(Kraken2IterError):
    """Raised when command-line options are invalid."""



class InvalidConfidenceError(ConfigurationError):
    """Raised when the confidence threshold is outside [0, 1]."""

    def __init__(self, value: float):
        super().__init__(
            message=f"Confidence threshold {value} is out of valid range [0, 1]",
            suggestion="Set --confidence to a value between 0 and 1.",
        )
        self.value = value


class ConflictingCompressionFlagsError(ConfigurationError):
    """Raised when both forced compression modes are requested."""

    def __init__(self) -> None:
        super().__init__(
            message="--gzip-compressed and --bzip2-compressed are mutually exclusive",
            suggestion=(
                "Pass at most one compression flag, or omit both to let the "
                "compression be detected from the first input file."
            ),
        )


class InvalidPairedInputCountError(ConfigurationError):
    """Raised when paired mode gets zero or an odd number of input files."""

    def __init__(self, count: int):
        super().__init__(
            message=(
                f"Paired mode requires a positive, even number of input files, "
                f"got {count}"
            ),
            suggestion="Give mate files in consecutive pairs: R1 R2 [R1 R2 ...].",
        )
        self.count = count


class NoInputFilesError(ConfigurationError):
    """Raised when no input files are supplied."""

    def __init__(self) -> None:
        super().__init__(
            message="Need to specify input filenames",
            suggestion="Pass one or more FASTA/FASTQ files after the options.",
        )


# =============================================================================
# Database errors
# =============================================================================


class DatabaseError(Kraken2IterError):
    """Base class for database resolution errors."""



class DatabaseNotFoundError(DatabaseError):
    """Raised when no usable database directory can be determined."""

    def __init__(self, selector: str | None, searched: list[Path] | None = None):
        if selector is None:
            message = "No database specified and no default database configured"
            suggestion = "Pass --db or set KRAKEN2_DEFAULT_DB."
        else:
            message = f"Database '{selector}' not found"
            suggestion = "Pass the path of a database directory with --db."
            if searched:
                listed = ", ".join(str(p) for p in searched)
                suggestion = f"{suggestion}\n\nSearched: {listed}"
        super().__init__(message=message, suggestion=suggestion)
        self.selector = selector


class DatabaseFileMissingError(DatabaseError):
    """Raised when a required database file does not exist."""

    def __init__(self, path: Path):
        super().__init__(
            message=f"Database file {path.name} not found: {path}",
            suggestion=(
                "Check that the database was built completely. A usable database "
                "directory contains taxo.k2d, hash.k2d and opts.k2d."
            ),
        )
        self.path = path


# =============================================================================
# Resource errors
# =============================================================================


class ResourceError(Kraken2IterError):
    """Base class for file and process resource errors."""



class MapDeletionError(ResourceError):
    """Raised when a stale additional hash map cannot be deleted."""

    def __init__(self, path: Path, error: OSError):
        super().__init__(
            message=f"Unable to remove additional hash map {path}: {error}",
            suggestion=(
                "Check write permissions on the database directory and that no "
                "other run is using it. Pass --keep-map to reuse the existing map."
            ),
        )
        self.path = path


class MapCreationError(ResourceError):
    """Raised when an empty additional hash map cannot be created."""

    def __init__(self, path: Path, error: OSError):
        super().__init__(
            message=f"Unable to create additional hash map {path}: {error}",
            suggestion="Check write permissions on the database directory.",
        )
        self.path = path


class DecompressionSpawnError(ResourceError):
    """Raised when a decompression filter process cannot be started."""

    def __init__(self, tool_name: str, path: str, error: Exception):
        super().__init__(
            message=f"Unable to start {tool_name} for {path}: {error}",
            suggestion=f"Install {tool_name} and ensure it is in your PATH.",
        )
        self.tool_name = tool_name
        self.path = path


class DescriptorFlagError(ResourceError):
    """Raised when a pipe descriptor cannot be made inheritable."""

    def __init__(self, fd: int, error: OSError):
        super().__init__(
            message=f"Unable to mark descriptor {fd} inheritable: {error}",
        )
        self.fd = fd


class DecompressionFailedError(ResourceError):
    """Raised when a decompression filter exits with an error status."""

    def __init__(self, tool_name: str, path: str, status: int):
        super().__init__(
            message=f"{tool_name} failed to decompress {path} (exit status {status})",
            suggestion=(
                "The input may be truncated or corrupt, or not compressed with "
                f"{tool_name}. Check the file, or pass --gzip-compressed / "
                "--bzip2-compressed to override detection."
            ),
        )
        self.tool_name = tool_name
        self.path = path
        self.status = status


# =============================================================================
# Phase execution errors
# =============================================================================


class PhaseExecutionError(Kraken2IterError):
    """Raised when a phase executable exits with a non-zero status."""

    PHASE_NAME = "phase"

    def __init__(self, return_code: int):
        self.return_code = return_code
        self.signal = -return_code if return_code < 0 else None
        if self.signal is not None:
            detail = f"was killed by signal {self.signal}"
        else:
            detail = f"exited with status {return_code}"
        super().__init__(
            message=f"{self.PHASE_NAME} {detail}",
            suggestion="Run with --verbose to see the phase command line.",
        )

    @property
    def exit_code(self) -> int:
        """Exit status for the orchestrator itself (128 + signal when killed)."""
        if self.signal is not None:
            return 128 + self.signal
        return self.return_code


class SearchPhaseFailedError(PhaseExecutionError):
    """Raised when the search phase fails."""

    PHASE_NAME = "Search phase"


class ClassifyPhaseFailedError(PhaseExecutionError):
    """Raised when the classify phase fails."""

    PHASE_NAME = "Classify phase"

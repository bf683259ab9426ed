"""Unit tests for custom exceptions module."""

from pathlib import Path

import pytest

from kraken2_iter.core.exceptions import (
    ClassifyPhaseFailedError,
    ConfigurationError,
    ConflictingCompressionFlagsError,
    DatabaseError,
    DatabaseFileMissingError,
    DatabaseNotFoundError,
    DecompressionFailedError,
    DecompressionSpawnError,
    DescriptorFlagError,
    InvalidConfidenceError,
    InvalidPairedInputCountError,
    Kraken2IterError,
    MapCreationError,
    MapDeletionError,
    NoInputFilesError,
    PhaseExecutionError,
    ResourceError,
    SearchPhaseFailedError,
)


class TestKraken2IterError:
    """Tests for base exception class."""

    def test_basic_message(self):
        """Should create exception with just message."""
        error = Kraken2IterError("Test error")
        assert error.message == "Test error"
        assert error.suggestion is None
        assert str(error) == "Test error"

    def test_message_with_suggestion(self):
        """Should include suggestion in full message."""
        error = Kraken2IterError("Test error", suggestion="Try this fix")
        assert error.suggestion == "Try this fix"
        assert "Suggestion: Try this fix" in str(error)


class TestConfigurationErrors:
    """Tests for option validation errors."""

    @pytest.mark.parametrize(
        "error",
        [
            InvalidConfidenceError(1.5),
            ConflictingCompressionFlagsError(),
            InvalidPairedInputCountError(3),
            NoInputFilesError(),
        ],
    )
    def test_are_configuration_errors(self, error):
        assert isinstance(error, ConfigurationError)

    def test_confidence_message(self):
        error = InvalidConfidenceError(1.5)
        assert "1.5" in str(error)
        assert error.value == 1.5

    def test_paired_count_message(self):
        error = InvalidPairedInputCountError(3)
        assert "got 3" in error.message
        assert error.count == 3


class TestDatabaseErrors:
    """Tests for database resolution errors."""

    def test_missing_file_names_file(self):
        error = DatabaseFileMissingError(Path("/db/opts.k2d"))
        assert isinstance(error, DatabaseError)
        assert "opts.k2d" in error.message
        assert error.path == Path("/db/opts.k2d")

    def test_not_found_without_selector(self):
        error = DatabaseNotFoundError(None)
        assert "KRAKEN2_DEFAULT_DB" in error.suggestion

    def test_not_found_lists_searched_paths(self):
        error = DatabaseNotFoundError("standard", [Path("/a/standard"), Path("/b/standard")])
        assert "'standard'" in error.message
        assert "/a/standard" in error.suggestion
        assert "/b/standard" in error.suggestion


class TestResourceErrors:
    """Tests for file and process resource errors."""

    def test_map_errors_carry_os_error(self):
        deletion = MapDeletionError(Path("/db/m"), PermissionError("denied"))
        creation = MapCreationError(Path("/db/m"), OSError("read-only"))
        assert "denied" in deletion.message
        assert "read-only" in creation.message
        assert isinstance(deletion, ResourceError)
        assert isinstance(creation, ResourceError)

    def test_spawn_error(self):
        error = DecompressionSpawnError("gzip", "reads.gz", OSError("no such file"))
        assert "gzip" in error.message
        assert "reads.gz" in error.message

    def test_descriptor_error(self):
        error = DescriptorFlagError(7, OSError("bad descriptor"))
        assert error.fd == 7
        assert error.suggestion is None

    def test_decompression_failed(self):
        error = DecompressionFailedError("bzip2", "reads.bz2", 2)
        assert isinstance(error, ResourceError)
        assert error.message == "bzip2 failed to decompress reads.bz2 (exit status 2)"
        assert "--gzip-compressed" in error.suggestion


class TestPhaseErrors:
    """Tests for phase execution errors."""

    def test_exit_status(self):
        error = SearchPhaseFailedError(3)
        assert isinstance(error, PhaseExecutionError)
        assert "Search phase exited with status 3" in error.message
        assert error.signal is None
        assert error.exit_code == 3

    def test_killed_by_signal(self):
        error = ClassifyPhaseFailedError(-9)
        assert "Classify phase was killed by signal 9" in error.message
        assert error.signal == 9
        assert error.exit_code == 137

"""Unit tests for RunConfig and RuntimeEnvironment."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from kraken2_iter.core.exceptions import (
    ConfigurationError,
    ConflictingCompressionFlagsError,
    InvalidConfidenceError,
    InvalidPairedInputCountError,
    NoInputFilesError,
)
from kraken2_iter.models.config import RunConfig, RuntimeEnvironment


class TestRunConfig:
    """Tests for RunConfig validation."""

    def test_default_values(self):
        """Should use sensible defaults."""
        config = RunConfig()
        assert config.threads == 1
        assert config.confidence == 0.0
        assert config.max_iteration == 1
        assert config.keep_map is False
        assert config.output is None

    @pytest.mark.parametrize("value", [0.0, 0.25, 0.5, 1.0])
    def test_confidence_in_range(self, value):
        assert RunConfig(confidence=value).confidence == value

    @pytest.mark.parametrize("value", [-0.1, -1.0, 1.0001, 2.0])
    def test_confidence_out_of_range(self, value):
        """Should raise the typed error, not a ValidationError."""
        with pytest.raises(InvalidConfidenceError):
            RunConfig(confidence=value)

    def test_conflicting_compression(self):
        with pytest.raises(ConflictingCompressionFlagsError):
            RunConfig(gzip_compressed=True, bzip2_compressed=True)

    def test_single_compression_allowed(self):
        assert RunConfig(gzip_compressed=True).gzip_compressed is True
        assert RunConfig(bzip2_compressed=True).bzip2_compressed is True

    @pytest.mark.parametrize(
        ("field", "value"),
        [("threads", 0), ("minimum_base_quality", -1), ("max_iteration", 0)],
    )
    def test_numeric_bounds(self, field, value):
        with pytest.raises(ValidationError):
            RunConfig(**{field: value})

    def test_frozen(self):
        """Should be immutable."""
        config = RunConfig()
        with pytest.raises(ValidationError):
            config.threads = 4

    def test_paths_coerced(self):
        config = RunConfig(report="out.kreport")
        assert config.report == Path("out.kreport")


class TestCheckInputs:
    """Tests for input list validation."""

    def test_no_inputs(self):
        with pytest.raises(NoInputFilesError):
            RunConfig().check_inputs([])

    def test_no_inputs_in_paired_mode(self):
        with pytest.raises(NoInputFilesError):
            RunConfig(paired=True).check_inputs([])

    @pytest.mark.parametrize("count", [1, 3, 5])
    def test_paired_odd_count(self, count):
        inputs = [f"r{i}.fq" for i in range(count)]
        with pytest.raises(InvalidPairedInputCountError):
            RunConfig(paired=True).check_inputs(inputs)

    @pytest.mark.parametrize("count", [2, 4, 6])
    def test_paired_even_count(self, count):
        RunConfig(paired=True).check_inputs([f"r{i}.fq" for i in range(count)])

    def test_unpaired_any_count(self):
        RunConfig().check_inputs(["a.fq", "b.fq", "c.fq"])


class TestRuntimeEnvironment:
    """Tests for environment capture."""

    def test_empty_environment(self):
        env = RuntimeEnvironment.from_environ({})
        assert env.threads_setting is None
        assert env.resolve_threads() == 1
        assert env.default_database is None
        assert env.database_search_path == ()
        assert env.install_dir is None

    def test_reads_variables(self):
        env = RuntimeEnvironment.from_environ({
            "KRAKEN2_NUM_THREADS": "8",
            "KRAKEN2_DEFAULT_DB": "/data/db",
            "KRAKEN2_DB_PATH": "/a::/b",
            "KRAKEN2_DIR": "/opt/kraken2",
        })
        assert env.resolve_threads() == 8
        assert env.default_database == "/data/db"
        assert env.database_search_path == (Path("/a"), Path("/b"))
        assert env.install_dir == Path("/opt/kraken2")

    @pytest.mark.parametrize("value", ["many", "\u00b2", "0", "-2", "1.5"])
    def test_bad_thread_count(self, value):
        env = RuntimeEnvironment.from_environ({"KRAKEN2_NUM_THREADS": value})
        with pytest.raises(ConfigurationError, match="KRAKEN2_NUM_THREADS"):
            env.resolve_threads()

    def test_requested_threads_ignore_environment(self):
        env = RuntimeEnvironment.from_environ({"KRAKEN2_NUM_THREADS": "\u00b2"})
        assert env.resolve_threads(2) == 2

    def test_child_env_prepends_install_dir(self):
        env = RuntimeEnvironment(
            install_dir=Path("/opt/kraken2"),
            inherited={"PATH": "/usr/bin", "HOME": "/home/u"},
        )
        child = env.child_env()
        assert child["PATH"] == "/opt/kraken2:/usr/bin"
        assert child["KRAKEN2_DIR"] == "/opt/kraken2"
        assert child["HOME"] == "/home/u"
        assert env.executable_search_path == "/opt/kraken2:/usr/bin"

    def test_child_env_without_install_dir(self):
        env = RuntimeEnvironment(inherited={"PATH": "/usr/bin"})
        child = env.child_env()
        assert child["PATH"] == "/usr/bin"
        assert "KRAKEN2_DIR" not in child

    def test_child_env_does_not_mutate_snapshot(self):
        env = RuntimeEnvironment(install_dir=Path("/opt/k"), inherited={"PATH": "/bin"})
        env.child_env()
        assert env.inherited == {"PATH": "/bin"}

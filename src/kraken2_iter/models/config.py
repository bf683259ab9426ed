"""
Pydantic configuration models for kraken2-iter.

RunConfig holds the validated options of one run. RuntimeEnvironment holds
the environment variables that influence a run; it is read once at startup
and handed explicitly to the components that need it.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Self

from pydantic import BaseModel, Field, model_validator

from kraken2_iter.core.exceptions import (
    ConfigurationError,
    ConflictingCompressionFlagsError,
    InvalidConfidenceError,
    InvalidPairedInputCountError,
    NoInputFilesError,
)

ENV_NUM_THREADS = "KRAKEN2_NUM_THREADS"
ENV_DEFAULT_DB = "KRAKEN2_DEFAULT_DB"
ENV_DB_PATH = "KRAKEN2_DB_PATH"
ENV_INSTALL_DIR = "KRAKEN2_DIR"


class RunConfig(BaseModel):
    """
    Options for a single classification run.

    Range checks that have a dedicated error type (confidence, compression
    conflicts) are done in an after-validator so callers get the typed
    ConfigurationError rather than a generic ValidationError.
    """

    database: str | None = Field(
        default=None,
        description="Database directory or name looked up in KRAKEN2_DB_PATH",
    )
    threads: int = Field(default=1, ge=1, description="Threads for the phase executables")
    quick: bool = Field(default=False, description="Quick operation (use first hit or hits)")
    paired: bool = Field(default=False, description="Input files are mate pairs")
    use_names: bool = Field(default=False, description="Print scientific names in output")
    memory_mapping: bool = Field(default=False, description="Memory-map the database")
    only_classified_output: bool = Field(
        default=False,
        description="Print no per-read output for unclassified sequences",
    )
    use_mpa_style: bool = Field(default=False, description="MPA-style report format")
    report_zero_counts: bool = Field(
        default=False,
        description="Report taxa with no reads assigned",
    )
    disable_classification: bool = Field(default=False, description="Skip the classify phase")
    disable_additional_map: bool = Field(default=False, description="Skip the search phase")
    keep_map: bool = Field(default=False, description="Keep an existing additional hash map")
    gzip_compressed: bool = Field(default=False, description="Input is gzip compressed")
    bzip2_compressed: bool = Field(default=False, description="Input is bzip2 compressed")
    confidence: float = Field(default=0.0, description="Confidence score threshold [0, 1]")
    minimum_base_quality: int = Field(
        default=0,
        ge=0,
        description="Minimum base quality used in classification",
    )
    max_iteration: int = Field(
        default=1,
        ge=1,
        description="Maximum search iterations for the additional hash map",
    )
    unclassified_out: Path | None = Field(default=None, description="Unclassified reads output")
    classified_out: Path | None = Field(default=None, description="Classified reads output")
    output: Path | None = Field(default=None, description="Per-read classification output")
    report: Path | None = Field(default=None, description="Classification report output")

    @model_validator(mode="after")
    def validate_options(self) -> Self:
        """Confidence must be in [0, 1]; at most one compression mode may be forced."""
        if not 0.0 <= self.confidence <= 1.0:
            raise InvalidConfidenceError(self.confidence)
        if self.gzip_compressed and self.bzip2_compressed:
            raise ConflictingCompressionFlagsError
        return self

    model_config = {"frozen": True}

    def check_inputs(self, inputs: Sequence[str]) -> None:
        """Validate the input file list against the run options.

        Raises:
            NoInputFilesError: If no input files are given.
            InvalidPairedInputCountError: If paired mode gets an odd count.
        """
        # An empty list is a usage error in every mode, paired or not
        if not inputs:
            raise NoInputFilesError
        if self.paired and len(inputs) % 2 != 0:
            raise InvalidPairedInputCountError(len(inputs))


class RuntimeEnvironment(BaseModel):
    """
    Environment settings captured once at startup.

    Attributes:
        threads_setting: Raw thread count, consulted only when --threads is omitted.
        default_database: Database used when --db is omitted.
        database_search_path: Directories searched for named databases.
        install_dir: Directory holding the phase executables.
        inherited: Snapshot of the process environment passed on to children.
    """

    threads_setting: str | None = None
    default_database: str | None = None
    database_search_path: tuple[Path, ...] = ()
    install_dir: Path | None = None
    inherited: dict[str, str] = Field(default_factory=dict, repr=False)

    model_config = {"frozen": True}

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> RuntimeEnvironment:
        """Build from environment variables (os.environ by default)."""
        if environ is None:
            environ = os.environ

        search_path = environ.get(ENV_DB_PATH, "")
        install_dir = environ.get(ENV_INSTALL_DIR)

        return cls(
            threads_setting=environ.get(ENV_NUM_THREADS, "").strip() or None,
            default_database=environ.get(ENV_DEFAULT_DB) or None,
            database_search_path=tuple(
                Path(p) for p in search_path.split(":") if p
            ),
            install_dir=Path(install_dir) if install_dir else None,
            inherited=dict(environ),
        )

    def resolve_threads(self, requested: int | None = None) -> int:
        """Thread count for a run.

        Args:
            requested: Value given on the command line, if any.

        Raises:
            ConfigurationError: If the value from the environment is needed
                and is not a positive integer.
        """
        if requested is not None:
            return requested
        if self.threads_setting is None:
            return 1
        try:
            threads = int(self.threads_setting)
        except ValueError:
            threads = 0
        if threads < 1:
            raise ConfigurationError(
                message=(
                    f"{ENV_NUM_THREADS} must be a positive integer, "
                    f"got '{self.threads_setting}'"
                ),
                suggestion=f"Unset {ENV_NUM_THREADS} or pass --threads.",
            )
        return threads

    @property
    def executable_search_path(self) -> str:
        """PATH used to locate executables, install directory first."""
        return self.child_env()["PATH"]

    def child_env(self) -> dict[str, str]:
        """Environment for child processes.

        The install directory is prepended to PATH and exported as
        KRAKEN2_DIR so phase executables can locate their siblings.
        """
        env = dict(self.inherited)
        path = env.get("PATH", os.defpath)
        if self.install_dir is not None:
            env["PATH"] = os.pathsep.join([str(self.install_dir), path])
            env[ENV_INSTALL_DIR] = str(self.install_dir)
        else:
            env["PATH"] = path
        return env

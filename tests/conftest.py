"""
Shared pytest fixtures for kraken2-iter tests.

Provides database directories, read files and a temporary install
directory populated with shell-script stand-ins for the engine
executables and the gzip/bzip2 filters.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest

from kraken2_iter.external.base import ExternalTool
from kraken2_iter.models.config import RuntimeEnvironment

FASTQ_RECORD = "@read_001\nACGTACGTAC\n+\nIIIIIIIIII\n"


@pytest.fixture(autouse=True)
def _clear_executable_cache():
    """Executable lookups are cached per class; start each test clean."""
    ExternalTool.reset_executable_resolver()
    yield
    ExternalTool.reset_executable_resolver()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def make_database(tmp_path: Path) -> Callable[..., Path]:
    """Factory for database directories with a chosen set of files."""

    def _make(
        name: str = "db",
        files: tuple[str, ...] = ("taxo.k2d", "hash.k2d", "opts.k2d"),
    ) -> Path:
        db = tmp_path / name
        db.mkdir(parents=True, exist_ok=True)
        for filename in files:
            (db / filename).write_bytes(b"\x00" * 16)
        return db

    return _make


@pytest.fixture
def database(make_database: Callable[..., Path]) -> Path:
    """Complete database directory."""
    return make_database()


# =============================================================================
# Read File Fixtures
# =============================================================================


@pytest.fixture
def fastq_record() -> str:
    """Content of every generated read file, after decompression."""
    return FASTQ_RECORD


@pytest.fixture
def plain_reads(tmp_path: Path) -> Path:
    """Uncompressed FASTQ file."""
    path = tmp_path / "sample.fastq"
    path.write_text(FASTQ_RECORD)
    return path


@pytest.fixture
def gzip_reads(tmp_path: Path) -> Path:
    """File carrying the gzip signature.

    The fake gzip filter strips the two signature bytes, so the "decompressed"
    stream is the FASTQ text that follows.
    """
    path = tmp_path / "sample.fastq.gz"
    path.write_bytes(b"\x1f\x8b" + FASTQ_RECORD.encode())
    return path


@pytest.fixture
def bzip2_reads(tmp_path: Path) -> Path:
    """File carrying the bzip2 signature."""
    path = tmp_path / "sample.fastq.bz2"
    path.write_bytes(b"BZ" + FASTQ_RECORD.encode())
    return path


# =============================================================================
# Fake Executables
# =============================================================================


_ENGINE_SCRIPT = """#!/bin/sh
name=$(basename "$0")
echo "$name KRAKEN2_DIR=$KRAKEN2_DIR $*" >> "{log}"
for arg in "$@"; do
  case "$arg" in
    /dev/fd/*) cat "$arg" >> "{log}.$name.data" ;;
  esac
done
exit {exit_code}
"""

_FILTER_SCRIPT = """#!/bin/sh
echo "$(basename "$0") $*" >> "{log}"
exec tail -c +3 "$2"
"""

_FAILING_FILTER_SCRIPT = """#!/bin/sh
echo "$(basename "$0") $*" >> "{log}"
echo "$(basename "$0"): $2: unexpected end of file" >&2
exit 1
"""


def _write_script(path: Path, content: str) -> None:
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


class FakeInstall:
    """Temporary install directory holding fake executables.

    Attributes:
        directory: The install directory (goes into KRAKEN2_DIR).
        log: File each fake executable appends its command line to.
    """

    def __init__(self, directory: Path):
        self.directory = directory
        self.log = directory / "calls.log"
        self.write_engine("kraken2-search")
        self.write_engine("kraken2-classify")
        self.write_filter("gzip")
        self.write_filter("bzip2")

    def write_engine(self, name: str, exit_code: int = 0) -> None:
        _write_script(
            self.directory / name,
            _ENGINE_SCRIPT.format(log=self.log, exit_code=exit_code),
        )

    def write_filter(self, name: str, *, failing: bool = False) -> None:
        script = _FAILING_FILTER_SCRIPT if failing else _FILTER_SCRIPT
        _write_script(self.directory / name, script.format(log=self.log))

    def calls(self) -> list[str]:
        if not self.log.exists():
            return []
        return self.log.read_text().splitlines()

    def engine_calls(self) -> list[str]:
        return [line for line in self.calls() if line.startswith("kraken2-")]

    def data_read_by(self, name: str) -> str:
        path = Path(f"{self.log}.{name}.data")
        return path.read_text() if path.exists() else ""

    def environment(self, **overrides: object) -> RuntimeEnvironment:
        return RuntimeEnvironment(
            install_dir=self.directory,
            inherited=dict(os.environ),
            **overrides,
        )


@pytest.fixture
def fake_install(tmp_path: Path) -> FakeInstall:
    """Install directory with fake engine and filter executables."""
    directory = tmp_path / "install"
    directory.mkdir()
    return FakeInstall(directory)

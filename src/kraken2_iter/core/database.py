"""
Database directory resolution.

A database directory holds the taxonomy (taxo.k2d), the k-mer hash table
(hash.k2d) and the build options (opts.k2d). The additional hash map
(additional_hash.k2d) lives beside them but is managed per run, see
kraken2_iter.core.additional_map.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from kraken2_iter.core.exceptions import DatabaseFileMissingError, DatabaseNotFoundError
from kraken2_iter.models.config import RuntimeEnvironment

logger = logging.getLogger(__name__)

TAXONOMY_FILENAME = "taxo.k2d"
HASH_TABLE_FILENAME = "hash.k2d"
OPTIONS_FILENAME = "opts.k2d"
ADDITIONAL_MAP_FILENAME = "additional_hash.k2d"


@dataclass(frozen=True)
class DatabasePaths:
    """File locations inside a resolved database directory."""

    directory: Path
    taxonomy: Path
    hash_table: Path
    options: Path
    additional_map: Path

    @classmethod
    def from_directory(cls, directory: Path) -> DatabasePaths:
        return cls(
            directory=directory,
            taxonomy=directory / TAXONOMY_FILENAME,
            hash_table=directory / HASH_TABLE_FILENAME,
            options=directory / OPTIONS_FILENAME,
            additional_map=directory / ADDITIONAL_MAP_FILENAME,
        )

    @property
    def required_files(self) -> tuple[Path, ...]:
        """Files that must exist before any phase runs, in check order."""
        return (self.taxonomy, self.hash_table, self.options)


def find_database_directory(
    selector: str | None,
    environment: RuntimeEnvironment,
) -> Path:
    """Resolve a database selector to a directory.

    The selector falls back to the environment default. A selector naming an
    existing directory is used as is; a bare name (no path separator) is
    looked up in each directory of the database search path, in order.

    Raises:
        DatabaseNotFoundError: If no directory can be determined.
    """
    if selector is None:
        selector = environment.default_database
    if not selector:
        raise DatabaseNotFoundError(None)

    candidate = Path(selector)
    if candidate.is_dir():
        return candidate

    searched: list[Path] = []
    if "/" not in selector:
        for prefix in environment.database_search_path:
            candidate = prefix / selector
            searched.append(candidate)
            if candidate.is_dir():
                return candidate

    raise DatabaseNotFoundError(selector, searched)


def resolve_database(
    selector: str | None,
    environment: RuntimeEnvironment,
) -> DatabasePaths:
    """Resolve the database and check that its required files exist.

    Args:
        selector: Value of --db, or None.
        environment: Startup environment (default database, search path).

    Returns:
        DatabasePaths for the resolved directory.

    Raises:
        DatabaseNotFoundError: If no directory can be determined.
        DatabaseFileMissingError: If taxo.k2d, hash.k2d or opts.k2d is missing.
    """
    directory = find_database_directory(selector, environment)
    paths = DatabasePaths.from_directory(directory)

    for required in paths.required_files:
        if not required.is_file():
            raise DatabaseFileMissingError(required)

    logger.debug("Using database %s", directory)
    return paths

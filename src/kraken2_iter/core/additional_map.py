"""
Lifecycle of the additional hash map stored in the database directory.

Both phase executables open the additional map unconditionally, so it must
exist before either runs. Unless the caller asks to keep it, a map left by a
previous run is discarded and replaced by an empty file.

There is no locking: concurrent runs against the same database directory
race on this file and on the delete/recreate step below.
"""

from __future__ import annotations

import logging
from pathlib import Path

from kraken2_iter.core.exceptions import MapCreationError, MapDeletionError

logger = logging.getLogger(__name__)


def prepare_additional_map(path: Path, *, keep_map: bool) -> bool:
    """Bring the additional hash map into its starting state.

    Args:
        path: Location of the additional map.
        keep_map: Preserve an existing map instead of deleting it.

    Returns:
        True if an empty map was created, False if an existing one was kept.

    Raises:
        MapDeletionError: If a stale map cannot be removed.
        MapCreationError: If the empty map cannot be created.
    """
    if not keep_map and path.exists():
        try:
            path.unlink()
        except OSError as e:
            raise MapDeletionError(path, e) from e
        logger.debug("Removed existing additional hash map %s", path)

    if path.exists():
        logger.debug("Keeping existing additional hash map %s", path)
        return False

    try:
        path.touch()
    except OSError as e:
        raise MapCreationError(path, e) from e
    logger.debug("Created empty additional hash map %s", path)
    return True

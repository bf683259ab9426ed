"""
End-to-end run: validation, database checks, map lifecycle, compression
handling and phase invocation, in that order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from kraken2_iter.core.additional_map import prepare_additional_map
from kraken2_iter.core.compression import resolve_compression
from kraken2_iter.core.database import resolve_database
from kraken2_iter.core.flags import build_flag_vector
from kraken2_iter.core.phases import PhaseInvoker, PhaseTiming
from kraken2_iter.external.engine import EnginePhase
from kraken2_iter.models.config import RunConfig, RuntimeEnvironment

logger = logging.getLogger(__name__)


def run_pipeline(
    config: RunConfig,
    inputs: Sequence[str],
    environment: RuntimeEnvironment,
    *,
    on_phase_complete: Callable[[PhaseTiming], None] | None = None,
    search_phase: EnginePhase | None = None,
    classify_phase: EnginePhase | None = None,
) -> list[PhaseTiming]:
    """Run a full classification.

    Input checks happen before any filesystem access; the database and
    additional map are settled before any subprocess is started.

    Args:
        config: Validated run options.
        inputs: Input file paths as given on the command line.
        environment: Startup environment.
        on_phase_complete: Called after each successful phase.
        search_phase: Override the search executable wrapper.
        classify_phase: Override the classify executable wrapper.

    Returns:
        Timings of the phases that ran.

    Raises:
        Kraken2IterError: Any configuration, database, resource or phase error.
    """
    config.check_inputs(inputs)

    paths = resolve_database(config.database, environment)
    prepare_additional_map(paths.additional_map, keep_map=config.keep_map)

    compression = resolve_compression(
        list(inputs),
        gzip_compressed=config.gzip_compressed,
        bzip2_compressed=config.bzip2_compressed,
    )
    flags = build_flag_vector(config, paths)
    logger.debug("Engine flags: %s", " ".join(flags))

    invoker = PhaseInvoker(
        flags,
        inputs,
        compression=compression,
        environment=environment,
        search_phase=search_phase,
        classify_phase=classify_phase,
        on_phase_complete=on_phase_complete,
    )
    return invoker.run(
        build_map=not config.disable_additional_map,
        classify=not config.disable_classification,
    )

"""
Flag vector shared by both engine phases.

Order matters: the engine executables expect database files first, then
the thread count, switches, optional outputs and numeric parameters.
"""

from __future__ import annotations

from kraken2_iter.core.database import DatabasePaths
from kraken2_iter.models.config import RunConfig

# (RunConfig attribute, engine switch)
_SWITCHES: tuple[tuple[str, str], ...] = (
    ("quick", "-q"),
    ("paired", "-P"),
    ("use_names", "-n"),
    ("memory_mapping", "-M"),
    ("only_classified_output", "-L"),
    ("use_mpa_style", "-m"),
    ("report_zero_counts", "-z"),
)

_OUTPUTS: tuple[tuple[str, str], ...] = (
    ("unclassified_out", "-U"),
    ("classified_out", "-C"),
    ("output", "-O"),
    ("report", "-R"),
)


def build_flag_vector(config: RunConfig, paths: DatabasePaths) -> tuple[str, ...]:
    """Map run options and database paths to the engine flag vocabulary.

    Pure and deterministic; performs no validation.

    Args:
        config: Validated run options.
        paths: Resolved database paths.

    Returns:
        Tuple of command-line tokens, identical for both phases.
    """
    flags = [
        "-H", str(paths.hash_table),
        "-A", str(paths.additional_map),
        "-t", str(paths.taxonomy),
        "-o", str(paths.options),
        "-p", str(config.threads),
    ]

    for attribute, switch in _SWITCHES:
        if getattr(config, attribute):
            flags.append(switch)

    for attribute, switch in _OUTPUTS:
        value = getattr(config, attribute)
        if value is not None:
            flags.extend([switch, str(value)])

    flags.extend([
        "-c", str(config.confidence),
        "-Q", str(config.minimum_base_quality),
        "-I", str(config.max_iteration),
    ])

    return tuple(flags)

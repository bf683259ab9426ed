"""
kraken2-iter: two-phase read classification with an additional hash map.

Orchestrates the engine's search phase, which extends an additional hash map
kept in the database directory, and its classify phase. Handles database
checks, compressed input and the additional map lifecycle around them.
"""

__version__ = "0.1.0"
__author__ = "kraken2-iter Team"

from kraken2_iter.core.pipeline import run_pipeline
from kraken2_iter.models.config import RunConfig, RuntimeEnvironment

__all__ = [
    "RunConfig",
    "RuntimeEnvironment",
    "__version__",
    "run_pipeline",
]

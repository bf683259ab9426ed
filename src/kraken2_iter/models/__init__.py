"""
Configuration models for kraken2-iter.
"""

from kraken2_iter.models.config import RunConfig, RuntimeEnvironment

__all__ = [
    "RunConfig",
    "RuntimeEnvironment",
]

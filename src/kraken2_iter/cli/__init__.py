"""
Command-line interface for kraken2-iter.
"""

__all__ = ["main"]

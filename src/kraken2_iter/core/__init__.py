"""
Core orchestration for kraken2-iter.

Database resolution, additional hash map lifecycle, compression handling,
flag construction and phase sequencing.
"""

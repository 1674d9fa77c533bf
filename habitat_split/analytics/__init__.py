"""
Per-species aggregation, merging, normalization, and console summaries.
"""

"""
Stacked bar chart rendering for per-species habitat splits.
"""

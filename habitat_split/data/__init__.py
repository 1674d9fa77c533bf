"""
Data I/O, schema enforcement, and error types for observation tables.

Handles loading CSV and spreadsheet observation tables with identifier column
checks, and writing the intermediate per-species table.
"""

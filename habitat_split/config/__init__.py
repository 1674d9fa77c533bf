"""
Configuration loading and validation for pipeline settings.

Provides a strongly typed settings object for column names, habitat labels,
chart colours, and the output destination, with upfront validation.
"""

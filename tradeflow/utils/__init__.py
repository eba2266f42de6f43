"""
Utility functions module.

Shared helpers for timestamps. All pipeline timestamps are UTC and rendered
as ISO-8601 strings.
"""

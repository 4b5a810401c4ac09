"""Ingest package - oscilloscope CSV readers.

This package handles:
- Locating the ``TIME,CH1,...`` header of a scope export
- Selecting the configured data-row window
- Applying the channel calibration (strain gain, interferometer bias)

Design principle:
- Readers produce Trace objects; malformed rows are skipped, never fatal
- Only an unreadable source is an error (OSError)
"""

from .readers_csv import TraceCsvReader, parse_trace_text, read_trace_file

__all__ = [
    "TraceCsvReader",
    "parse_trace_text",
    "read_trace_file",
]

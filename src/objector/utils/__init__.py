"""Shared utilities for objector."""

from objector.utils.durations import parse_duration
from objector.utils.exit_codes import ExitCode
from objector.utils.json_norm import stable_json_dump, stable_json_dumps

__all__ = [
    "parse_duration",
    "ExitCode",
    "stable_json_dump",
    "stable_json_dumps",
]

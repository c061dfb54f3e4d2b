"""Centralized exit-code contract for the CLI.

Code  Meaning
----  -------
  0   Success — session finished and nothing leaked
  1   Findings — at least one secret was reported
  2   Error — usage error, bad config, browser failure
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    FINDINGS = 1
    ERROR = 2

"""JSON reporter — one machine-readable document at session end."""

from __future__ import annotations

import sys
from typing import IO, Optional

from objector.contracts.load import validate_instance
from objector.model.finding import Finding
from objector.model.session_result import SessionResult
from objector.utils.json_norm import stable_json_dump


class JsonReporter:
    """Silent while scanning; writes the validated session result at the end."""

    def __init__(self, stream: Optional[IO[str]] = None):
        self.stream = stream or sys.stdout

    def report(self, finding: Finding) -> None:
        pass

    def summarize(self, result: SessionResult) -> None:
        result_dict = result.to_dict()
        validate_instance(result_dict, "session_result.schema.json")
        stable_json_dump(result_dict, self.stream)
        self.stream.flush()

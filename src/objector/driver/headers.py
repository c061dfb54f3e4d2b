"""Parsing for the ``--headers`` flag."""

from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger(__name__)


def parse_headers(raw: Optional[str]) -> dict[str, str]:
    """Parse ``"Name: value, Other: value"`` into a header dict.

    Pairs without a colon are skipped. Values may contain colons.
    """
    headers: dict[str, str] = {}
    if not raw:
        return headers
    for pair in raw.split(","):
        name, sep, value = pair.strip().partition(":")
        if not sep or not name.strip():
            logger.warning("Ignoring malformed header %r", pair.strip())
            continue
        headers[name.strip()] = value.strip()
    return headers

"""Cross-pass deduplication of findings."""

from __future__ import annotations

from objector.model.finding import Finding


class Deduplicator:
    """Admits each ``(path, value)`` pair once per session.

    Keys leave the set only when delivery fails (see ``forget``). Its size
    is bounded by the number of distinct secrets observed, not by graph size.
    """

    def __init__(self) -> None:
        self._seen: set[tuple[str, str]] = set()

    def admit(self, finding: Finding) -> bool:
        """True the first time this finding's key is observed."""
        key = finding.seen_key
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def forget(self, finding: Finding) -> None:
        """Drop the finding's key so it can be admitted again."""
        self._seen.discard(finding.seen_key)

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    def __contains__(self, finding: object) -> bool:
        return isinstance(finding, Finding) and finding.seen_key in self._seen

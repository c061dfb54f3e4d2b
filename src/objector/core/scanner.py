"""Graph scanner — walks a live object graph and classifies every scalar.

Depth-first, pre-order, driven by an explicit stack of member iterators so
deep graphs never hit the interpreter's recursion limit. Within one pass
each composite identity is entered at most once.

Depth boundary: the root sits at depth 0 and a member of a node at depth
``d`` sits at ``d + 1``. Members are read only while ``d + 1 <= max_depth``,
so no finding path has more than ``max_depth`` segments beyond the root.
With ``max_depth=0`` the root is entered and counted but nothing is read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from objector.core.config import ScanOptions
from objector.core.detector import MatchDetector
from objector.core.host import Composite, ObjectHost, Scalar
from objector.model.finding import Finding

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "."


def join_path(parent: str, name: str) -> str:
    return f"{parent}{PATH_SEPARATOR}{name}" if parent else name


def _last_segment(path: str) -> str:
    return path.rsplit(PATH_SEPARATOR, 1)[-1]


@dataclass(slots=True)
class _Frame:
    handle: Any
    path: str
    depth: int
    members: Iterator[tuple[str, Any]]


class ScanPass:
    """A single traversal of one graph.

    Iterate it to drive the walk; findings are yielded as they are found and
    the counters reflect the work done so far. A pass can be consumed once.
    """

    def __init__(
        self,
        root: Any,
        root_label: str,
        options: ScanOptions,
        detector: MatchDetector,
        host: ObjectHost,
    ):
        self.root = root
        self.root_label = root_label
        self.options = options
        self.objects_scanned = 0
        self.matches_found = 0
        self._detector = detector
        self._host = host
        self._consumed = False

    def __iter__(self) -> Iterator[Finding]:
        if self._consumed:
            raise RuntimeError("a ScanPass can only be iterated once")
        self._consumed = True
        return self._walk()

    def _enter(
        self,
        node: Composite,
        name: str,
        path: str,
        depth: int,
        visited: dict[int, Any],
    ) -> Optional[_Frame]:
        if depth > self.options.max_depth:
            return None
        if node.identity in visited:
            return None
        if name in self.options.ignored_names:
            return None

        # Holding the handle keeps its id() from being reused mid-pass.
        visited[node.identity] = node.handle
        self.objects_scanned += 1

        if depth >= self.options.max_depth:
            return None
        try:
            members = iter(self._host.members(node.handle))
        except Exception:
            logger.debug("cannot enumerate %s, skipping subtree", path or "<root>", exc_info=True)
            return None
        return _Frame(handle=node.handle, path=path, depth=depth, members=members)

    def _walk(self) -> Iterator[Finding]:
        visited: dict[int, Any] = {}
        root = self._host.tag(self.root)
        if not isinstance(root, Composite):
            return

        frame = self._enter(root, _last_segment(self.root_label), self.root_label, 0, visited)
        stack = [frame] if frame is not None else []

        while stack:
            frame = stack[-1]
            try:
                name, key = next(frame.members)
            except StopIteration:
                stack.pop()
                continue
            except Exception:
                logger.debug("enumeration of %s failed midway", frame.path or "<root>", exc_info=True)
                stack.pop()
                continue

            path = join_path(frame.path, name)
            try:
                value = self._host.tag(self._host.read(frame.handle, key))
            except Exception:
                logger.debug("skipping unreadable member %s", path, exc_info=True)
                continue

            if isinstance(value, Scalar):
                finding = self._detector.classify(value.text, path)
                if finding is not None:
                    self.matches_found += 1
                    yield finding
            elif isinstance(value, Composite):
                child = self._enter(value, name, path, frame.depth + 1, visited)
                if child is not None:
                    stack.append(child)


class GraphScanner:
    """Builds scan passes over arbitrary value graphs."""

    def __init__(self, detector: MatchDetector, host: Optional[ObjectHost] = None):
        self.detector = detector
        self.host = host or ObjectHost()

    def scan(self, root: Any, root_label: str, options: ScanOptions) -> ScanPass:
        """Return a lazy pass over *root*; nothing is read until iterated."""
        return ScanPass(root, root_label, options, self.detector, self.host)

"""Host value model — the boundary between the scanner and runtime values.

The scanner never inspects host types itself. Every value it meets is tagged
as one of three variants and it branches on the tag alone:

    Scalar(text)       string-like leaf, handed to the detector
    Composite(handle)  traversable node with named members
    OPAQUE             anything else (numbers, functions, classes, None)

``ObjectHost`` implements the tagging, member enumeration and member reads
for plain Python graphs, including graphs decoded from a browser snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Iterable, Union

from objector.model import ValueKind

# Leaf types that are never string-like.
_ATOMIC_TYPES = (bool, int, float, complex, bytes, bytearray, memoryview)


@dataclass(frozen=True, slots=True)
class Scalar:
    text: str

    @property
    def kind(self) -> ValueKind:
        return ValueKind.SCALAR


@dataclass(frozen=True, slots=True, eq=False)
class Composite:
    handle: Any

    @property
    def kind(self) -> ValueKind:
        return ValueKind.COMPOSITE

    @property
    def identity(self) -> int:
        """Runtime identity of the node, independent of its content."""
        return id(self.handle)


class _Opaque:
    __slots__ = ()

    @property
    def kind(self) -> ValueKind:
        return ValueKind.OPAQUE

    def __repr__(self) -> str:
        return "OPAQUE"


OPAQUE = _Opaque()

HostValue = Union[Scalar, Composite, _Opaque]


class ObjectHost:
    """Tags, enumerates and reads in-process Python values.

    Composites are mappings, lists, tuples, modules and plain objects with
    instance state. Object members are the public names from ``dir()``, so
    inherited properties and class attributes are included, mirroring a
    ``for ... in`` walk over a JavaScript object.
    """

    def tag(self, value: Any) -> HostValue:
        if isinstance(value, str):
            return Scalar(value)
        if value is None or isinstance(value, _ATOMIC_TYPES):
            return OPAQUE
        if isinstance(value, (Mapping, list, tuple, ModuleType)):
            return Composite(value)
        if isinstance(value, (type, set, frozenset)) or callable(value):
            return OPAQUE
        if hasattr(value, "__dict__") or hasattr(type(value), "__slots__"):
            return Composite(value)
        return OPAQUE

    def members(self, handle: Any) -> Iterable[tuple[str, Any]]:
        """Enumerate ``(label, key)`` pairs for *handle*.

        The enumeration is materialized up front, so a container mutated
        during the walk raises here rather than partway through.
        """
        if isinstance(handle, Mapping):
            return [(str(key), key) for key in list(handle.keys())]
        if isinstance(handle, (list, tuple)):
            return [(str(index), index) for index in range(len(handle))]
        return [(name, name) for name in dir(handle) if not name.startswith("_")]

    def read(self, handle: Any, key: Any) -> Any:
        """Read one member. May raise; the scanner skips the member if it does."""
        if isinstance(handle, (Mapping, list, tuple)):
            return handle[key]
        return getattr(handle, key)

"""
Change Records - Structural Differences Between Two Values
==========================================================

A change record describes one structural difference between two values at a
given path. There are four kinds:

- Edit:        the value at ``path`` went from ``lhs`` to ``rhs``
- New:         a value ``rhs`` appeared at ``path``
- Delete:      the value ``lhs`` was removed from ``path``
- ArraySplice: a nested change (``item``) at position ``index`` of the list
               found at ``path``

Records are immutable. A *batch* is the tuple of records produced by one
recorded state transition.

Example:
    >>> Edit(("user", "name"), "Alice", "Bob")
    Edit(user/name: 'Alice' → 'Bob')
    >>> ArraySplice(("todos",), 2, New((), "write docs"))
    ArraySplice(todos[2]: New('write docs'))
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Hashable, Tuple, Union

import numpy as np

# ============================================================================
# SENTINEL VALUES
# ============================================================================


class _Missing:
    """Sentinel for 'no value at this path'."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Missing, ())


MISSING = _Missing()


# ============================================================================
# CHANGE RECORDS
# ============================================================================


Path = Tuple[Hashable, ...]


class Kind(Enum):
    """Kind tag of a change record."""

    EDIT = "E"
    NEW = "N"
    DELETE = "D"
    ARRAY = "A"


def _format_path(path: Path) -> str:
    return "/".join(str(p) for p in path) or "(root)"


@dataclass(frozen=True, slots=True)
class Edit:
    """The value at ``path`` changed from ``lhs`` to ``rhs``."""

    path: Path
    lhs: Any
    rhs: Any

    kind: ClassVar[Kind] = Kind.EDIT

    @property
    def effective_path(self) -> Path:
        return self.path

    def __repr__(self) -> str:
        return f"Edit({_format_path(self.path)}: {self.lhs!r} → {self.rhs!r})"


@dataclass(frozen=True, slots=True)
class New:
    """A value appeared at ``path``."""

    path: Path
    rhs: Any

    kind: ClassVar[Kind] = Kind.NEW

    @property
    def lhs(self) -> Any:
        return MISSING

    @property
    def effective_path(self) -> Path:
        return self.path

    def __repr__(self) -> str:
        if not self.path:
            return f"New({self.rhs!r})"
        return f"New({_format_path(self.path)}: {self.rhs!r})"


@dataclass(frozen=True, slots=True)
class Delete:
    """The value at ``path`` was removed."""

    path: Path
    lhs: Any

    kind: ClassVar[Kind] = Kind.DELETE

    @property
    def rhs(self) -> Any:
        return MISSING

    @property
    def effective_path(self) -> Path:
        return self.path

    def __repr__(self) -> str:
        if not self.path:
            return f"Delete({self.lhs!r})"
        return f"Delete({_format_path(self.path)}: {self.lhs!r})"


@dataclass(frozen=True, slots=True)
class ArraySplice:
    """
    A change at position ``index`` of the list found at ``path``.

    ``item`` is itself a change record with an empty path. The splice's
    ``lhs``/``rhs`` read through to the item so that merging can treat every
    kind uniformly.
    """

    path: Path
    index: int
    item: "ChangeRecord"

    kind: ClassVar[Kind] = Kind.ARRAY

    @property
    def lhs(self) -> Any:
        return self.item.lhs

    @property
    def rhs(self) -> Any:
        return self.item.rhs

    @property
    def effective_path(self) -> Path:
        return self.path + (self.index,)

    def __repr__(self) -> str:
        return f"ArraySplice({_format_path(self.path)}[{self.index}]: {self.item!r})"


ChangeRecord = Union[Edit, New, Delete, ArraySplice]
Batch = Tuple[ChangeRecord, ...]


# ============================================================================
# VALUE HELPERS
# ============================================================================


def values_equal(a: Any, b: Any) -> bool:
    """
    Structural equality for values carried by change records.

    numpy arrays compare element-wise, booleans never equal plain numbers and
    MISSING only equals itself.
    """
    if a is b:
        return True
    if a is MISSING or b is MISSING:
        return False
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        if type(a) != type(b):
            return False
        return np.array_equal(a, b)
    # bool is a subclass of int, so True == 1 without this guard
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    try:
        return bool(a == b)
    except (ValueError, TypeError):
        return False


def get_at_path(target: Any, path: Path) -> Any:
    """Return the value found at ``path`` inside ``target`` or MISSING."""
    value = target
    for key in path:
        if isinstance(value, dict):
            value = value.get(key, MISSING)
        elif isinstance(value, list) and isinstance(key, int):
            value = value[key] if -len(value) <= key < len(value) else MISSING
        else:
            return MISSING
        if value is MISSING:
            return MISSING
    return value


def is_path_prefix(prefix: Path, path: Path) -> bool:
    """True when ``prefix`` equals ``path`` or one of its ancestors."""
    return len(prefix) <= len(path) and tuple(path[: len(prefix)]) == tuple(prefix)


__all__ = [
    "MISSING",
    "Kind",
    "Path",
    "Edit",
    "New",
    "Delete",
    "ArraySplice",
    "ChangeRecord",
    "Batch",
    "values_equal",
    "get_at_path",
    "is_path_prefix",
]

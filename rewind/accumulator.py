"""
Diff Accumulator - Merging and Flattening Change Streams
========================================================

The accumulator is the sink handed to the diff engine. Every record the
engine emits goes through ``push()``, which may:

1. **Flatten** it: when the ``flatten`` option matches a key on the record's
   path, everything under that key is collapsed into one Edit holding the
   whole old and new subtree. The flattened path is then reported to the
   engine as pre-filtered so the rest of that subtree is never analysed.
2. **Merge** it: a record at the same effective path as a pending one is
   combined with it ("last transition wins"); when the value ends up back
   where it started the two cancel and the pending record is dropped.

Pending changes survive across ``diff()`` calls until ``clear()`` is called,
which lets several transitions be folded into a single batch.

Example:
    accum = DiffAccumulator(flatten=lambda path, key: key == "form")
    accum.diff({"form": {"a": 1, "b": 2}}, {"form": {"a": 3, "b": 4}})
    # (Edit(form: {'a': 1, 'b': 2} → {'a': 3, 'b': 4}),)
"""

import threading
from dataclasses import replace
from typing import Any, Callable, Hashable, List, Optional

from .changes import (
    Batch,
    ChangeRecord,
    Edit,
    Kind,
    Path,
    get_at_path,
    is_path_prefix,
    values_equal,
)
from .engine import compute_diff
from .errors import MergeInconsistencyError

PathPredicate = Callable[[Path, Hashable], bool]


# ============================================================================
# MERGING
# ============================================================================


def merge_changes(a: ChangeRecord, b: ChangeRecord) -> Optional[ChangeRecord]:
    """
    Collapse two changes observed in sequence at the same path into one.

    Args:
        a: The earlier change
        b: The later change

    Returns:
        The merged change, or None when the two cancel out

    Raises:
        MergeInconsistencyError: If the pair cannot describe a real sequence
            of values (e.g. two deletes of the same path)
    """
    # the value went back to where it started
    if values_equal(a.lhs, b.rhs):
        return None

    if a.kind is Kind.ARRAY or b.kind is Kind.ARRAY:
        item = merge_changes(
            a.item if a.kind is Kind.ARRAY else replace(a, path=()),
            b.item if b.kind is Kind.ARRAY else replace(b, path=()),
        )
        if item is None:
            return None
        return replace(a if a.kind is Kind.ARRAY else b, item=item)

    if a.kind is not Kind.DELETE and b.kind is Kind.EDIT:
        # Edit+Edit stays an Edit, New+Edit stays a New
        return replace(a, rhs=b.rhs)
    if a.kind is Kind.DELETE and b.kind is not Kind.DELETE:
        return Edit(a.path, a.lhs, b.rhs)
    if a.kind is Kind.EDIT and b.kind is Kind.DELETE:
        return replace(b, lhs=a.lhs)

    raise MergeInconsistencyError(a.effective_path, a, b)


# ============================================================================
# ACCUMULATOR
# ============================================================================


class DiffAccumulator:
    """
    Collects the change records of one or more diffs into a single batch.

    Attributes:
        flattened: Paths flattened during the current ``diff()`` session
        lhs: Left-hand snapshot of the current session
        rhs: Right-hand snapshot of the current session

    Thread Safety:
        An instance belongs to a single writer; ``diff``, ``push`` and
        ``clear`` are serialized by a re-entrant lock.
    """

    def __init__(
        self,
        flatten: Optional[PathPredicate] = None,
        prefilter: Optional[PathPredicate] = None,
    ):
        """
        Args:
            flatten: ``flatten(parent_path, key)`` returning True collapses
                every change under ``parent_path + (key,)`` into one Edit
            prefilter: ``prefilter(parent_path, key)`` returning True stops
                the diff engine from looking under that key at all
        """
        self._flatten = flatten
        self._prefilter = prefilter
        self._changes: List[ChangeRecord] = []
        self._lock = threading.RLock()

        self.flattened: List[Path] = []
        self.lhs: Any = None
        self.rhs: Any = None

    @property
    def changes(self) -> Batch:
        """Pending changes, oldest first."""
        return tuple(self._changes)

    def prefilter(self, path: Path, key: Hashable) -> bool:
        """Engine-facing prefilter that also skips already flattened paths."""
        if self.is_flattened(path + (key,)):
            return True
        if self._prefilter is not None:
            return bool(self._prefilter(path, key))
        return False

    def diff(self, lhs: Any, rhs: Any) -> Batch:
        """
        Diff ``lhs`` against ``rhs`` and fold the result into the pending batch.

        Returns:
            All pending changes, including those of earlier uncleared diffs
        """
        with self._lock:
            self.flattened = []
            self.lhs = lhs
            self.rhs = rhs

            compute_diff(lhs, rhs, self.prefilter, self.push)
            return self.changes

    def clear(self) -> None:
        """Drop the pending changes."""
        with self._lock:
            self._changes = []

    def get_flat_path(self, record: ChangeRecord) -> Path:
        """Return the record's path cut at the first key matching ``flatten``."""
        boundary = self._boundary(record.path)
        return record.path if boundary is None else boundary

    def _boundary(self, path: Path) -> Optional[Path]:
        if self._flatten is not None:
            for i, key in enumerate(path):
                if self._flatten(path[:i], key):
                    return path[: i + 1]
        return None

    def is_flattened(self, path: Path) -> bool:
        """True when ``path`` or one of its ancestors was flattened."""
        return any(is_path_prefix(done, path) for done in self.flattened)

    def add_change(self, record: ChangeRecord) -> None:
        """Append ``record`` or merge it into the pending change at its path."""
        with self._lock:
            target = record.effective_path
            for i, existing in enumerate(self._changes):
                if existing.effective_path == target:
                    merged = merge_changes(existing, record)
                    if merged is None:
                        del self._changes[i]
                    else:
                        self._changes[i] = merged
                    return
            self._changes.append(record)

    def push(self, record: ChangeRecord) -> None:
        """Route one engine record into the batch, flattening when configured."""
        with self._lock:
            boundary = self._boundary(record.path)
            flat_path = record.path if boundary is None else boundary
            if self.is_flattened(flat_path):
                return

            # a splice sits below its array path, so a boundary at the array
            # itself folds it in as well
            if boundary is not None and (
                boundary != record.path or record.kind is Kind.ARRAY
            ):
                lhs = get_at_path(self.lhs, boundary)
                rhs = get_at_path(self.rhs, boundary)
                self.flattened.append(boundary)
                self.add_change(Edit(boundary, lhs, rhs))
            else:
                self.add_change(record)


__all__ = ["DiffAccumulator", "merge_changes"]

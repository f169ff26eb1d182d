"""
Replay - Applying and Reverting Batches
=======================================

Two flavours of the same operations:

- ``apply_changes`` / ``revert_changes`` / ``apply_diffs`` / ``revert_diffs``
  mutate the target they are given and return it. They are used internally
  once a private copy of the state exists.
- ``apply_batch`` / ``revert_batch`` / ``apply_batches`` / ``revert_batches``
  deep-copy the starting state first and return the new state, leaving the
  caller's reference untouched.

Reverting walks a batch back to front so that list insertions and removals
are undone before any record that was applied earlier.
"""

import copy
from typing import Any, Iterable, Optional

from .changes import Batch
from .engine import apply_change, revert_change


# ============================================================================
# IN PLACE
# ============================================================================


def apply_changes(target: Any, changes: Optional[Batch] = None) -> Any:
    """Apply every change of one batch to ``target``, front to back."""
    for change in changes or ():
        apply_change(target, change)
    return target


def revert_changes(target: Any, changes: Optional[Batch] = None) -> Any:
    """Revert every change of one batch on ``target``, back to front."""
    for change in reversed(tuple(changes or ())):
        revert_change(target, change)
    return target


def apply_diffs(target: Any, diffs: Iterable[Batch] = ()) -> Any:
    """Apply several batches to ``target`` in the given order."""
    for changes in diffs:
        apply_changes(target, changes)
    return target


def revert_diffs(target: Any, diffs: Iterable[Batch] = ()) -> Any:
    """Revert several batches on ``target`` in the given order."""
    for changes in diffs:
        revert_changes(target, changes)
    return target


# ============================================================================
# COPYING
# ============================================================================


def apply_batch(state: Any, batch: Batch) -> Any:
    """Return a copy of ``state`` with ``batch`` applied."""
    return apply_changes(copy.deepcopy(state), batch)


def revert_batch(state: Any, batch: Batch) -> Any:
    """Return a copy of ``state`` with ``batch`` reverted."""
    return revert_changes(copy.deepcopy(state), batch)


def apply_batches(state: Any, batches: Iterable[Batch]) -> Any:
    """Return a copy of ``state`` with each batch applied in order."""
    return apply_diffs(copy.deepcopy(state), batches)


def revert_batches(state: Any, batches: Iterable[Batch]) -> Any:
    """
    Return a copy of ``state`` with each batch reverted in order.

    Pass batches most recent first, the way ``History.prev`` stores them.
    """
    return revert_diffs(copy.deepcopy(state), batches)


__all__ = [
    "apply_changes",
    "revert_changes",
    "apply_diffs",
    "revert_diffs",
    "apply_batch",
    "revert_batch",
    "apply_batches",
    "revert_batches",
]

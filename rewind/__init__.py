"""
Rewind - Undo, Redo and Time-Travel Through Structural Diffs
============================================================

Rewind wraps a state-transition function with a bounded history of the
structural changes each transition made, so any earlier state can be
reconstructed without storing snapshots.

- ``DiffAccumulator`` turns a diff into one batch of change records, merging
  repeated changes to the same path and flattening configured subtrees.
- ``History`` keeps the recorded batches in ``prev``/``next`` queues and
  moves them around on undo, redo and jump.
- ``Deducer`` replays batches to tell what a selector returned in the past.
- ``HistoryReducer`` and ``Store`` put the pieces together.
"""

from . import actions
from .accumulator import DiffAccumulator, merge_changes
from .actions import CLEAR, COMMIT, JUMP, REDO, UNDO
from .changes import (
    MISSING,
    ArraySplice,
    Batch,
    ChangeRecord,
    Delete,
    Edit,
    Kind,
    New,
    values_equal,
)
from .deducer import Deducer, create_deducer
from .engine import apply_change, compute_diff, revert_change
from .errors import ConfigurationError, MergeInconsistencyError, RewindError
from .history import History, initial_history
from .reducer import HistoryReducer, with_history
from .replay import apply_batch, apply_batches, revert_batch, revert_batches
from .store import Store

__version__ = "0.1.0"

__all__ = [
    # Change records
    "MISSING",
    "Kind",
    "Edit",
    "New",
    "Delete",
    "ArraySplice",
    "ChangeRecord",
    "Batch",
    "values_equal",
    # Diff engine
    "compute_diff",
    "apply_change",
    "revert_change",
    # Accumulator
    "DiffAccumulator",
    "merge_changes",
    # Replay
    "apply_batch",
    "revert_batch",
    "apply_batches",
    "revert_batches",
    # History
    "History",
    "initial_history",
    # Reducer and store
    "HistoryReducer",
    "with_history",
    "Store",
    "actions",
    "UNDO",
    "REDO",
    "JUMP",
    "CLEAR",
    "COMMIT",
    # Deducer
    "Deducer",
    "create_deducer",
    # Exceptions
    "RewindError",
    "ConfigurationError",
    "MergeInconsistencyError",
]

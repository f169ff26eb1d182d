"""
HistoryReducer - Undoable State Transitions
===========================================

Wraps a host reducer ``(state, action) -> state`` so that every transition
is diffed and recorded, and so that undo/redo/jump/clear actions travel
through the recorded history instead of reaching the host reducer.

The wrapped state is a dict: the host state plus a ``History`` stored under
``key`` (``"diff"`` by default).

Example:
    def counter(state, action):
        state = state or {"count": 0}
        if action["type"] == "increment":
            return {**state, "count": state["count"] + 1}
        return state

    reducer = with_history(counter, limit=50)
    state = reducer(None, {"type": "@@INIT"})
    state = reducer(state, {"type": "increment"})   # count == 1
    state = reducer(state, undo())                   # count == 0
    state = reducer(state, redo())                   # count == 1
"""

import copy
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from . import history as timeline
from .accumulator import DiffAccumulator, PathPredicate
from .actions import CLEAR, COMMIT, JUMP, REDO, UNDO, action_index, action_type
from .errors import ConfigurationError
from .history import History, coerce_history
from .replay import apply_diffs, revert_changes, revert_diffs

Reducer = Callable[[Any, Any], Any]

DEFAULT_KEY = "diff"


def split_state(raw_state: Any, key: str) -> Tuple[Optional[History], Dict[str, Any]]:
    """
    Separate the history field from the rest of a wrapped state.

    Returns:
        ``(history, state)`` where history is None when the field is absent

    Raises:
        ConfigurationError: If the field is present but malformed, or the
            wrapped state is not a mapping
    """
    if raw_state is None:
        return None, {}
    if not isinstance(raw_state, Mapping):
        raise ConfigurationError(
            f"Wrapped state must be a mapping to hold \"{key}\", "
            f"got {type(raw_state).__name__}"
        )
    state = {k: v for k, v in raw_state.items() if k != key}
    if key not in raw_state:
        return None, state
    return coerce_history(raw_state[key], key), state


class HistoryReducer:
    """
    Host reducer augmented with a navigable history of change batches.

    Thread Safety:
        Holds one ``DiffAccumulator``; calls are expected from a single
        writer (``Store`` serializes them with its lock).
    """

    def __init__(
        self,
        reducer: Reducer,
        key: str = DEFAULT_KEY,
        limit: int = 0,
        undo_type: Any = UNDO,
        redo_type: Any = REDO,
        jump_type: Any = JUMP,
        clear_type: Any = CLEAR,
        commit_type: Any = COMMIT,
        skip_recording: Optional[Callable[[Any], bool]] = None,
        initial_history: Optional[History] = None,
        ignore_initial: bool = True,
        flatten: Optional[PathPredicate] = None,
        prefilter: Optional[PathPredicate] = None,
    ):
        """
        Args:
            reducer: Host transition function
            key: Name of the history field in the wrapped state
            limit: Maximum number of batches kept per queue, 0 for unbounded
            undo_type, redo_type, jump_type, clear_type, commit_type: Action
                types handled by the wrapper itself
            skip_recording: ``skip_recording(action)`` returning True keeps the
                transition out of history; its changes are folded into the
                next recorded batch
            initial_history: History used when the wrapped state has none
            ignore_initial: Do not diff the first transition from ``None``
            flatten: Forwarded to ``DiffAccumulator``
            prefilter: Forwarded to ``DiffAccumulator``
        """
        if not callable(reducer):
            raise ConfigurationError("reducer must be callable")
        if limit < 0:
            raise ConfigurationError(f"limit must be >= 0, got {limit}")

        self.reducer = reducer
        self.key = key
        self.limit = limit
        self.undo_type = undo_type
        self.redo_type = redo_type
        self.jump_type = jump_type
        self.clear_type = clear_type
        self.commit_type = commit_type
        self.skip_recording = skip_recording or (lambda action: False)
        if initial_history is None:
            initial_history = timeline.initial_history(limit)
        self.initial_history = initial_history
        self.ignore_initial = ignore_initial
        self.accumulator = DiffAccumulator(flatten=flatten, prefilter=prefilter)

    def __call__(self, raw_state: Any, action: Any) -> Dict[str, Any]:
        history, lhs = split_state(raw_state, self.key)
        history = history or self.initial_history
        kind = action_type(action)

        if raw_state is not None:
            if kind == self.undo_type:
                return self._travel(lhs, history, -1)
            if kind == self.redo_type:
                return self._travel(lhs, history, 1)
            if kind == self.jump_type:
                return self._travel(lhs, history, action_index(action))
        if kind == self.clear_type:
            self.accumulator.clear()
            logging.debug(f"Cleared history '{self.key}'")
            return self._wrap(lhs, timeline.clear(history))
        if kind == self.commit_type:
            return self._wrap(lhs, self._commit(history))

        rhs = self.reducer(raw_state and lhs, action)
        next_state = rhs if rhs is not None else {}
        if not isinstance(next_state, Mapping):
            raise ConfigurationError(
                f"Reducer must return a mapping to hold \"{self.key}\", "
                f"got {type(next_state).__name__}"
            )

        if raw_state is not None or not self.ignore_initial:
            self.accumulator.diff(lhs, next_state)

        if self.skip_recording(action):
            return self._wrap(next_state, history)
        return self._wrap(next_state, self._commit(history))

    def _commit(self, history: History) -> History:
        batch = self.accumulator.changes
        self.accumulator.clear()
        if batch:
            logging.debug(f"Recording {len(batch)} change(s) in '{self.key}'")
        return timeline.record(history, batch)

    def _travel(self, state: Dict[str, Any], history: History, index: int) -> Dict[str, Any]:
        state = copy.deepcopy(state)
        pending = self.accumulator.changes
        if pending:
            # recorded batches only replay from the last recorded state
            logging.debug(
                f"Discarding {len(pending)} unrecorded change(s) "
                f"before travelling through '{self.key}'"
            )
            revert_changes(state, pending)
            self.accumulator.clear()

        diffs = timeline.get_slice(history, index)
        if index > 0:
            apply_diffs(state, diffs)
        elif index < 0:
            revert_diffs(state, diffs)
        logging.debug(f"Travelled {len(diffs)} step(s) through '{self.key}'")
        return self._wrap(state, timeline.jump(history, index))

    def _wrap(self, state: Mapping, history: History) -> Dict[str, Any]:
        wrapped = dict(state)
        wrapped[self.key] = history
        return wrapped


def with_history(reducer: Reducer, **options) -> HistoryReducer:
    """Wrap ``reducer``; see ``HistoryReducer`` for the options."""
    return HistoryReducer(reducer, **options)


__all__ = ["HistoryReducer", "with_history", "split_state", "DEFAULT_KEY"]

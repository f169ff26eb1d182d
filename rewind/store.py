"""
Rewind Store - A Minimal Undoable State Container
=================================================

``Store`` owns the current wrapped state of a ``HistoryReducer`` and is the
single writer for it: every action goes through ``dispatch()``, observers are
told about each new state, and the history travels with it.

Basic Usage
-----------

```python
from rewind import Store

def todos(state, action):
    state = state or {"items": []}
    if action["type"] == "add":
        return {**state, "items": state["items"] + [action["text"]]}
    return state

store = Store(todos, limit=100)
store.dispatch({"type": "add", "text": "write docs"})
store.undo()
store.state["items"]   # []
store.redo()
store.state["items"]   # ['write docs']
```

Grouping Transitions
--------------------

Everything dispatched inside ``batch()`` becomes one history entry, so a
single ``undo()`` reverts all of it:

```python
with store.batch():
    store.dispatch({"type": "add", "text": "a"})
    store.dispatch({"type": "add", "text": "b"})
store.undo()   # removes both
```
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List

from . import actions
from .history import History
from .reducer import HistoryReducer, Reducer

Observer = Callable[[Dict[str, Any]], None]

INIT = "@@rewind/INIT"


class Store:
    """
    Container for the state produced by a ``HistoryReducer``.

    Attributes:
        reducer: The wrapping ``HistoryReducer``
    """

    def __init__(self, reducer: Reducer, state: Any = None, **options):
        """
        Args:
            reducer: Host reducer to wrap
            state: Optional preloaded host state
            **options: Forwarded to ``HistoryReducer``
        """
        user_skip = options.pop("skip_recording", None)
        self._batch_depth = 0
        self._lock = threading.RLock()
        self._observers: List[Observer] = []

        def skip_recording(action: Any) -> bool:
            if self._batch_depth > 0:
                return True
            return bool(user_skip(action)) if user_skip is not None else False

        self.reducer = HistoryReducer(reducer, skip_recording=skip_recording, **options)
        self._state = self.reducer(state, {"type": INIT})

    # ========================================================================
    # STATE ACCESS
    # ========================================================================

    @property
    def state(self) -> Dict[str, Any]:
        """Current wrapped state, history field included."""
        return self._state

    @property
    def history(self) -> History:
        return self._state[self.reducer.key]

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    # ========================================================================
    # DISPATCH
    # ========================================================================

    def dispatch(self, action: Any) -> Dict[str, Any]:
        """Run ``action`` through the reducer and notify observers."""
        with self._lock:
            self._state = self.reducer(self._state, action)
            state = self._state
            for callback in list(self._observers):
                try:
                    callback(state)
                except Exception as e:
                    logging.error(f"Error in store observer {callback!r}: {e}")
            return state

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """
        Call ``callback(state)`` after every dispatch.

        Returns:
            A function removing the subscription
        """
        with self._lock:
            self._observers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._observers:
                    self._observers.remove(callback)

        return unsubscribe

    def undo(self) -> Dict[str, Any]:
        return self.dispatch(self._navigation(actions.undo(), self.reducer.undo_type))

    def redo(self) -> Dict[str, Any]:
        return self.dispatch(self._navigation(actions.redo(), self.reducer.redo_type))

    def jump(self, index: int) -> Dict[str, Any]:
        return self.dispatch(
            self._navigation(actions.jump(index), self.reducer.jump_type)
        )

    def clear_history(self) -> Dict[str, Any]:
        return self.dispatch(
            self._navigation(actions.clear(), self.reducer.clear_type)
        )

    def _navigation(self, action: Dict[str, Any], action_type: Any) -> Dict[str, Any]:
        action["type"] = action_type
        return action

    # ========================================================================
    # BATCHING
    # ========================================================================

    @contextmanager
    def batch(self) -> Iterator["Store"]:
        """
        Record every transition dispatched inside the block as one batch.

        Nested blocks join the outermost one.
        """
        with self._lock:
            self._batch_depth += 1
            try:
                yield self
            finally:
                self._batch_depth -= 1
                if self._batch_depth == 0:
                    self.dispatch({"type": self.reducer.commit_type})


__all__ = ["Store", "INIT"]

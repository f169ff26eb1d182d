"""
Deducer - Selecting Values Across the History
=============================================

A deducer answers "what did this selector return N steps ago?" without
keeping snapshots. Starting from the current state it reverts the batches in
``prev`` one at a time (or, going forward, applies the batches in ``next``),
calling the selector on every reconstructed state.

Offsets count outward from the current state: offset 0 is the state one
batch away, offset 1 two batches away, and so on. The current state itself
is never part of the result.

Selection options (mutually exclusive, precedence ``index > bounds > limit``):
- ``index``:  return only the value at that offset (None when out of range)
- ``bounds``: ``(lower, upper)`` inclusive offsets
- ``limit``:  the ``limit`` offsets nearest to the current state

Lists are returned in chronological order: oldest state first.

Memoization:
- Whole result: reused when called again with the same state object, the
  same batch queue object and equal selector arguments.
- Per offset: an LRU cache keyed by the distance from the far end of the
  queue and validated by the identity of the batch at that position and by
  the selector arguments, so recording new batches does not recompute
  results for older ones.

History transitions never mutate queues in place, so identity is enough to
know when a cached value is stale.

Example:
    previous_counts = create_deducer(lambda state: state["count"])
    previous_counts(store.state)   # e.g. [0, 1, 2]
"""

import copy
import logging
import threading
from typing import Any, Callable, List, Optional, Tuple

from cachetools import LRUCache

from .changes import values_equal
from .errors import ConfigurationError
from .reducer import DEFAULT_KEY, split_state
from .replay import apply_changes, revert_changes

Selector = Callable[..., Any]

DEFAULT_CACHE_SIZE = 1024


class Deducer:
    """
    Memoized selector over past (or undone) states.

    Thread Safety:
        Calls are serialized by a re-entrant lock; the cache belongs to this
        instance only.
    """

    def __init__(
        self,
        selector: Selector,
        key: str = DEFAULT_KEY,
        forward: bool = False,
        unique: bool = False,
        index: Optional[int] = None,
        bounds: Optional[Tuple[int, int]] = None,
        limit: Optional[int] = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        if not callable(selector):
            raise ConfigurationError("selector must be callable")
        if index is not None and index < 0:
            raise ConfigurationError(f"index must be >= 0, got {index}")
        if limit is not None and limit < 0:
            raise ConfigurationError(f"limit must be >= 0, got {limit}")
        if bounds is not None and len(bounds) != 2:
            raise ConfigurationError(f"bounds must be a (lower, upper) pair, got {bounds!r}")

        given = [opt for opt in (index, bounds, limit) if opt is not None]
        if len(given) > 1:
            logging.warning("index, range, or limit should not be combined")

        self.selector = selector
        self.key = key
        self.forward = forward
        self.unique = unique
        self.index = index
        self.bounds = bounds if index is None else None
        self.limit = limit if index is None and bounds is None else None

        self._step = apply_changes if forward else revert_changes
        self._lock = threading.RLock()
        self._offsets: LRUCache = LRUCache(maxsize=cache_size)
        self._result: Optional[Tuple[Any, Any, Tuple, Any]] = None

    def clear_cache(self) -> None:
        with self._lock:
            self._offsets.clear()
            self._result = None

    def _window(self, length: int) -> Tuple[int, int]:
        if self.index is not None:
            return self.index, self.index
        if self.bounds is not None:
            lower, upper = self.bounds
            return max(lower, 0), min(upper, length - 1)
        return 0, (self.limit or length) - 1

    def __call__(self, raw_state: Any, *args) -> Any:
        history, state = split_state(raw_state, self.key)
        if history is None:
            raise ConfigurationError(f'"{self.key}" is not a diff history object')

        diffs = history.next if self.forward else history.prev

        with self._lock:
            if self._result is not None:
                cached_state, cached_diffs, cached_args, result = self._result
                if (
                    cached_state is raw_state
                    and cached_diffs is diffs
                    and _same_args(cached_args, args)
                ):
                    return result

            state = copy.deepcopy(state)
            length = len(diffs)
            lower, upper = self._window(length)
            deduced: List[Any] = []
            found = None

            for i, batch in enumerate(diffs):
                if i > upper:
                    break
                # every batch is replayed so later offsets stay accurate
                self._step(state, batch)
                if i < lower:
                    continue

                cache_id = i - length
                cached = self._offsets.get(cache_id)
                if cached is not None and cached[0] is batch and _same_args(cached[1], args):
                    result = cached[2]
                else:
                    # the working state keeps changing, so keep a private copy
                    result = copy.deepcopy(self.selector(state, *args))
                    self._offsets[cache_id] = (batch, args, result)

                if self.index is not None:
                    found = result
                    break

                if self.unique and deduced and values_equal(deduced[-1], result):
                    continue
                deduced.append(result)

            if self.index is not None:
                outcome = found
            else:
                if not self.forward:
                    deduced.reverse()
                outcome = deduced

            self._result = (raw_state, diffs, args, outcome)
            return outcome


def _same_args(a: Tuple, b: Tuple) -> bool:
    return len(a) == len(b) and all(x is y or values_equal(x, y) for x, y in zip(a, b))


def create_deducer(selector: Selector, **options) -> Deducer:
    """Build a ``Deducer``; see its constructor for the options."""
    return Deducer(selector, **options)


__all__ = ["Deducer", "create_deducer", "DEFAULT_CACHE_SIZE"]

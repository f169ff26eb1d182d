"""
History - Bounded Undo/Redo Queues of Change Batches
====================================================

A ``History`` value holds two queues of batches:

- ``prev``: batches already applied to the current state, most recent first.
  Reverting ``prev[0]`` yields the state before the last recorded transition.
- ``next``: batches undone so far, the next one to redo first. Applying
  ``next[0]`` yields the state after that undo.

History values are immutable and every transition below returns a new value.
Batches keep their identity while they move between the queues, which is
what ``Deducer`` uses to reuse previously computed results.

Transitions:
    record(h, batch)   prepend to ``prev``, drop ``next``, enforce ``limit``
    undo(h)            move ``prev[0]`` to ``next``
    redo(h)            move ``next[0]`` to ``prev``
    jump_prev(h, n)    undo ``n`` steps (clamped)
    jump_next(h, n)    redo ``n`` steps (clamped)
    jump(h, index)     negative index undoes, positive redoes, zero is identity
    clear(h)           forget everything, keep ``limit``

The caller is responsible for bringing the state along: revert the batches of
``get_slice(h, index)`` for a negative index, apply them for a positive one.
"""

import threading
from dataclasses import dataclass, replace
from typing import Any, Mapping, Tuple

from cachetools import LRUCache

from .changes import Batch
from .errors import ConfigurationError


# ============================================================================
# HISTORY VALUE
# ============================================================================


@dataclass(frozen=True)
class History:
    """
    Immutable ``{prev, next, limit}`` record.

    Attributes:
        prev: Recorded batches, most recent first
        next: Undone batches, next to redo first
        limit: Maximum queue length, 0 for unbounded
    """

    prev: Tuple[Batch, ...] = ()
    next: Tuple[Batch, ...] = ()
    limit: int = 0

    def __post_init__(self):
        if self.limit < 0:
            raise ConfigurationError(f"History limit must be >= 0, got {self.limit}")

    @property
    def can_undo(self) -> bool:
        return bool(self.prev)

    @property
    def can_redo(self) -> bool:
        return bool(self.next)

    def __repr__(self) -> str:
        return f"History(prev={len(self.prev)}, next={len(self.next)}, limit={self.limit})"


def initial_history(limit: int = 0) -> History:
    """Empty history with the configured ``limit``."""
    return History(prev=(), next=(), limit=limit)


_coerced: LRUCache = LRUCache(maxsize=64)
_coerced_lock = threading.Lock()


def coerce_history(value: Any, key: str = "diff") -> History:
    """
    Accept a ``History`` or a mapping with ``prev`` and ``next`` queues.

    Mappings are treated as immutable values like ``History`` itself: the
    coerced result is cached by identity, so the same mapping always yields
    the same ``History`` and its batches keep their identity across calls.

    Raises:
        ConfigurationError: If ``value`` is neither; the message names ``key``
    """
    if isinstance(value, History):
        return value
    if isinstance(value, Mapping) and "prev" in value and "next" in value:
        with _coerced_lock:
            cached = _coerced.get(id(value))
            if cached is not None and cached[0] is value:
                return cached[1]
            history = History(
                prev=tuple(tuple(batch) for batch in value["prev"]),
                next=tuple(tuple(batch) for batch in value["next"]),
                limit=value.get("limit", 0) or 0,
            )
            # the source is held alongside so its id cannot be reused
            _coerced[id(value)] = (value, history)
            return history
    raise ConfigurationError(f'"{key}" is not a diff history object')


def _bound(limit: int, length: int) -> int:
    return limit or length


# ============================================================================
# TRANSITIONS
# ============================================================================


def record(history: History, batch: Batch) -> History:
    """Record a new batch; empty batches leave the history untouched."""
    if not batch:
        return history
    prev = (tuple(batch),) + history.prev
    return replace(
        history,
        prev=prev[: _bound(history.limit, len(prev))],
        next=(),
    )


def jump_prev(history: History, offset: int = 1) -> History:
    """Move up to ``offset`` batches from ``prev`` to ``next``."""
    offset = max(0, min(len(history.prev), offset))
    if offset == 0:
        return history
    moved = tuple(reversed(history.prev[:offset]))
    nxt = moved + history.next
    return replace(
        history,
        prev=history.prev[offset:],
        next=nxt[: _bound(history.limit, len(nxt))],
    )


def jump_next(history: History, offset: int = 1) -> History:
    """Move up to ``offset`` batches from ``next`` back to ``prev``."""
    offset = max(0, min(len(history.next), offset))
    if offset == 0:
        return history
    moved = tuple(reversed(history.next[:offset]))
    prev = moved + history.prev
    return replace(
        history,
        prev=prev[: _bound(history.limit, len(prev))],
        next=history.next[offset:],
    )


def undo(history: History) -> History:
    return jump_prev(history, 1)


def redo(history: History) -> History:
    return jump_next(history, 1)


def jump(history: History, index: int) -> History:
    """Undo ``-index`` steps when negative, redo ``index`` steps when positive."""
    if index < 0:
        return jump_prev(history, abs(index))
    if index > 0:
        return jump_next(history, index)
    return history


def get_slice(history: History, index: int) -> Tuple[Batch, ...]:
    """
    Batches a ``jump(history, index)`` moves, in the order to replay them.

    Negative: ``prev[:|index|]`` to revert, most recent first.
    Positive: ``next[:index]`` to apply, next to redo first.
    """
    if index > 0:
        return history.next[:index]
    if index < 0:
        return history.prev[: abs(index)]
    return ()


def clear(history: History) -> History:
    """Drop all batches; the current state is not touched."""
    return replace(history, prev=(), next=())


__all__ = [
    "History",
    "initial_history",
    "coerce_history",
    "record",
    "undo",
    "redo",
    "jump_prev",
    "jump_next",
    "jump",
    "get_slice",
    "clear",
]

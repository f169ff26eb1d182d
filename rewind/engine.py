"""
Diff Engine - Compute, Apply and Revert Change Records
======================================================

Structural diff over plain Python data (dicts, lists and scalars) that
reports each difference as a change record.

Walk order:
- dict keys are visited in ``lhs`` order, then keys only present in ``rhs``
- lists are compared index by index; trailing removals are reported as
  ``ArraySplice(path, i, Delete)`` from the highest index down and trailing
  additions as ``ArraySplice(path, i, New)`` from the lowest index up
- values of different container kinds produce a single Edit
- anything that is not a dict or a list (numbers, strings, tuples, sets,
  numpy arrays, ...) is compared as a whole leaf with ``values_equal``

With that ordering, applying a batch front to back and reverting it back to
front never shifts an index that a later record still relies on.

Usage:
    records = compute_diff({"a": 1}, {"a": 2})
    # [Edit(a: 1 → 2)]

    target = {"a": 1}
    for record in records:
        apply_change(target, record)
    # target == {"a": 2}
"""

import copy
from typing import Any, Callable, Hashable, List, Optional

from .changes import (
    MISSING,
    ArraySplice,
    ChangeRecord,
    Delete,
    Edit,
    Kind,
    New,
    Path,
    values_equal,
)

ShouldSkip = Callable[[Path, Hashable], bool]
Sink = Callable[[ChangeRecord], None]


# ============================================================================
# DIFF
# ============================================================================


def _container_kind(value: Any) -> Optional[type]:
    if isinstance(value, dict):
        return dict
    if isinstance(value, list):
        return list
    return None


def compute_diff(
    lhs: Any,
    rhs: Any,
    should_skip: Optional[ShouldSkip] = None,
    sink: Optional[Sink] = None,
) -> List[ChangeRecord]:
    """
    Compute the structural difference between ``lhs`` and ``rhs``.

    Args:
        lhs: Previous value
        rhs: Next value
        should_skip: Called as ``should_skip(parent_path, key)`` before
            descending into a key; returning True ignores that subtree
        sink: Receives every record as soon as it is produced

    Returns:
        The records in emission order
    """
    records: List[ChangeRecord] = []

    def emit(record: ChangeRecord) -> None:
        records.append(record)
        if sink is not None:
            sink(record)

    _walk(lhs, rhs, (), should_skip, emit)
    return records


def _walk(lhs: Any, rhs: Any, path: Path, should_skip, emit) -> None:
    if lhs is MISSING:
        if rhs is not MISSING:
            emit(New(path, rhs))
        return
    if rhs is MISSING:
        emit(Delete(path, lhs))
        return

    kind = _container_kind(lhs)
    if kind is not _container_kind(rhs):
        emit(Edit(path, lhs, rhs))
        return

    if kind is dict:
        for key in lhs:
            if should_skip is not None and should_skip(path, key):
                continue
            _walk(lhs[key], rhs.get(key, MISSING), path + (key,), should_skip, emit)
        for key in rhs:
            if key in lhs:
                continue
            if should_skip is not None and should_skip(path, key):
                continue
            _walk(MISSING, rhs[key], path + (key,), should_skip, emit)
    elif kind is list:
        common = min(len(lhs), len(rhs))
        for i in range(common):
            if should_skip is not None and should_skip(path, i):
                continue
            _walk(lhs[i], rhs[i], path + (i,), should_skip, emit)
        for i in range(len(lhs) - 1, common - 1, -1):
            emit(ArraySplice(path, i, Delete((), lhs[i])))
        for i in range(common, len(rhs)):
            emit(ArraySplice(path, i, New((), rhs[i])))
    elif not values_equal(lhs, rhs):
        emit(Edit(path, lhs, rhs))


# ============================================================================
# APPLY / REVERT
# ============================================================================


def _resolve_parent(target: Any, path: Path, create: bool) -> Any:
    """Walk to the container holding the last key of ``path``."""
    container = target
    for depth, key in enumerate(path[:-1]):
        if isinstance(container, dict):
            if key not in container:
                if not create:
                    raise KeyError(f"Path {path!r} not found in target")
                # the next key decides whether the missing container is a list
                container[key] = [] if isinstance(path[depth + 1], int) else {}
            container = container[key]
        elif isinstance(container, list):
            container = container[key]
        else:
            raise TypeError(
                f"Cannot descend into {type(container).__name__} at {path[:depth + 1]!r}"
            )
    return container


def _write(container: Any, key: Hashable, value: Any) -> None:
    """Assign ``value`` at ``key``; writing MISSING removes the key."""
    if value is MISSING:
        if isinstance(container, list):
            if 0 <= key < len(container):
                del container[key]
        else:
            container.pop(key, None)
        return
    value = copy.deepcopy(value)
    if isinstance(container, list) and key >= len(container):
        container.append(value)
    else:
        container[key] = value


def _insert(container: Any, key: Hashable, value: Any) -> None:
    if isinstance(container, list):
        container.insert(key, copy.deepcopy(value))
    else:
        _write(container, key, value)


def _apply_array(array: list, index: int, item: ChangeRecord) -> None:
    if item.kind is Kind.ARRAY:
        _apply_array(array[index], item.index, item.item)
    elif item.kind is Kind.DELETE:
        del array[index]
    elif item.kind is Kind.NEW:
        _insert(array, index, item.rhs)
    else:
        _write(array, index, item.rhs)


def _revert_array(array: list, index: int, item: ChangeRecord) -> None:
    if item.kind is Kind.ARRAY:
        _revert_array(array[index], item.index, item.item)
    elif item.kind is Kind.NEW:
        del array[index]
    elif item.kind is Kind.DELETE:
        _insert(array, index, item.lhs)
    else:
        _write(array, index, item.lhs)


def apply_change(target: Any, record: ChangeRecord) -> Any:
    """
    Apply ``record`` to ``target`` in place and return ``target``.

    Raises:
        ValueError: If the record has an empty path (the root cannot be
            replaced in place)
    """
    if record.kind is Kind.ARRAY:
        array = _resolve_parent(target, record.path + (record.index,), create=True)
        _apply_array(array, record.index, record.item)
        return target

    if not record.path:
        raise ValueError(f"Cannot apply {record!r} in place: path is empty")

    parent = _resolve_parent(target, record.path, create=True)
    key = record.path[-1]
    if record.kind is Kind.DELETE:
        _write(parent, key, MISSING)
    elif record.kind is Kind.NEW:
        _insert(parent, key, record.rhs)
    else:
        _write(parent, key, record.rhs)
    return target


def revert_change(target: Any, record: ChangeRecord) -> Any:
    """
    Undo ``record`` on ``target`` in place and return ``target``.

    Raises:
        ValueError: If the record has an empty path
    """
    if record.kind is Kind.ARRAY:
        array = _resolve_parent(target, record.path + (record.index,), create=False)
        _revert_array(array, record.index, record.item)
        return target

    if not record.path:
        raise ValueError(f"Cannot revert {record!r} in place: path is empty")

    parent = _resolve_parent(target, record.path, create=False)
    key = record.path[-1]
    if record.kind is Kind.NEW:
        _write(parent, key, MISSING)
    elif record.kind is Kind.DELETE:
        _insert(parent, key, record.lhs)
    else:
        _write(parent, key, record.lhs)
    return target


__all__ = ["compute_diff", "apply_change", "revert_change"]

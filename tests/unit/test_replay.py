"""Unit tests for applying and reverting whole batches."""

import copy

import pytest

from rewind.accumulator import DiffAccumulator
from rewind.changes import ArraySplice, Edit, New
from rewind.replay import (
    apply_batch,
    apply_batches,
    apply_changes,
    revert_batch,
    revert_batches,
    revert_changes,
)

STATES = [
    {"a": 1, "list": [1, 2, 3], "nested": {"x": {"y": "z"}}},
    {"a": 2, "list": [1], "nested": {"x": {"y": "w"}, "new": [0]}},
    {"a": 2, "list": [4, 5, 6, 7], "nested": {}},
    {"b": None, "list": [], "nested": {"x": 1}},
]


@pytest.mark.unit
@pytest.mark.replay
@pytest.mark.parametrize("lhs, rhs", list(zip(STATES, STATES[1:])))
def test_revert_is_the_inverse_of_apply(lhs, rhs):
    """revert_batch(apply_batch(s, b), b) == s"""
    batch = DiffAccumulator().diff(lhs, rhs)

    applied = apply_batch(lhs, batch)
    assert applied == rhs
    assert revert_batch(applied, batch) == lhs


@pytest.mark.unit
@pytest.mark.replay
def test_inverse_law_holds_for_batches_spanning_several_diffs():
    """A batch merged from several transitions still inverts cleanly"""
    accum = DiffAccumulator()
    for lhs, rhs in zip(STATES, STATES[1:]):
        accum.diff(lhs, rhs)
    batch = accum.changes

    assert apply_batch(STATES[0], batch) == STATES[-1]
    assert revert_batch(STATES[-1], batch) == STATES[0]


@pytest.mark.unit
@pytest.mark.replay
def test_copying_variants_leave_the_input_untouched():
    state = {"a": 1, "list": [1]}
    snapshot = copy.deepcopy(state)
    batch = (Edit(("a",), 1, 2), ArraySplice(("list",), 1, New((), 2)))

    result = apply_batch(state, batch)

    assert state == snapshot
    assert result == {"a": 2, "list": [1, 2]}
    assert result["list"] is not state["list"]


@pytest.mark.unit
@pytest.mark.replay
def test_in_place_variants_mutate_and_return_the_target():
    target = {"a": 1}

    assert apply_changes(target, (Edit(("a",), 1, 2),)) is target
    assert target == {"a": 2}
    assert revert_changes(target, (Edit(("a",), 1, 2),)) is target
    assert target == {"a": 1}


@pytest.mark.unit
@pytest.mark.replay
def test_none_batch_is_a_no_op():
    target = {"a": 1}

    assert apply_changes(target, None) == {"a": 1}
    assert revert_changes(target, None) == {"a": 1}


@pytest.mark.unit
@pytest.mark.replay
def test_batches_fold_in_order():
    """revert_batches takes batches most recent first, apply_batches oldest first"""
    first = (Edit(("n",), 0, 1),)
    second = (Edit(("n",), 1, 2),)

    assert apply_batches({"n": 0}, [first, second]) == {"n": 2}
    assert revert_batches({"n": 2}, [second, first]) == {"n": 0}

"""Unit tests for the diff engine and its apply/revert primitives."""

import copy

import numpy as np
import pytest

from rewind.changes import ArraySplice, Delete, Edit, New
from rewind.engine import apply_change, compute_diff, revert_change


def apply_all(target, records):
    for record in records:
        apply_change(target, record)
    return target


def revert_all(target, records):
    for record in reversed(records):
        revert_change(target, record)
    return target


class TestComputeDiff:
    """Records emitted by compute_diff."""

    def test_identical_values_produce_no_records(self):
        value = {"a": 1, "b": [1, 2, {"c": "x"}], "d": None}

        assert compute_diff(value, copy.deepcopy(value)) == []

    def test_scalar_edit(self):
        assert compute_diff({"a": 1}, {"a": 2}) == [Edit(("a",), 1, 2)]

    def test_added_and_removed_keys(self):
        records = compute_diff({"a": 1, "b": 2}, {"a": 1, "c": 3})

        assert records == [Delete(("b",), 2), New(("c",), 3)]

    def test_keys_follow_lhs_order_then_new_keys(self):
        lhs = {"string": "hello", "number": 0, "array": ["a"]}
        rhs = {"string": "world", "array": ["A", "b"], "extra": True}

        records = compute_diff(lhs, rhs)

        assert records == [
            Edit(("string",), "hello", "world"),
            Delete(("number",), 0),
            Edit(("array", 0), "a", "A"),
            ArraySplice(("array",), 1, New((), "b")),
            New(("extra",), True),
        ]

    def test_nested_paths(self):
        records = compute_diff({"user": {"name": "Ann"}}, {"user": {"name": "Bob"}})

        assert records == [Edit(("user", "name"), "Ann", "Bob")]

    def test_list_removals_are_emitted_from_the_end(self):
        records = compute_diff({"l": [1, 2, 3, 4]}, {"l": [1, 2]})

        assert records == [
            ArraySplice(("l",), 3, Delete((), 4)),
            ArraySplice(("l",), 2, Delete((), 3)),
        ]

    def test_list_additions_are_emitted_in_order(self):
        records = compute_diff({"l": [1]}, {"l": [1, 2, 3]})

        assert records == [
            ArraySplice(("l",), 1, New((), 2)),
            ArraySplice(("l",), 2, New((), 3)),
        ]

    def test_container_kind_change_is_a_single_edit(self):
        records = compute_diff({"v": [1, 2]}, {"v": {"0": 1}})

        assert records == [Edit(("v",), [1, 2], {"0": 1})]

    def test_tuples_and_arrays_are_leaves(self):
        records = compute_diff(
            {"t": (1, 2), "arr": np.array([1, 2])},
            {"t": (1, 3), "arr": np.array([1, 2])},
        )

        assert records == [Edit(("t",), (1, 2), (1, 3))]

    def test_bool_to_int_is_an_edit(self):
        assert compute_diff({"flag": True}, {"flag": 1}) == [Edit(("flag",), True, 1)]

    def test_should_skip_prunes_subtrees(self):
        seen = []

        def should_skip(path, key):
            seen.append(path + (key,))
            return key == "ignored"

        records = compute_diff(
            {"ignored": {"x": 1}, "kept": 1},
            {"ignored": {"x": 2}, "kept": 2},
            should_skip,
        )

        assert records == [Edit(("kept",), 1, 2)]
        assert ("ignored", "x") not in seen

    def test_sink_receives_records_as_they_are_emitted(self):
        received = []

        records = compute_diff({"a": 1, "b": 1}, {"a": 2, "b": 2}, sink=received.append)

        assert received == records


class TestApplyRevert:
    """apply_change / revert_change mutate the target in place."""

    @pytest.mark.parametrize(
        "lhs, rhs",
        [
            ({"a": 1}, {"a": 2}),
            ({"a": 1, "b": 2}, {"a": 1}),
            ({"a": 1}, {"a": 1, "b": {"c": [1, 2]}}),
            ({"l": [1, 2, 3, 4]}, {"l": [1, 5]}),
            ({"l": [1]}, {"l": [0, 1, 2, 3]}),
            ({"n": {"deep": [{"x": 1}, {"x": 2}]}}, {"n": {"deep": [{"x": 3}]}}),
            ({"v": [1, 2]}, {"v": "scalar"}),
        ],
    )
    def test_apply_then_revert_round_trips(self, lhs, rhs):
        """Applying reaches rhs and reverting in reverse returns to lhs"""
        records = compute_diff(lhs, rhs)
        target = copy.deepcopy(lhs)

        apply_all(target, records)
        assert target == rhs

        revert_all(target, records)
        assert target == lhs

    def test_applied_values_are_copies(self):
        """The target never aliases values held by a record"""
        record = New(("cfg",), {"depth": 1})
        target = {}

        apply_change(target, record)
        target["cfg"]["depth"] = 99

        assert record.rhs == {"depth": 1}

    def test_missing_parent_containers_are_created(self):
        target = {}

        apply_change(target, New(("a", "b"), 1))

        assert target == {"a": {"b": 1}}

    def test_root_level_record_cannot_be_applied(self):
        with pytest.raises(ValueError, match="path is empty"):
            apply_change({}, Edit((), {}, {"a": 1}))

    def test_revert_of_unknown_path_raises(self):
        with pytest.raises(KeyError):
            revert_change({}, Edit(("a", "b"), 1, 2))

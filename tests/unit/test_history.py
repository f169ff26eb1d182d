"""Unit tests for History values and their transitions."""

import pytest

from rewind import history as timeline
from rewind.changes import Edit
from rewind.errors import ConfigurationError
from rewind.history import History, coerce_history, initial_history


def batch(name, lhs=0, rhs=1):
    return (Edit((name,), lhs, rhs),)


X, Y, Z = batch("x"), batch("y"), batch("z")


class TestRecord:
    def test_record_prepends_and_drops_next(self):
        h = History(prev=(X,), next=(Y,))

        recorded = timeline.record(h, Z)

        assert recorded.prev == (Z, X)
        assert recorded.next == ()

    def test_empty_batch_is_a_no_op(self):
        h = History(prev=(X,), next=(Y,))

        assert timeline.record(h, ()) is h

    def test_limit_keeps_most_recent_batches(self):
        """limit=2 after x, y, z keeps z then y"""
        h = initial_history(limit=2)
        for b in (X, Y, Z):
            h = timeline.record(h, b)

        assert h.prev == (Z, Y)

    def test_history_bound(self):
        h = initial_history(limit=3)
        for i in range(10):
            h = timeline.record(h, batch(f"k{i}"))

        assert len(h.prev) == 3

    def test_unbounded_history(self):
        h = initial_history()
        for i in range(50):
            h = timeline.record(h, batch(f"k{i}"))

        assert len(h.prev) == 50

    def test_batch_identity_is_preserved(self):
        h = timeline.record(initial_history(), X)

        assert h.prev[0] is X

    def test_transitions_never_mutate_the_original(self):
        h = History(prev=(X,))

        timeline.record(h, Y)
        timeline.undo(h)

        assert h == History(prev=(X,))


class TestNavigation:
    def test_undo_and_redo_move_one_batch(self):
        h = History(prev=(Y, X))

        undone = timeline.undo(h)
        assert undone.prev == (X,)
        assert undone.next == (Y,)

        redone = timeline.redo(undone)
        assert redone == h

    def test_jump_prev_reverses_moved_batches(self):
        h = History(prev=(Z, Y, X))

        jumped = timeline.jump(h, -2)

        assert jumped.prev == (X,)
        assert jumped.next == (Y, Z)
        assert timeline.get_slice(h, -2) == (Z, Y)

    def test_jump_next_mirrors_jump_prev(self):
        h = History(prev=(X,), next=(Y, Z))

        jumped = timeline.jump(h, 2)

        assert jumped.prev == (Z, Y, X)
        assert jumped.next == ()
        assert timeline.get_slice(h, 2) == (Y, Z)

    def test_jump_zero_is_identity(self):
        h = History(prev=(X,), next=(Y,))

        assert timeline.jump(h, 0) is h
        assert timeline.get_slice(h, 0) == ()

    @pytest.mark.edge_case
    def test_navigation_clamps_to_available_history(self):
        h = History(prev=(Y, X))

        assert timeline.jump_prev(h, 10) == History(prev=(), next=(X, Y))
        assert timeline.jump_next(h, 5) is h
        assert timeline.undo(History()) == History()
        assert timeline.get_slice(h, -10) == (Y, X)

    def test_next_side_respects_limit(self):
        h = History(prev=(Z,), next=(Y, X), limit=2)

        undone = timeline.undo(h)

        assert undone.next == (Z, Y)

    def test_redo_trail_is_invalidated_by_record(self):
        h = timeline.undo(History(prev=(Y, X)))
        assert h.can_redo

        h = timeline.record(h, Z)

        assert h.next == ()
        assert not h.can_redo

    def test_clear_keeps_limit(self):
        h = History(prev=(X,), next=(Y,), limit=7)

        assert timeline.clear(h) == History(limit=7)


class TestValidation:
    def test_negative_limit_is_rejected(self):
        with pytest.raises(ConfigurationError):
            History(limit=-1)

    def test_coerce_accepts_mappings(self):
        h = coerce_history({"prev": [[Edit(("a",), 1, 2)]], "next": []})

        assert h.prev == ((Edit(("a",), 1, 2),),)
        assert h.next == ()

    def test_coerce_returns_the_same_history_for_the_same_mapping(self):
        value = {"prev": [[Edit(("a",), 1, 2)]], "next": []}

        first = coerce_history(value)

        assert coerce_history(value) is first
        assert coerce_history(dict(value)) == first

    def test_coerce_rejects_malformed_values_naming_the_key(self):
        with pytest.raises(ConfigurationError, match='"_diff_"'):
            coerce_history({"prev": []}, "_diff_")

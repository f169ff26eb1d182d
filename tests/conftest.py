"""
Shared pytest fixtures and configuration for rewind tests.
"""

import pytest

from rewind import DiffAccumulator, Edit, History


def counter_reducer(state, action):
    """Host reducer used across the reducer, store and deducer tests."""
    state = state if state is not None else {"count": 0, "log": []}
    kind = action.get("type")
    if kind == "increment":
        return {**state, "count": state["count"] + 1}
    if kind == "set":
        return {**state, "count": action["value"]}
    if kind == "append":
        return {**state, "log": state["log"] + [action["value"]]}
    if kind == "pop":
        return {**state, "log": state["log"][:-1]}
    return state


@pytest.fixture
def accum():
    """Provide a fresh DiffAccumulator with default options."""
    return DiffAccumulator()


@pytest.fixture
def counter():
    return counter_reducer


@pytest.fixture
def number_history_state():
    """
    State whose ``number`` went 0 → 5 → 15 → 10 → 0.

    ``prev`` is most recent first, as a History stores it.
    """
    return {
        "number": 0,
        "diff": History(
            prev=(
                (Edit(("number",), 10, 0),),
                (Edit(("number",), 15, 10),),
                (Edit(("number",), 5, 15),),
                (Edit(("number",), 0, 5),),
            ),
            next=(),
        ),
    }

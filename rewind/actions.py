"""
Actions understood by ``HistoryReducer``.

Each creator returns a plain dict action; the type strings can be replaced
per reducer through its ``*_type`` options.
"""

from typing import Any, Dict

UNDO = "@@rewind/UNDO"
REDO = "@@rewind/REDO"
JUMP = "@@rewind/JUMP"
CLEAR = "@@rewind/CLEAR"
COMMIT = "@@rewind/COMMIT"


def undo() -> Dict[str, Any]:
    return {"type": UNDO}


def redo() -> Dict[str, Any]:
    return {"type": REDO}


def jump(index: int) -> Dict[str, Any]:
    """Negative ``index`` steps back, positive steps forward."""
    return {"type": JUMP, "index": index}


def clear() -> Dict[str, Any]:
    return {"type": CLEAR}


def commit() -> Dict[str, Any]:
    """Record changes held back by ``skip_recording`` as one batch."""
    return {"type": COMMIT}


def action_type(action: Any) -> Any:
    """Read the type of a dict action or of an object with a ``type`` attribute."""
    if isinstance(action, dict):
        return action.get("type")
    return getattr(action, "type", None)


def action_index(action: Any) -> int:
    if isinstance(action, dict):
        return int(action.get("index", 0) or 0)
    return int(getattr(action, "index", 0) or 0)


__all__ = [
    "UNDO",
    "REDO",
    "JUMP",
    "CLEAR",
    "COMMIT",
    "undo",
    "redo",
    "jump",
    "clear",
    "commit",
    "action_type",
    "action_index",
]

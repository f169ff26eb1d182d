"""
Rewind Errors
=============

Exception hierarchy shared by the accumulator, history and deducer modules.

Navigation past the available history is not an error: it clamps.
"""


# ============================================================================
# EXCEPTIONS
# ============================================================================


class RewindError(Exception):
    """Base class for all rewind errors."""

    pass


class ConfigurationError(RewindError, ValueError):
    """Raised when the history field or an option is missing or malformed."""

    pass


class MergeInconsistencyError(RewindError):
    """
    Raised when two changes at the same path cannot be collapsed into one.

    The canonical case is a delete followed by another delete at the same
    path, which means the same record was pushed twice.
    """

    def __init__(self, path, first, second):
        self.path = path
        self.first = first
        self.second = second
        path_str = "/".join(str(p) for p in path) or "(root)"
        super().__init__(
            f"Cannot merge {first.kind.name} then {second.kind.name} at {path_str}"
        )


__all__ = ["RewindError", "ConfigurationError", "MergeInconsistencyError"]

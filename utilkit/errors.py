"""Error types and shared argument validation."""

from __future__ import annotations

from typing import Any


class InvalidArgumentError(ValueError):
    """Raised when a constructor or helper receives an unusable argument."""


def validate_positive_int(value: Any, name: str) -> int:
    """
    Return `value` if it is a positive integer, otherwise raise.

    Parameters
    ----------
    value : Any
        Candidate value
    name : str
        Argument name used in the error message

    Raises
    ------
    InvalidArgumentError
        If `value` is not an ``int`` (``bool`` is rejected) or is < 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(
            f"{name} must be a positive integer, got {type(value).__name__}"
        )
    if value <= 0:
        raise InvalidArgumentError(f"{name} must be a positive integer, got {value}")
    return value

"""Validation errors raised by the timer and hydration tracker."""

from __future__ import annotations


class LiveBetterError(ValueError):
    """Base class for rejected mutations."""


class InvalidConfig(LiveBetterError):
    """A duration or goal was non-positive or not an integer."""


class InvalidAmount(LiveBetterError):
    """An intake amount was non-positive or not an integer."""


def require_positive_int(value: object, name: str, error: type[LiveBetterError]) -> int:
    """Return ``value`` if it is a positive int, otherwise raise ``error``."""
    # bool is an int subclass but never a valid quantity
    if isinstance(value, bool) or not isinstance(value, int):
        raise error(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise error(f"{name} must be positive, got {value}")
    return value

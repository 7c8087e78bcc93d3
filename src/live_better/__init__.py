"""Live Better - focus timer and hydration tracker."""

__version__ = "0.1.0"

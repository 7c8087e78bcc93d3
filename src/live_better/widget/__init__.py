"""Host-side glue that ticks the timer and renders both components."""

from live_better.widget.controller import WidgetController, WidgetState

__all__ = [
    "WidgetController",
    "WidgetState",
]

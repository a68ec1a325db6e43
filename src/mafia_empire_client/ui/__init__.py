"""Headless UI bindings for the interaction guards."""

from .button import AsyncActionButton, ThrottleButton
from .input import ThrottledInput

__all__ = [
    "AsyncActionButton",
    "ThrottleButton",
    "ThrottledInput",
]

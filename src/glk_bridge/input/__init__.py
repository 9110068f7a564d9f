"""Asynchronous input bridging."""

from .bridge import (
    CharInputCompleted,
    InputBridge,
    InputCompletion,
    InputRequest,
    LineInputCompleted,
)

__all__ = [
    "CharInputCompleted",
    "InputBridge",
    "InputCompletion",
    "InputRequest",
    "LineInputCompleted",
]

"""Boundary types for the presentation layer the adapter renders into."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

LineCallback = Callable[[str], Any]


class Presentation(Protocol):
    """What the adapter needs from whatever draws the game."""

    def print(self, text: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def handle_error(self, text: str) -> None:
        ...

    def wait_for_input(self, callback: LineCallback) -> None:
        """Register a one-shot handler invoked with the next submitted line."""
        ...


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class PresentationHooks:
    """Callable-backed ``Presentation`` for hosts that prefer plain functions."""

    print_text: Callable[[str], None]
    wait_for_input_hook: Callable[[LineCallback], None]
    clear_hook: Callable[[], None] = _noop
    error_hook: Callable[[str], None] = _noop

    def print(self, text: str) -> None:
        self.print_text(text)

    def clear(self) -> None:
        self.clear_hook()

    def handle_error(self, text: str) -> None:
        self.error_hook(text)

    def wait_for_input(self, callback: LineCallback) -> None:
        self.wait_for_input_hook(callback)


__all__ = ["LineCallback", "Presentation", "PresentationHooks"]

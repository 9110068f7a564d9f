"""Window model: an output surface that owns exactly one stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import MutableSequence, Optional

from glk_bridge.constants import InputKind, WindowType

from .stream import Stream, StreamKind


@dataclass(eq=False)
class Window:
    kind: WindowType = WindowType.TEXT_BUFFER
    rock: int = 0
    stream: Stream = field(default_factory=lambda: Stream(kind=StreamKind.WINDOW))
    parent: Optional["Window"] = None
    pending_input: InputKind = InputKind.NONE
    line_buffer: Optional[MutableSequence[int]] = None
    closed: bool = False

    @classmethod
    def open(
        cls, kind: WindowType, rock: int = 0, *, parent: Optional["Window"] = None
    ) -> "Window":
        return cls(
            kind=kind,
            rock=rock,
            stream=Stream(rock=rock, kind=StreamKind.WINDOW),
            parent=parent,
        )

    @property
    def is_text_buffer(self) -> bool:
        return self.kind == WindowType.TEXT_BUFFER

    def mark_pending(
        self, kind: InputKind, buffer: Optional[MutableSequence[int]] = None
    ) -> None:
        self.pending_input = kind
        self.line_buffer = buffer if kind == InputKind.LINE else None

    def clear_pending(self) -> None:
        self.pending_input = InputKind.NONE
        self.line_buffer = None


__all__ = ["Window"]

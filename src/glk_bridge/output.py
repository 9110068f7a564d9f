"""Shared output accumulator flushed to the presentation at checkpoints."""

from __future__ import annotations

from typing import List

from glk_bridge.runtime import telemetry

from .presentation import Presentation


class OutputBuffer:
    """Collects text for the current stream until a checkpoint flushes it.

    Nothing is ever flushed implicitly; the adapter decides when.
    """

    def __init__(self, presentation: Presentation) -> None:
        self._presentation = presentation
        self._chunks: List[str] = []
        self.flush_count = 0

    def append(self, text: str) -> None:
        if text:
            self._chunks.append(text)

    @property
    def pending(self) -> str:
        return "".join(self._chunks)

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)

    def __bool__(self) -> bool:
        return bool(self._chunks)

    def flush(self, *, reason: str = "update") -> str:
        """Send buffered text to the presentation and reset; return what was sent."""

        if not self._chunks:
            return ""
        text = self.pending
        self._chunks.clear()
        self.flush_count += 1
        self._presentation.print(text)
        telemetry.record_event(
            "output.flush",
            level="debug",
            data={"reason": reason, "chars": len(text)},
        )
        return text


__all__ = ["OutputBuffer"]

"""Fixed-slot records the adapter writes results into for the VM."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from .constants import EventType


class _SlotRecord:
    """Index access over the dataclass fields, in declaration order."""

    def _slot_name(self, index: int) -> str:
        names = [item.name for item in fields(self)]  # type: ignore[arg-type]
        if not 0 <= index < len(names):
            raise IndexError(
                f"{type(self).__name__} has {len(names)} slots, got index {index}"
            )
        return names[index]

    def get_field(self, index: int) -> Any:
        return getattr(self, self._slot_name(index))

    def set_field(self, index: int, value: Any) -> None:
        setattr(self, self._slot_name(index), value)

    def as_tuple(self) -> tuple[Any, ...]:
        return tuple(getattr(self, item.name) for item in fields(self))  # type: ignore[arg-type]


@dataclass(slots=True)
class EventResult(_SlotRecord):
    """Event structure filled by ``glk_select``.

    ``length`` is val1 and ``terminator`` is val2 in Glk terms. For line input
    the length is patched in later, once the host actually delivers the line.
    """

    kind: int = EventType.NONE
    window: Any = None
    length: int = 0
    terminator: int = 0

    def clear(self) -> None:
        self.kind = EventType.NONE
        self.window = None
        self.length = 0
        self.terminator = 0


@dataclass(slots=True)
class StreamResult(_SlotRecord):
    """Counters reported when a stream or window closes."""

    read_count: int = 0
    write_count: int = 0


@dataclass(slots=True)
class RefBox:
    value: Any = 0

    def get_value(self) -> Any:
        return self.value

    def set_value(self, value: Any) -> None:
        self.value = value


__all__ = ["EventResult", "StreamResult", "RefBox"]

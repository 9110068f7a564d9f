"""Stream model: a cursor over either a growable sequence or a fixed buffer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, MutableSequence, Optional

from glk_bridge.constants import EOF, NEWLINE, FileMode, SeekMode

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from glk_bridge.storage import FileRef


class StreamKind(str, Enum):
    WINDOW = "window"
    MEMORY = "memory"
    FILE = "file"


def to_units(text: str, *, unicode: bool) -> List[int]:
    """Convert text into the integer units a stream stores.

    Byte streams hold Latin-1 values; anything wider becomes ``?``.
    """

    if unicode:
        return [ord(ch) for ch in text]
    return [code if code <= 0xFF else ord("?") for code in map(ord, text)]


def units_to_text(units: Iterable[int]) -> str:
    return "".join(chr(unit) if 0 <= unit <= 0x10FFFF else "?" for unit in units)


@dataclass(eq=False)
class Stream:
    """Addressable sequence of character units with read/write counters.

    A stream is backed either by ``data`` (a list that grows on write) or by a
    caller-owned ``buffer`` of fixed ``capacity``. The cursor always stays in
    range for whichever backing is active.
    """

    rock: int = 0
    kind: StreamKind = StreamKind.WINDOW
    mode: FileMode = FileMode.WRITE
    unicode: bool = False
    data: List[int] = field(default_factory=list)
    buffer: Optional[MutableSequence[int]] = None
    capacity: int = 0
    fileref: Optional["FileRef"] = None
    position: int = 0
    read_count: int = 0
    write_count: int = 0
    closed: bool = False

    @classmethod
    def for_memory(
        cls,
        buffer: Optional[MutableSequence[int]],
        capacity: Optional[int],
        mode: FileMode,
        *,
        rock: int = 0,
        unicode: bool = False,
    ) -> "Stream":
        # A missing buffer still makes a fixed stream; it just holds nothing.
        if buffer is None:
            buffer, capacity = [], 0
        elif capacity is None:
            capacity = len(buffer)
        else:
            capacity = min(capacity, len(buffer))
        return cls(
            rock=rock,
            kind=StreamKind.MEMORY,
            mode=mode,
            unicode=unicode,
            buffer=buffer,
            capacity=max(0, capacity),
        )

    @property
    def is_fixed(self) -> bool:
        return self.buffer is not None

    @property
    def limit(self) -> int:
        return self.capacity if self.is_fixed else len(self.data)

    # ---------------------------------------------------------------- cursor

    def seek(self, offset: int, mode: SeekMode = SeekMode.START) -> int:
        if mode == SeekMode.CURRENT:
            target = self.position + offset
        elif mode == SeekMode.END:
            target = self.limit + offset
        else:
            target = offset
        self.position = max(0, min(target, self.limit))
        return self.position

    # ---------------------------------------------------------------- writes

    def write_units(self, units: Iterable[int]) -> int:
        """Store ``units`` and return how many were attempted.

        Fixed buffers overwrite at the cursor and drop everything past
        capacity. Sequence-backed streams append.
        """

        values = list(units)
        buffer = self.buffer
        if buffer is not None:
            for value in values:
                if self.position >= self.capacity:
                    break
                buffer[self.position] = value
                self.position += 1
        else:
            self.data.extend(values)
        self.write_count += len(values)
        return len(values)

    def write_text(self, text: str) -> int:
        return self.write_units(to_units(text, unicode=self.unicode))

    def count_external_write(self, count: int) -> None:
        """Account for units routed to the shared output buffer instead."""

        self.write_count += count

    # ----------------------------------------------------------------- reads

    def read_unit(self) -> int:
        source = self.buffer if self.is_fixed else self.data
        if source is None or self.position >= self.limit:
            return EOF
        value = source[self.position]
        self.position += 1
        self.read_count += 1
        return value

    def read_into(self, target: MutableSequence[int], length: Optional[int] = None) -> int:
        max_len = min(length, len(target)) if length else len(target)
        count = 0
        for index in range(max_len):
            value = self.read_unit()
            if value == EOF:
                break
            target[index] = value
            count += 1
        return count

    def read_line_into(
        self, target: MutableSequence[int], length: Optional[int] = None
    ) -> int:
        """Read up to ``length - 1`` units, stopping after a newline.

        A 0 terminator follows the line when the target has room for it.
        """

        max_len = min(length, len(target)) if length else len(target)
        count = 0
        while count < max_len - 1:
            value = self.read_unit()
            if value == EOF:
                break
            target[count] = value
            count += 1
            if value == NEWLINE:
                break
        if count < max_len:
            target[count] = 0
        return count

    def snapshot(self) -> List[int]:
        buffer = self.buffer
        if buffer is not None:
            return list(buffer[: self.capacity])
        return list(self.data)


__all__ = ["Stream", "StreamKind", "to_units", "units_to_text"]

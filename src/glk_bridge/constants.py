"""Glk numeric constants used across the bridge."""

from __future__ import annotations

from enum import Enum, IntEnum


class EventType(IntEnum):
    NONE = 0
    TIMER = 1
    CHAR_INPUT = 2
    LINE_INPUT = 3


class WindowType(IntEnum):
    ALL_TYPES = 0
    PAIR = 1
    BLANK = 2
    TEXT_BUFFER = 3
    TEXT_GRID = 4
    GRAPHICS = 5


class FileMode(IntEnum):
    WRITE = 0x01
    READ = 0x02
    READ_WRITE = 0x03
    WRITE_APPEND = 0x05

    @property
    def writes(self) -> bool:
        return self in {FileMode.WRITE, FileMode.READ_WRITE, FileMode.WRITE_APPEND}

    @property
    def loads(self) -> bool:
        return self in {FileMode.READ, FileMode.READ_WRITE, FileMode.WRITE_APPEND}


class SeekMode(IntEnum):
    START = 0
    CURRENT = 1
    END = 2


class FileUsage(IntEnum):
    DATA = 0x00
    SAVED_GAME = 0x01
    TRANSCRIPT = 0x02
    INPUT_RECORD = 0x03
    TYPE_MASK = 0x0F
    TEXT_MODE = 0x100


class Gestalt(IntEnum):
    VERSION = 0
    CHAR_INPUT = 1
    LINE_INPUT = 2
    CHAR_OUTPUT = 3
    UNICODE = 15


class CharOutput(IntEnum):
    CANNOT_PRINT = 0
    APPROX_PRINT = 1
    EXACT_PRINT = 2


class InputKind(str, Enum):
    NONE = "none"
    CHAR = "char"
    LINE = "line"


GLK_VERSION = 0x00070600
EOF = -1
KEYCODE_RETURN = 0xFFFFFFFA
NEWLINE = 10

__all__ = [
    "EventType",
    "WindowType",
    "FileMode",
    "SeekMode",
    "FileUsage",
    "Gestalt",
    "CharOutput",
    "InputKind",
    "GLK_VERSION",
    "EOF",
    "KEYCODE_RETURN",
    "NEWLINE",
]

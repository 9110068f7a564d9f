"""File references: logical names the VM uses as storage keys."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Optional

from glk_bridge.constants import FileMode, FileUsage

_temp_counter = itertools.count(1)


@dataclass(eq=False)
class FileRef:
    filename: str
    usage: int = FileUsage.DATA
    mode: Optional[FileMode] = None
    rock: int = 0
    temporary: bool = False
    destroyed: bool = False

    @classmethod
    def temporary_ref(cls, usage: int = FileUsage.DATA, rock: int = 0) -> "FileRef":
        return cls(
            filename=f"glk-temp-{next(_temp_counter)}",
            usage=usage,
            rock=rock,
            temporary=True,
        )


__all__ = ["FileRef"]

"""Static answers to Glk capability (gestalt) queries."""

from __future__ import annotations

from typing import Mapping, MutableSequence, Optional

from .constants import GLK_VERSION, CharOutput, Gestalt

_ANSWERS: Mapping[int, int] = {
    Gestalt.VERSION: GLK_VERSION,
    Gestalt.CHAR_INPUT: 1,
    Gestalt.LINE_INPUT: 1,
    Gestalt.CHAR_OUTPUT: CharOutput.EXACT_PRINT,
    Gestalt.UNICODE: 1,
}


def gestalt(
    selector: int, value: int = 0, arr: Optional[MutableSequence[int]] = None
) -> int:
    """Answer a capability query. Unknown selectors are unsupported (0)."""

    del value  # every answer here is independent of the queried character
    try:
        key = int(selector)
    except (TypeError, ValueError, OverflowError):
        return 0
    if isinstance(selector, float) and selector != key:
        return 0
    answer = _ANSWERS.get(key, 0)
    if key == Gestalt.CHAR_OUTPUT and arr is not None and len(arr) > 0:
        arr[0] = 1  # each character prints as one glyph
    return int(answer)


__all__ = ["gestalt"]

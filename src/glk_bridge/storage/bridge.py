"""Maps logical file names onto serialized numeric sequences in a host store."""

from __future__ import annotations

import json
from typing import Any, List, Optional, Sequence

from glk_bridge.runtime import telemetry

from .store import HostStore, MemoryStore

FORMAT_TAG = "glk-bridge/1"
MAX_UNIT = 0x10FFFF


def encode(data: Sequence[int]) -> str:
    values = [int(value) for value in data]
    return json.dumps({"format": FORMAT_TAG, "length": len(values), "data": values})


def decode(raw: str) -> Optional[List[int]]:
    """Parse a stored blob; ``None`` for anything that is not a valid sequence.

    Bare JSON arrays are accepted too, since older saves were written that way.
    """

    try:
        payload: Any = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        return None

    if isinstance(payload, dict):
        if payload.get("format") != FORMAT_TAG:
            return None
        values = payload.get("data")
        declared = payload.get("length")
        if not isinstance(values, list) or declared != len(values):
            return None
    elif isinstance(payload, list):
        values = payload
    else:
        return None

    for value in values:
        # bool is an int subclass but never a valid unit
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        if not 0 <= value <= MAX_UNIT:
            return None
    return list(values)


class StorageBridge:
    """Best-effort save/restore: malformed or missing data reads as absent."""

    def __init__(self, store: Optional[HostStore] = None) -> None:
        self.store: HostStore = store if store is not None else MemoryStore()

    def exists(self, name: str) -> bool:
        return self.store.get_item(name) is not None

    def load(self, name: str) -> Optional[List[int]]:
        raw = self.store.get_item(name)
        if raw is None:
            return None
        data = decode(raw)
        if data is None:
            telemetry.record_event(
                "storage.load.malformed",
                level="warning",
                data={"name": name, "size": len(raw)},
            )
        return data

    def save(self, name: str, data: Sequence[int]) -> None:
        with telemetry.span(
            "storage::save", component="storage", metadata={"name": name}
        ):
            self.store.set_item(name, encode(data))
        telemetry.record_event(
            "storage.save", level="debug", data={"name": name, "units": len(data)}
        )

    def delete(self, name: str) -> None:
        self.store.remove_item(name)


__all__ = ["StorageBridge", "encode", "decode", "FORMAT_TAG"]

"""Host key-value stores holding named text blobs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol

from glk_bridge.runtime import telemetry


class HostStore(Protocol):
    """Text-only persistence the host provides (browser storage, a file, ...)."""

    def get_item(self, name: str) -> Optional[str]:
        ...

    def set_item(self, name: str, value: str) -> None:
        ...

    def remove_item(self, name: str) -> None:
        ...


class MemoryStore:
    """Process-local store, used by default and in tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, name: str) -> Optional[str]:
        return self._items.get(name)

    def set_item(self, name: str, value: str) -> None:
        self._items[name] = value

    def remove_item(self, name: str) -> None:
        self._items.pop(name, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


class JsonFileStore:
    """All items in one JSON object on disk, rewritten atomically on change."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._items: Dict[str, str] = {}
        if self._path.exists():
            try:
                payload = json.loads(self._path.read_text(encoding="utf-8"))
            except (ValueError, OSError, RecursionError) as exc:
                # A corrupt store starts fresh rather than blocking the session.
                telemetry.record_event(
                    "storage.store.unreadable",
                    level="warning",
                    data={"path": str(self._path), "error": str(exc)},
                )
                payload = {}
            if isinstance(payload, dict):
                self._items = {
                    str(key): value
                    for key, value in payload.items()
                    if isinstance(value, str)
                }

    @property
    def path(self) -> Path:
        return self._path

    def _write_to_disk(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._items, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self._path)

    def get_item(self, name: str) -> Optional[str]:
        return self._items.get(name)

    def set_item(self, name: str, value: str) -> None:
        self._items[name] = value
        self._write_to_disk()

    def remove_item(self, name: str) -> None:
        if self._items.pop(name, None) is not None:
            self._write_to_disk()


def open_store(path: str = "") -> HostStore:
    """Return a file-backed store for ``path``, or a memory store when empty."""

    if path:
        return JsonFileStore(path)
    return MemoryStore()


__all__ = ["HostStore", "MemoryStore", "JsonFileStore", "open_store"]

"""Creation-ordered registry backing the Glk ``*_iterate`` calls."""

from __future__ import annotations

from typing import Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class ObjectRegistry(Generic[T]):
    def __init__(self) -> None:
        self._items: List[T] = []

    def add(self, obj: T) -> T:
        self._items.append(obj)
        return obj

    def remove(self, obj: T) -> bool:
        for index, item in enumerate(self._items):
            if item is obj:
                del self._items[index]
                return True
        return False

    def __contains__(self, obj: object) -> bool:
        return any(item is obj for item in self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def next_after(self, obj: Optional[T]) -> Optional[T]:
        """Return the object following ``obj``; ``None`` starts the walk."""

        if obj is None:
            return self._items[0] if self._items else None
        for index, item in enumerate(self._items):
            if item is obj:
                following = index + 1
                return self._items[following] if following < len(self._items) else None
        return None

    def iterate(self, obj: Optional[T]) -> Tuple[Optional[T], int]:
        found = self.next_after(obj)
        rock = getattr(found, "rock", 0) if found is not None else 0
        return found, rock


__all__ = ["ObjectRegistry"]

from collections.abc import Iterator, Mapping
from typing import Generic, TypeVar

V = TypeVar("V")


class FirstWinsRegistry(Mapping[str, V], Generic[V]):
    """Insertion-ordered, read-only mapping whose entries can only be added once.

    The first value registered under a key is kept for good: ``try_add`` never
    overwrites, and there is no ``__setitem__`` to do it by accident.
    """

    def __init__(self) -> None:
        self._entries: dict[str, V] = {}

    def try_add(self, key: str, value: V) -> bool:
        """Register ``value`` under ``key`` unless the key is already taken.

        Returns:
            True if the value was added, False if an earlier entry was kept
        """
        if key in self._entries:
            return False
        self._entries[key] = value
        return True

    def __getitem__(self, key: str) -> V:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._entries!r})"

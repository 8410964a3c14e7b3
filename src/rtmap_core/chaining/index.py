"""Coordinate-ordered index over mutable records.

Records live in an arena addressed by integer slots; the ordering is a
sorted list of ``(key, slot)`` entries produced by a caller-supplied key
function.  A record whose coordinates change must be repositioned
explicitly: the index remembers the key each slot was filed under, so the
stale entry can be located and removed before the new key is inserted.

Lookups bisect in logarithmic time; ``insert`` and ``remove`` shift the
list tail and are linear in the number of entries.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right, insort
from typing import Any, Callable, Dict, Generic, Iterator, List, Tuple, TypeVar


__all__ = ["CoordinateIndex"]


T = TypeVar("T")

Key = Tuple[Any, ...]


def _leading(entry: Tuple[Key, int]) -> Any:
    return entry[0][0]


class CoordinateIndex(Generic[T]):
    """Sorted view of arena records ordered by ``key(record)``."""

    __slots__ = ("_key", "_records", "_stored_keys", "_entries")

    def __init__(self, key: Callable[[T], Key]) -> None:
        self._key = key
        self._records: Dict[int, T] = {}
        self._stored_keys: Dict[int, Key] = {}
        self._entries: List[Tuple[Key, int]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, slot: object) -> bool:
        return slot in self._records

    def __iter__(self) -> Iterator[T]:
        for _, slot in self._entries:
            yield self._records[slot]

    @property
    def key(self) -> Callable[[T], Key]:
        return self._key

    def slots(self) -> List[int]:
        return [slot for _, slot in self._entries]

    def get(self, slot: int) -> T:
        return self._records[slot]

    def insert(self, slot: int, record: T) -> None:
        if slot in self._records:
            raise KeyError(f"Slot {slot} is already indexed")
        key = tuple(self._key(record))
        self._records[slot] = record
        self._stored_keys[slot] = key
        insort(self._entries, (key, slot))

    def remove(self, slot: int) -> T:
        record = self._records.pop(slot)
        key = self._stored_keys.pop(slot)
        position = bisect_left(self._entries, (key, slot))
        if position >= len(self._entries) or self._entries[position] != (key, slot):
            raise RuntimeError(f"Index entry for slot {slot} is out of sync")
        del self._entries[position]
        return record

    def reposition(self, slot: int) -> None:
        """Refile ``slot`` under the current key of its record."""

        record = self.remove(slot)
        self.insert(slot, record)

    def irange(self, low: Any, high: Any) -> List[int]:
        """Return slots whose leading key component lies in ``[low, high]``."""

        if high < low:
            return []
        start = bisect_left(self._entries, low, key=_leading)
        stop = bisect_right(self._entries, high, key=_leading)
        return [slot for _, slot in self._entries[start:stop]]

    def clear(self) -> None:
        self._records.clear()
        self._stored_keys.clear()
        self._entries.clear()

from __future__ import annotations

import pytest

from rtmap_core.chaining import CoordinateIndex, ReadAlignment, ref_end_key


def _chain(ref_start: int, ref_end: int, length: int = 1) -> ReadAlignment:
    return ReadAlignment(ref_start, ref_end, ref_start // 10, ref_end // 10, length)


def test_records_iterate_in_key_order() -> None:
    index: CoordinateIndex[ReadAlignment] = CoordinateIndex(ref_end_key)
    index.insert(0, _chain(50, 90))
    index.insert(1, _chain(0, 10))
    index.insert(2, _chain(30, 40))

    assert [chain.ref_end for chain in index] == [10, 40, 90]
    assert index.slots() == [1, 2, 0]
    assert len(index) == 3
    assert 2 in index and 7 not in index


def test_irange_is_inclusive_on_leading_component() -> None:
    index: CoordinateIndex[ReadAlignment] = CoordinateIndex(ref_end_key)
    for slot, end in enumerate((10, 20, 20, 30, 45)):
        index.insert(slot, _chain(end - 5, end))

    assert index.irange(20, 30) == [1, 2, 3]
    assert index.irange(11, 19) == []
    assert index.irange(0, 100) == [0, 1, 2, 3, 4]
    assert index.irange(30, 20) == []


def test_reposition_follows_in_place_mutation() -> None:
    index: CoordinateIndex[ReadAlignment] = CoordinateIndex(ref_end_key)
    grown = _chain(0, 10)
    index.insert(0, grown)
    index.insert(1, _chain(20, 30))

    grown.ref_end = 50
    index.reposition(0)

    assert index.slots() == [1, 0]
    assert index.irange(45, 55) == [0]
    assert index.irange(5, 15) == []


def test_remove_returns_record_and_rejects_duplicates() -> None:
    index: CoordinateIndex[ReadAlignment] = CoordinateIndex(ref_end_key)
    chain = _chain(0, 10)
    index.insert(3, chain)

    with pytest.raises(KeyError):
        index.insert(3, _chain(5, 15))

    assert index.remove(3) is chain
    assert len(index) == 0
    with pytest.raises(KeyError):
        index.remove(3)


def test_clear_drops_every_entry() -> None:
    index: CoordinateIndex[ReadAlignment] = CoordinateIndex(ref_end_key)
    for slot in range(4):
        index.insert(slot, _chain(slot * 10, slot * 10 + 5))

    index.clear()

    assert list(index) == []
    assert index.irange(0, 100) == []

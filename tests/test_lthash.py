from __future__ import annotations

import itertools

import pytest

from pysyncd.appstate.lthash import WAPATCH_INTEGRITY


def test_lthash_add_then_subtract_round_trip() -> None:
    start = bytes(range(128))
    base = bytearray(start)
    item = b"\x01" * 32
    WAPATCH_INTEGRITY.subtract_then_add_in_place(base, subtract=[], add=[item])
    assert bytes(base) != start
    WAPATCH_INTEGRITY.subtract_then_add_in_place(base, subtract=[item], add=[])
    assert bytes(base) == start


def test_lthash_is_order_independent() -> None:
    items = [bytes([i]) * 32 for i in range(1, 4)]
    results = set()
    for perm in itertools.permutations(items):
        results.add(WAPATCH_INTEGRITY.subtract_then_add(b"\x00" * 128, subtract=[], add=list(perm)))
    assert len(results) == 1


def test_lthash_subtract_and_add_same_item_is_noop() -> None:
    start = b"\x42" * 128
    item = b"\x09" * 32
    assert WAPATCH_INTEGRITY.subtract_then_add(start, subtract=[item], add=[item]) == start


def test_lthash_rejects_wrong_buffer_size() -> None:
    with pytest.raises(ValueError):
        WAPATCH_INTEGRITY.subtract_then_add_in_place(bytearray(64), subtract=[], add=[b"\x01" * 32])


def test_lthash_lanes_wrap_little_endian_u16() -> None:
    item = b"\x07" * 32
    derived = WAPATCH_INTEGRITY.expand(item)
    out = WAPATCH_INTEGRITY.subtract_then_add(b"\xff" * 128, subtract=[], add=[item])
    for i in range(0, 128, 2):
        lane = (0xFFFF + int.from_bytes(derived[i : i + 2], "little")) % 0x10000
        assert out[i : i + 2] == lane.to_bytes(2, "little")

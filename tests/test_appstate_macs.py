from __future__ import annotations

import hashlib
import hmac

import pytest

from pysyncd.appstate.macs import (
    generate_content_mac,
    generate_index_mac,
    generate_patch_mac,
    generate_snapshot_mac,
    validate_content_mac,
    validate_index_mac,
    validate_patch_mac,
    validate_snapshot_mac,
)
from pysyncd.appstate.types import SyncdMutation, SyncdOperation, SyncdPatch, SyncdRecord
from pysyncd.exceptions import (
    MismatchingContentMAC,
    MismatchingIndexMAC,
    PatchMACMismatch,
    SnapshotMACMismatch,
)

KEY = b"\x11" * 32


def _patch(version: int = 5, snapshot_mac: bytes = b"\x33" * 32) -> SyncdPatch:
    muts = [
        SyncdMutation(SyncdOperation.SET, SyncdRecord(index_mac=b"i1", value_blob=b"\xaa" * 48 + b"\x01" * 32)),
        SyncdMutation(SyncdOperation.REMOVE, SyncdRecord(index_mac=b"i2", value_blob=b"\xbb" * 48 + b"\x02" * 32)),
    ]
    return SyncdPatch(version=version, mutations=muts, snapshot_mac=snapshot_mac)


def test_snapshot_mac_layout() -> None:
    lthash = bytes(range(128))
    expected = hmac.new(KEY, lthash + (7).to_bytes(8, "big") + b"regular", hashlib.sha256).digest()
    assert generate_snapshot_mac(lthash, 7, "regular", KEY) == expected


def test_snapshot_mac_is_sensitive_to_each_field() -> None:
    lthash = b"\x00" * 128
    base = generate_snapshot_mac(lthash, 1, "regular", KEY)
    assert len(base) == 32
    assert generate_snapshot_mac(lthash, 1, "regular", KEY) == base
    assert generate_snapshot_mac(b"\x01" + lthash[1:], 1, "regular", KEY) != base
    assert generate_snapshot_mac(lthash, 2, "regular", KEY) != base
    assert generate_snapshot_mac(lthash, 1, "regular_low", KEY) != base
    assert generate_snapshot_mac(lthash, 1, "regular", b"\x12" * 32) != base


def test_patch_mac_layout_uses_every_mutation_and_patch_version() -> None:
    patch = _patch()
    data = b"\x33" * 32 + b"\x01" * 32 + b"\x02" * 32 + (5).to_bytes(8, "big") + b"regular_high"
    expected = hmac.new(KEY, data, hashlib.sha256).digest()
    assert generate_patch_mac(patch, "regular_high", KEY) == expected


def test_patch_mac_is_sensitive_to_each_field() -> None:
    base = generate_patch_mac(_patch(), "regular", KEY)
    assert generate_patch_mac(_patch(), "regular", KEY) == base
    assert generate_patch_mac(_patch(version=6), "regular", KEY) != base
    assert generate_patch_mac(_patch(snapshot_mac=b"\x34" * 32), "regular", KEY) != base
    assert generate_patch_mac(_patch(), "regular_low", KEY) != base

    changed = _patch()
    rec = changed.mutations[1].record
    changed.mutations[1] = SyncdMutation(
        SyncdOperation.REMOVE, SyncdRecord(index_mac=rec.index_mac, value_blob=rec.value_blob[:-1] + b"\x03")
    )
    assert generate_patch_mac(changed, "regular", KEY) != base


def test_content_mac_layout() -> None:
    key_id = b"kid"
    data = b"payload"
    raw = bytes([2]) + key_id + data + (len(key_id) + 1).to_bytes(8, "big")
    expected = hmac.new(KEY, raw, hashlib.sha512).digest()[:32]
    assert generate_content_mac(SyncdOperation.REMOVE, data, key_id, KEY) == expected


def test_content_mac_is_sensitive_to_each_field() -> None:
    base = generate_content_mac(SyncdOperation.SET, b"data", b"kid", KEY)
    assert len(base) == 32
    assert generate_content_mac(SyncdOperation.SET, b"data", b"kid", KEY) == base
    assert generate_content_mac(SyncdOperation.REMOVE, b"data", b"kid", KEY) != base
    assert generate_content_mac(SyncdOperation.SET, b"datb", b"kid", KEY) != base
    assert generate_content_mac(SyncdOperation.SET, b"data", b"kie", KEY) != base


def test_content_mac_key_id_boundary_is_unambiguous() -> None:
    a = generate_content_mac(SyncdOperation.SET, b"cdef", b"ab", KEY)
    b = generate_content_mac(SyncdOperation.SET, b"ef", b"abcd", KEY)
    assert a != b


def test_validators_raise_on_mismatch() -> None:
    lthash = b"\x00" * 128
    good = generate_snapshot_mac(lthash, 1, "regular", KEY)
    validate_snapshot_mac(good, lthash, 1, "regular", KEY)
    with pytest.raises(SnapshotMACMismatch):
        validate_snapshot_mac(good, lthash, 2, "regular", KEY)

    patch = _patch()
    signed = SyncdPatch(
        version=patch.version,
        mutations=patch.mutations,
        snapshot_mac=patch.snapshot_mac,
        patch_mac=generate_patch_mac(patch, "regular", KEY),
    )
    validate_patch_mac(signed, "regular", KEY)
    with pytest.raises(PatchMACMismatch):
        validate_patch_mac(signed, "regular_low", KEY)

    content = generate_content_mac(SyncdOperation.SET, b"x", b"kid", KEY)
    validate_content_mac(SyncdOperation.SET, b"x", b"kid", content, KEY)
    with pytest.raises(MismatchingContentMAC):
        validate_content_mac(SyncdOperation.REMOVE, b"x", b"kid", content, KEY)


def test_index_mac_uses_compact_json() -> None:
    index = ["mute", "123@s.whatsapp.net"]
    expected = hmac.new(KEY, b'["mute","123@s.whatsapp.net"]', hashlib.sha256).digest()
    assert generate_index_mac(index, KEY) == expected
    validate_index_mac(index, expected, KEY)
    with pytest.raises(MismatchingIndexMAC):
        validate_index_mac(["mute", "456@s.whatsapp.net"], expected, KEY)

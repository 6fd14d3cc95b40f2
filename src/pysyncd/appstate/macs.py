"""
Keyed MACs binding app-state content to a collection and version.

Field order and encoding are fixed by the wire protocol. Integers are
8-byte big-endian, strings and byte fields are concatenated raw; only the
content MAC carries an explicit length field.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from collections.abc import Iterable

from ..exceptions import (
    MismatchingContentMAC,
    MismatchingIndexMAC,
    PatchMACMismatch,
    SnapshotMACMismatch,
)
from ..util.bytes import uint64_to_bytes
from .types import SyncdOperation, SyncdPatch

MAC_LENGTH = 32


def _concat_and_hmac(digestmod: str, key: bytes, parts: Iterable[bytes]) -> bytes:
    mac = hmac.new(key, digestmod=getattr(hashlib, digestmod))
    for p in parts:
        mac.update(p)
    return mac.digest()


def generate_snapshot_mac(lthash: bytes, version: int, name: str, key: bytes) -> bytes:
    return _concat_and_hmac("sha256", key, (lthash, uint64_to_bytes(version), name.encode("utf-8")))


def generate_patch_mac(patch: SyncdPatch, name: str, key: bytes) -> bytes:
    """
    MAC over the patch's snapshot MAC, every mutation's value MAC and the
    patch's declared version.
    """

    parts: list[bytes] = [patch.snapshot_mac]
    parts.extend(m.record.value_mac for m in patch.mutations)
    parts.append(uint64_to_bytes(patch.version))
    parts.append(name.encode("utf-8"))
    return _concat_and_hmac("sha256", key, parts)


def generate_content_mac(operation: SyncdOperation | int, data: bytes, key_id: bytes, key: bytes) -> bytes:
    # op byte is operation + 1 so that 0 never names an operation
    op_byte = bytes([(int(operation) & 0xFF) + 1])
    key_data_length = uint64_to_bytes(len(key_id) + 1)
    return _concat_and_hmac("sha512", key, (op_byte, key_id, data, key_data_length))[:MAC_LENGTH]


def encode_index(index: list[str]) -> bytes:
    return json.dumps(list(index), separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def generate_index_mac(index: list[str] | bytes, key: bytes) -> bytes:
    data = index if isinstance(index, (bytes, bytearray)) else encode_index(index)
    return _concat_and_hmac("sha256", key, (bytes(data),))


def validate_snapshot_mac(expected: bytes, lthash: bytes, version: int, name: str, key: bytes) -> None:
    computed = generate_snapshot_mac(lthash, version, name, key)
    if not hmac.compare_digest(computed, expected):
        raise SnapshotMACMismatch("snapshot MAC mismatch")


def validate_patch_mac(patch: SyncdPatch, name: str, key: bytes) -> None:
    computed = generate_patch_mac(patch, name, key)
    if not hmac.compare_digest(computed, patch.patch_mac):
        raise PatchMACMismatch("patch MAC mismatch")


def validate_content_mac(
    operation: SyncdOperation | int, data: bytes, key_id: bytes, expected: bytes, key: bytes
) -> None:
    computed = generate_content_mac(operation, data, key_id, key)
    if not hmac.compare_digest(computed, expected):
        raise MismatchingContentMAC("mismatching content MAC")


def validate_index_mac(index: list[str] | bytes, expected: bytes, key: bytes) -> None:
    computed = generate_index_mac(index, key)
    if not hmac.compare_digest(computed, expected):
        raise MismatchingIndexMAC("mismatching index MAC")

"""
Decoded syncd records.

These mirror the `Syncd*` protobuf messages after wire decoding; decoding
itself happens elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

VALUE_MAC_LENGTH = 32


class SyncdOperation(IntEnum):
    SET = 0
    REMOVE = 1


@dataclass(frozen=True, slots=True)
class SyncdRecord:
    index_mac: bytes
    # iv(16) || AES-CBC ciphertext || value MAC(32)
    value_blob: bytes
    key_id: bytes = b""

    @property
    def value_mac(self) -> bytes:
        return self.value_blob[-VALUE_MAC_LENGTH:]


@dataclass(frozen=True, slots=True)
class SyncdMutation:
    operation: SyncdOperation
    record: SyncdRecord


@dataclass(frozen=True, slots=True)
class SyncdPatch:
    version: int
    mutations: list[SyncdMutation] = field(default_factory=list)
    snapshot_mac: bytes = b""
    patch_mac: bytes = b""
    key_id: bytes = b""


@dataclass(frozen=True, slots=True)
class SyncdSnapshot:
    version: int
    records: list[SyncdRecord] = field(default_factory=list)
    mac: bytes = b""
    key_id: bytes = b""


@dataclass(frozen=True, slots=True)
class Mutation:
    """A mutation that has been applied to a collection's hash state."""

    operation: SyncdOperation
    action: Any | None
    index: list[str]
    index_mac: bytes
    value_mac: bytes

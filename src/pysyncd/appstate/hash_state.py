from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import MissingPreviousSetValueOperation
from .lthash import WAPATCH_INTEGRITY
from .macs import generate_snapshot_mac
from .types import Mutation, SyncdMutation, SyncdOperation, SyncdRecord

EMPTY_HASH = b"\x00" * 128

PrevSetValueLookup = Callable[[bytes, int], "bytes | None"]


@dataclass(slots=True)
class HashState:
    """
    LT-hash state of one app-state collection.

    - version: last applied snapshot/patch version
    - hash: 128-byte LT-hash over the value MACs of all present records
    - mutations: applied mutations, oldest first
    """

    version: int = 0
    hash: bytes = EMPTY_HASH
    mutations: list[Mutation] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.version == 0 and self.hash == EMPTY_HASH

    def copy(self) -> HashState:
        return HashState(version=self.version, hash=self.hash, mutations=list(self.mutations))

    @classmethod
    def from_store(cls, obj: Any | None) -> HashState:
        if not isinstance(obj, dict):
            return cls()
        ver = int(obj.get("version") or 0)
        h = obj.get("hash")
        if not isinstance(h, (bytes, bytearray, memoryview)) or len(h) != 128:
            h = EMPTY_HASH
        return cls(version=ver, hash=bytes(h))

    def to_store(self) -> dict[str, Any]:
        return {"version": int(self.version), "hash": bytes(self.hash)}

    def update_hash_from_records(self, records: Iterable[SyncdRecord]) -> None:
        added = [rec.value_mac for rec in records]
        self.hash = WAPATCH_INTEGRITY.subtract_then_add(self.hash, subtract=[], add=added)

    def update_hash(
        self,
        mutations: Sequence[SyncdMutation],
        get_prev_set_value_mac: PrevSetValueLookup,
    ) -> None:
        """
        Fold one patch's mutations into the LT-hash.

        Every SET adds its value MAC. For every mutation the previous SET value
        MAC of its index (if any) is subtracted. The lookup is called once per
        mutation in patch order with the mutation's position, so it can resolve
        earlier mutations of the same patch.

        Raises `MissingPreviousSetValueOperation` if a REMOVE has nothing to
        subtract; the hash is not modified in that case.
        """

        added: list[bytes] = []
        removed: list[bytes] = []

        for idx, mutation in enumerate(mutations):
            if mutation.operation == SyncdOperation.SET:
                added.append(mutation.record.value_mac)
            index_mac = mutation.record.index_mac
            prev = get_prev_set_value_mac(index_mac, idx)
            if prev is not None:
                removed.append(bytes(prev))
            elif mutation.operation == SyncdOperation.REMOVE:
                raise MissingPreviousSetValueOperation(index_mac=index_mac, position=idx)

        self.hash = WAPATCH_INTEGRITY.subtract_then_add(self.hash, subtract=removed, add=added)

    def generate_snapshot_mac(self, name: str, key: bytes) -> bytes:
        return generate_snapshot_mac(self.hash, self.version, name, key)

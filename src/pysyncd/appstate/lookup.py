from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..util.bytes import b64decode, b64encode
from .types import SyncdMutation, SyncdOperation


@dataclass(slots=True)
class IndexValueMap:
    """
    Value MAC of the current SET for each index MAC in a collection.

    Keys are base64(index_mac) so the map can be stored as JSON-like data.
    """

    values: dict[str, bytes] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.values)

    def __contains__(self, index_mac: bytes) -> bool:
        return b64encode(index_mac) in self.values

    def get(self, index_mac: bytes) -> bytes | None:
        return self.values.get(b64encode(index_mac))

    def set(self, index_mac: bytes, value_mac: bytes) -> None:
        self.values[b64encode(index_mac)] = bytes(value_mac)

    def remove(self, index_mac: bytes) -> None:
        self.values.pop(b64encode(index_mac), None)

    def apply(self, mutations: Iterable[SyncdMutation]) -> None:
        for m in mutations:
            if m.operation == SyncdOperation.SET:
                self.set(m.record.index_mac, m.record.value_mac)
            else:
                self.remove(m.record.index_mac)

    def copy(self) -> IndexValueMap:
        return IndexValueMap(values=dict(self.values))

    def to_store(self) -> dict[str, bytes]:
        return dict(self.values)

    @classmethod
    def from_store(cls, obj: Any | None) -> IndexValueMap:
        out = cls()
        if not isinstance(obj, dict):
            return out
        for k, v in obj.items():
            if not isinstance(k, str) or not isinstance(v, (bytes, bytearray, memoryview)):
                continue
            out.set(b64decode(k), bytes(v))
        return out


def make_prev_value_lookup(
    mutations: Sequence[SyncdMutation],
    fallback: Callable[[bytes], bytes | None],
) -> Callable[[bytes, int], bytes | None]:
    """
    Build the previous-SET lookup for `HashState.update_hash`.

    Mutations before `idx` in the same patch take precedence over `fallback`
    (the persisted index-value map): an earlier SET of the same index is the
    value to subtract, an earlier REMOVE means there is nothing left.
    """

    def _get_prev(index_mac: bytes, idx: int) -> bytes | None:
        for prev in reversed(mutations[:idx]):
            if prev.record.index_mac != index_mac:
                continue
            if prev.operation == SyncdOperation.SET:
                return prev.record.value_mac
            return None
        return fallback(index_mac)

    return _get_prev

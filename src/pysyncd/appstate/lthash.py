"""
LT-hash (homomorphic accumulator) used by app-state patch integrity.

Each element is expanded with HKDF-SHA256 to `hkdf_size` bytes and combined
with the buffer as little-endian unsigned 16-bit words with wraparound, so
additions and subtractions commute and `add(x)` is undone by `subtract(x)`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..crypto.hkdf import hkdf_sha256

WAPATCH_INTEGRITY_INFO = b"WhatsApp Patch Integrity"


@dataclass(frozen=True, slots=True)
class LTHash:
    hkdf_info: bytes
    hkdf_size: int

    def expand(self, item: bytes) -> bytes:
        return hkdf_sha256(ikm=bytes(item), length=self.hkdf_size, salt=b"", info=self.hkdf_info)

    def _combine(self, base: bytearray, item: bytes, *, subtract: bool) -> None:
        # little-endian u16 lanes, wrapping mod 2**16
        derived = self.expand(item)
        sign = -1 if subtract else 1
        for i in range(0, self.hkdf_size, 2):
            lane = int.from_bytes(base[i : i + 2], "little") + sign * int.from_bytes(derived[i : i + 2], "little")
            base[i : i + 2] = (lane & 0xFFFF).to_bytes(2, "little")

    def subtract_then_add_in_place(
        self, base: bytearray, subtract: Iterable[bytes], add: Iterable[bytes]
    ) -> None:
        if len(base) != self.hkdf_size:
            raise ValueError(f"LT-hash buffer must be {self.hkdf_size} bytes")
        for item in subtract:
            self._combine(base, item, subtract=True)
        for item in add:
            self._combine(base, item, subtract=False)

    def subtract_then_add(self, base: bytes, subtract: Iterable[bytes], add: Iterable[bytes]) -> bytes:
        out = bytearray(base)
        self.subtract_then_add_in_place(out, subtract, add)
        return bytes(out)


WAPATCH_INTEGRITY = LTHash(hkdf_info=WAPATCH_INTEGRITY_INFO, hkdf_size=128)

from __future__ import annotations

from .bytes import b64decode, b64encode, uint64_to_bytes

__all__ = ["b64decode", "b64encode", "uint64_to_bytes"]

from __future__ import annotations

import base64

_UINT64_MAX = (1 << 64) - 1


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(data: str) -> bytes:
    return base64.b64decode(data.encode("ascii"))


def uint64_to_bytes(value: int) -> bytes:
    """
    Fixed-width (8 byte) big-endian encoding of an unsigned 64-bit counter.

    Used for every version/length field that goes into an app-state MAC.
    """

    v = int(value)
    if v < 0 or v > _UINT64_MAX:
        raise ValueError("value out of uint64 range")
    return v.to_bytes(8, "big", signed=False)

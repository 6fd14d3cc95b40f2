from __future__ import annotations

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF


def hkdf_sha256(*, ikm: bytes, length: int, salt: bytes, info: bytes = b"") -> bytes:
    """
    HKDF-SHA256 (RFC 5869).

    App-state derivations pass an empty salt, which is equivalent to the
    RFC's default of HashLen zero bytes.
    """

    if length <= 0:
        raise ValueError("length must be > 0")
    return HKDF(algorithm=hashes.SHA256(), length=length, salt=salt or None, info=info).derive(bytes(ikm))

from __future__ import annotations

from .aes import aes_decrypt_cbc_pkcs7, aes_encrypt_cbc_pkcs7
from .hkdf import hkdf_sha256

__all__ = [
    "aes_decrypt_cbc_pkcs7",
    "aes_encrypt_cbc_pkcs7",
    "hkdf_sha256",
]

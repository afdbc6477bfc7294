"""
Big-endian unsigned integer import/export.
"""

from typing import Optional

from fast_paillier.crypto.paillier import EncryptionKey
from fast_paillier.errors import InvalidCiphertext, InvalidPlaintext


def byte_length(x: int) -> int:
    return max(1, (x.bit_length() + 7) // 8)


def int_to_bytes(x: int, length: Optional[int] = None) -> bytes:
    """Encode a non-negative integer, left-padded with zeros to *length* bytes."""
    if x < 0:
        raise ValueError("only non-negative integers can be encoded")
    if length is None:
        length = byte_length(x)
    return x.to_bytes(length, "big")


def int_from_bytes(data: bytes) -> int:
    return int.from_bytes(data, "big")


def encode_plaintext(key: EncryptionKey, m: int) -> bytes:
    if not 0 <= m < key.n:
        raise InvalidPlaintext("plaintext must be in [0, N)")
    return int_to_bytes(m, byte_length(key.n))


def encode_ciphertext(key: EncryptionKey, c: int) -> bytes:
    """Fixed-width encoding: every ciphertext of *key* has the same length."""
    if not 0 <= c < key.nn:
        raise InvalidCiphertext("ciphertext must be in [0, N^2)")
    return int_to_bytes(c, byte_length(key.nn))


def decode_ciphertext(key: EncryptionKey, data: bytes) -> int:
    if len(data) != byte_length(key.nn):
        raise InvalidCiphertext(f"ciphertext must be exactly {byte_length(key.nn)} bytes")
    c = int_from_bytes(data)
    if c >= key.nn:
        raise InvalidCiphertext("ciphertext must be in [0, N^2)")
    return c

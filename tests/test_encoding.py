import pytest

from fast_paillier.encoding import (
    byte_length,
    decode_ciphertext,
    encode_ciphertext,
    encode_plaintext,
    int_from_bytes,
    int_to_bytes,
)
from fast_paillier.errors import InvalidCiphertext, InvalidPlaintext


def test_int_to_bytes_is_big_endian():
    assert int_to_bytes(0) == b"\x00"
    assert int_to_bytes(1) == b"\x01"
    assert int_to_bytes(256) == b"\x01\x00"
    assert int_to_bytes(256, 4) == b"\x00\x00\x01\x00"
    assert int_from_bytes(b"\x00\x00\x01\x00") == 256
    assert int_from_bytes(b"") == 0


def test_int_to_bytes_rejects_negative_and_short_length():
    with pytest.raises(ValueError):
        int_to_bytes(-1)
    with pytest.raises(OverflowError):
        int_to_bytes(2**16, 2)


def test_ciphertexts_have_fixed_width(keypair, rng):
    pub, priv = keypair
    width = byte_length(pub.nn)
    assert width == 256
    for m in [0, 1, pub.n - 1]:
        c = pub.encrypt(m, rng)
        data = encode_ciphertext(pub, c)
        assert len(data) == width
        assert decode_ciphertext(pub, data) == c
        assert priv.decrypt(decode_ciphertext(pub, data)) == m


def test_encode_plaintext(small_key):
    pub = small_key.encryption_key
    assert encode_plaintext(pub, 42) == b"\x00\x2a"
    with pytest.raises(InvalidPlaintext):
        encode_plaintext(pub, pub.n)


def test_decode_rejects_malformed_ciphertexts(small_key):
    pub = small_key.encryption_key
    with pytest.raises(InvalidCiphertext):
        decode_ciphertext(pub, b"\x01\x02")
    with pytest.raises(InvalidCiphertext):
        decode_ciphertext(pub, b"\xff\xff\xff\xff")
    with pytest.raises(InvalidCiphertext):
        encode_ciphertext(pub, pub.nn)

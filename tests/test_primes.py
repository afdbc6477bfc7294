import logging

import pytest

from conftest import BrokenSource, FixedSource, SeededSource
from fast_paillier.config import PRIME_ATTEMPTS_PER_BIT, SAFE_PRIME_ATTEMPTS_PER_BIT
from fast_paillier.crypto.paillier import DecryptionKey
from fast_paillier.crypto.primes import (
    SMALL_PRIMES,
    _budget,
    generate_prime,
    generate_primes,
    generate_safe_prime,
    is_probable_prime,
)
from fast_paillier.errors import GenerationError


def test_small_prime_table():
    assert SMALL_PRIMES[:6] == [3, 5, 7, 11, 13, 17]
    assert 2 not in SMALL_PRIMES
    assert SMALL_PRIMES[-1] == 4093


@pytest.mark.parametrize("n", [2, 3, 5, 101, 113, 4093, 7919, 2**61 - 1, 2**127 - 1])
def test_primes_are_recognised(n, rng):
    assert is_probable_prime(n, rng)


@pytest.mark.parametrize(
    "n",
    [
        -7,
        0,
        1,
        4,
        561,  # Carmichael number
        4097,
        2**64 + 1,
        (2**61 - 1) * (2**31 - 1),
        1000003 * 1000033,
    ],
)
def test_composites_are_rejected(n, rng):
    assert not is_probable_prime(n, rng)


@pytest.mark.parametrize("bits", [16, 64, 256])
def test_generate_prime_size(bits, rng):
    p = generate_prime(bits, rng)
    assert p.bit_length() == bits
    assert p >> (bits - 2) == 0b11
    assert is_probable_prime(p, rng)


def test_generate_safe_prime(rng):
    p = generate_safe_prime(64, rng)
    assert p.bit_length() == 64
    assert is_probable_prime(p, rng)
    assert is_probable_prime((p - 1) // 2, rng)


def test_generate_primes_sizes(rng):
    p, q = generate_primes(512, rng)
    assert p != q
    assert p.bit_length() == q.bit_length() == 512
    assert (p * q).bit_length() == 1024


def test_generation_is_reproducible():
    assert generate_primes(512, SeededSource(7)) == generate_primes(512, SeededSource(7))


@pytest.mark.parametrize("bits", [0, 256, 510, 511, 513])
def test_bad_prime_sizes(bits, rng):
    with pytest.raises(GenerationError):
        generate_primes(bits, rng)


def test_retry_budget_is_enforced():
    # 0xC001 = 13 * 3781, so a source stuck at zero never yields a prime
    with pytest.raises(GenerationError):
        generate_prime(16, FixedSource(0), max_attempts=5)


def test_broken_source_fails_generation():
    with pytest.raises(GenerationError) as excinfo:
        generate_primes(512, BrokenSource())
    assert excinfo.value.__cause__ is not None


def test_safe_prime_key_generation(monkeypatch):
    monkeypatch.setattr("fast_paillier.crypto.primes.MIN_PRIME_BITS", 64)
    dk = DecryptionKey.generate(64, SeededSource(3), safe_primes=True)
    assert dk.n.bit_length() == 128
    for x in (dk.p, dk.q):
        assert is_probable_prime((x - 1) // 2)
    assert dk.decrypt(dk.encrypt(17, SeededSource(4))) == 17


def test_generation_logs_without_secrets(caplog):
    caplog.set_level(logging.DEBUG, logger="fast_paillier")
    dk = DecryptionKey.generate(512, SeededSource(11))
    assert "generating Paillier key from 512-bit primes" in caplog.text
    assert str(dk.p) not in caplog.text
    assert str(dk.q) not in caplog.text


def test_safe_prime_budget_is_linear():
    budget = _budget(1536, True, None)
    assert budget == SAFE_PRIME_ATTEMPTS_PER_BIT * 1536
    assert budget < 1536**2
    assert _budget(3072, True, None) == 2 * budget
    assert _budget(1536, False, None) == PRIME_ATTEMPTS_PER_BIT * 1536
    assert _budget(1536, True, 10) == 10

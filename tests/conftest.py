"""Shared pytest fixtures for the fast-paillier test suite."""

import random

import pytest

from fast_paillier.crypto.paillier import DecryptionKey
from fast_paillier.crypto.sampling import invert, l_function, powmod


class SeededSource:
    """Reproducible, NOT secure, randomness for tests."""

    def __init__(self, seed: int):
        self._random = random.Random(seed)

    def randbelow(self, bound: int) -> int:
        return self._random.randrange(bound)


class FixedSource:
    """Always returns the same value."""

    def __init__(self, value: int):
        self.value = value

    def randbelow(self, bound: int) -> int:
        return self.value


class BrokenSource:
    def randbelow(self, bound: int) -> int:
        raise OSError("entropy pool unavailable")


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def rng():
    return SeededSource(1234)


@pytest.fixture(scope="session")
def small_key():
    """N = 101 * 113 = 11413."""
    return DecryptionKey.from_primes(101, 113)


@pytest.fixture(scope="session")
def keypair():
    dk = DecryptionKey.generate(512, SeededSource(42))
    return dk.encryption_key, dk


@pytest.fixture(scope="session")
def naive_decrypt():
    """Textbook decryption m = L(c^lambda mod N^2) * mu mod N, no CRT."""

    def decrypt(dk: DecryptionKey, c: int) -> int:
        lam = (dk.p - 1) * (dk.q - 1)
        mu = invert(l_function(powmod(dk.n + 1, lam, dk.nn), dk.n), dk.n)
        return l_function(powmod(c, lam, dk.nn), dk.n) * mu % dk.n

    return decrypt

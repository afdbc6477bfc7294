"""
Prime and modulus generation.

Candidates are drawn from the caller's randomness source, filtered by trial
division against a table of small odd primes and then tested with
Miller-Rabin. Each prime gets its two top bits set so that the product of
two `bits`-bit primes has exactly `2 * bits` bits.
"""

import logging
from typing import List, Optional, Tuple

import gmpy2

from fast_paillier.config import (
    MILLER_RABIN_ROUNDS,
    MIN_PRIME_BITS,
    PRIME_ATTEMPTS_PER_BIT,
    SAFE_PRIME_ATTEMPTS_PER_BIT,
    SIEVE_PRIMES,
)
from fast_paillier.crypto.sampling import RandomSource, default_source, draw_below, gcd, random_bits
from fast_paillier.errors import GenerationError, RandomSourceExhausted

logger = logging.getLogger(__name__)

# Distinct primes are re-drawn at most this many times before giving up.
_MAX_PAIR_ATTEMPTS = 16


def _odd_primes_below(limit: int) -> List[int]:
    sieve = bytearray([1]) * limit
    sieve[0:2] = b"\x00\x00"
    for i in range(2, int(limit ** 0.5) + 1):
        if sieve[i]:
            sieve[i * i :: i] = bytearray(len(sieve[i * i :: i]))
    return [i for i in range(3, limit) if sieve[i]]


SMALL_PRIMES = _odd_primes_below(4096)


def is_probable_prime(n: int, rng: Optional[RandomSource] = None, rounds: Optional[int] = None) -> bool:
    """Miller-Rabin test with witnesses drawn from *rng*.

    A composite passes with probability at most 4^-rounds.
    """
    if n < 2:
        return False
    if n in (2, 3):
        return True
    if n % 2 == 0:
        return False
    for p in SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False

    rng = default_source(rng)
    rounds = MILLER_RABIN_ROUNDS if rounds is None else rounds

    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for _ in range(rounds):
        a = draw_below(rng, n - 3) + 2
        x = gmpy2.powmod(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = gmpy2.powmod(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def _candidate(rng: RandomSource, bits: int) -> int:
    return random_bits(rng, bits - 2) | (0b11 << (bits - 2)) | 1


def _budget(bits: int, safe: bool, max_attempts: Optional[int]) -> int:
    if max_attempts is not None:
        return max_attempts
    return (SAFE_PRIME_ATTEMPTS_PER_BIT if safe else PRIME_ATTEMPTS_PER_BIT) * bits


def generate_prime(
    bits: int,
    rng: Optional[RandomSource] = None,
    max_attempts: Optional[int] = None,
    sieve: Optional[int] = None,
) -> int:
    """Return a random prime of exactly *bits* bits with its top two bits set."""
    if bits < 3:
        raise GenerationError("a prime needs at least 3 bits")
    rng = default_source(rng)
    budget = _budget(bits, False, max_attempts)
    small = SMALL_PRIMES[: SIEVE_PRIMES if sieve is None else sieve]

    for attempt in range(1, budget + 1):
        x = _candidate(rng, bits)
        if any(x % sp == 0 and x != sp for sp in small):
            continue
        if is_probable_prime(x, rng):
            logger.debug("found %d-bit prime after %d candidates", bits, attempt)
            return x

    logger.warning("no %d-bit prime found in %d candidates", bits, budget)
    raise GenerationError(f"no {bits}-bit prime found within {budget} candidates")


def generate_safe_prime(
    bits: int,
    rng: Optional[RandomSource] = None,
    max_attempts: Optional[int] = None,
    sieve: Optional[int] = None,
) -> int:
    """Return a prime p = 2q + 1 of exactly *bits* bits where q is also prime.

    The sieve rejects q whenever q or 2q + 1 has a small factor. Larger sieves
    pay off for larger primes. Pure Python search at 1536 bits takes minutes;
    safe primes are meant for the smaller sizes or for patient callers.
    """
    if bits < 4:
        raise GenerationError("a safe prime needs at least 4 bits")
    rng = default_source(rng)
    budget = _budget(bits, True, max_attempts)
    small = SMALL_PRIMES[: SIEVE_PRIMES if sieve is None else sieve]

    for attempt in range(1, budget + 1):
        q = _candidate(rng, bits - 1)
        p = 2 * q + 1
        if any((q % sp == 0 and q != sp) or (p % sp == 0 and p != sp) for sp in small):
            continue
        if is_probable_prime(q, rng) and is_probable_prime(p, rng):
            logger.debug("found %d-bit safe prime after %d candidates", bits, attempt)
            return p

    logger.warning("no %d-bit safe prime found in %d candidates", bits, budget)
    raise GenerationError(f"no {bits}-bit safe prime found within {budget} candidates")


def generate_primes(
    bits: int,
    rng: Optional[RandomSource] = None,
    safe_primes: bool = False,
    max_attempts: Optional[int] = None,
) -> Tuple[int, int]:
    """Generate distinct *bits*-bit primes p, q; N = p * q has exactly 2 * bits bits.

    *bits* is the size of each prime; it must be even and at least MIN_PRIME_BITS.
    The pair also satisfies gcd(N, (p - 1)(q - 1)) == 1, which Paillier with
    g = N + 1 relies on.
    """
    if bits % 2 or bits < MIN_PRIME_BITS:
        raise GenerationError(f"prime size must be even and >= {MIN_PRIME_BITS} bits, got {bits}")
    rng = default_source(rng)
    prime = generate_safe_prime if safe_primes else generate_prime

    try:
        p = prime(bits, rng, max_attempts)
        for _ in range(_MAX_PAIR_ATTEMPTS):
            q = prime(bits, rng, max_attempts)
            if q != p and gcd(p * q, (p - 1) * (q - 1)) == 1:
                logger.debug("generated %d-bit modulus", 2 * bits)
                return p, q
    except RandomSourceExhausted as exc:
        raise GenerationError("randomness source failed during key generation") from exc

    raise GenerationError("could not find a second distinct prime")

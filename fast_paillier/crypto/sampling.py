"""
Randomness boundary and the small number-theoretic helpers shared by the
key, prime and exponentiation modules.
"""

import logging
import secrets
from typing import Optional, Protocol

import gmpy2

from fast_paillier.config import SAMPLE_RETRIES
from fast_paillier.errors import RandomSourceExhausted

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything able to produce a cryptographically secure integer in [0, bound)."""

    def randbelow(self, bound: int) -> int:
        ...


class SystemRandomSource:
    """Operating system entropy through the `secrets` module."""

    def randbelow(self, bound: int) -> int:
        return secrets.randbelow(bound)

    def __repr__(self) -> str:
        return "SystemRandomSource()"


def default_source(rng: Optional[RandomSource] = None) -> RandomSource:
    return SystemRandomSource() if rng is None else rng


def draw_below(rng: RandomSource, bound: int) -> int:
    """Draw one value in [0, bound) from *rng*, checking what comes back.

    Raises RandomSourceExhausted if the source fails at the OS level or
    hands back a value outside the requested range.
    """
    if bound < 1:
        raise ValueError("bound must be >= 1")
    try:
        value = rng.randbelow(bound)
    except OSError as exc:
        raise RandomSourceExhausted("randomness source failed to produce a value") from exc
    if not isinstance(value, int) or not 0 <= value < bound:
        raise RandomSourceExhausted("randomness source returned a value outside [0, bound)")
    return value


def random_bits(rng: RandomSource, bits: int) -> int:
    return draw_below(rng, 1 << bits)


def in_mult_group(x: int, n: int) -> bool:
    """Checks that x lies in Z*_n."""
    return 0 < x < n and gcd(x, n) == 1


def sample_in_mult_group(
    n: int,
    rng: Optional[RandomSource] = None,
    retries: Optional[int] = None,
) -> int:
    """Sample r uniformly from [1, n) with gcd(r, n) == 1.

    For a Paillier modulus a draw fails with probability about 2/sqrt(n), so
    the retry budget only matters for a broken source.
    """
    rng = default_source(rng)
    budget = SAMPLE_RETRIES if retries is None else retries
    for _ in range(budget):
        r = draw_below(rng, n - 1) + 1
        if in_mult_group(r, n):
            return r
    logger.warning("no unit modulo N found after %d draws", budget)
    raise RandomSourceExhausted(f"no value coprime to N found after {budget} draws")


def gcd(a: int, b: int) -> int:
    return int(gmpy2.gcd(a, b))


def lcm(a: int, b: int) -> int:
    return int(gmpy2.lcm(a, b))


def powmod(base: int, exp: int, mod: int) -> int:
    return int(gmpy2.powmod(base, exp, mod))


def invert(a: int, mod: int) -> int:
    """Modular inverse; raises ZeroDivisionError if a is not invertible."""
    return int(gmpy2.invert(a, mod))


def l_function(x: int, n: int) -> int:
    # L(x) = (x - 1) / n
    return (x - 1) // n

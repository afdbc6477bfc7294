"""
Exponentiation helpers.

FixedBaseExp precomputes a windowed table for one base so that raising it to
many different exponents costs only multiplications. CrtExp and NaiveExp
raise many different bases to one fixed exponent modulo N^2; CrtExp needs the
factorization of N and works modulo p^2 and q^2 instead.
"""

import logging
from typing import List, Optional, Protocol

import gmpy2

from fast_paillier.config import EXP_WINDOW_BITS
from fast_paillier.crypto.sampling import invert

logger = logging.getLogger(__name__)


class FixedBaseExp:
    """Table-driven `base ** e mod modulus` for a fixed base.

    Row i of the table holds base^(k * 2^(i * window)) for k in [1, 2^window),
    so an exponent is consumed one window at a time with one multiplication
    per non-zero window and no squarings. The table covers exponents of up
    to *max_bits* bits; larger exponents fall back to plain modular
    exponentiation. It holds ceil(max_bits / window) * (2^window - 1)
    residues and is never modified after construction.
    """

    def __init__(self, base: int, modulus: int, max_bits: int, window: Optional[int] = None):
        window = EXP_WINDOW_BITS if window is None else window
        if modulus < 2:
            raise ValueError("modulus must be >= 2")
        if max_bits < 1:
            raise ValueError("max_bits must be >= 1")
        if not 1 <= window <= 16:
            raise ValueError("window must be in [1, 16]")

        self.base = base % modulus
        self.modulus = modulus
        self.max_bits = max_bits
        self.window = window
        self._table = self._build()
        logger.debug(
            "built fixed-base table: %d rows of %d entries", len(self._table), (1 << window) - 1
        )

    def _build(self) -> List[List[gmpy2.mpz]]:
        modulus = gmpy2.mpz(self.modulus)
        table = []
        x = gmpy2.mpz(self.base)
        for _ in range(0, self.max_bits, self.window):
            row = []
            v = gmpy2.mpz(1)
            for _ in range(1, 1 << self.window):
                v = v * x % modulus
                row.append(v)
            table.append(row)
            # Advance x by one window.
            x = gmpy2.powmod(x, 1 << self.window, modulus)
        return table

    def exp(self, e: int) -> int:
        if e < 0:
            raise ValueError("exponent must be non-negative")
        if e.bit_length() > self.max_bits:
            logger.debug("exponent exceeds table size, using generic exponentiation")
            return int(gmpy2.powmod(self.base, e, self.modulus))

        accum = gmpy2.mpz(1)
        mask = (1 << self.window) - 1
        i = 0
        while e:
            key = e & mask
            if key:
                accum = accum * self._table[i][key - 1] % self.modulus
            e >>= self.window
            i += 1
        return int(accum % self.modulus)

    def __repr__(self) -> str:
        return f"FixedBaseExp(max_bits={self.max_bits}, window={self.window})"


class FactorizedExp(Protocol):
    """`x ** e mod (p q)^2` for a fixed, non-negative e."""

    def exp(self, x: int) -> int:
        ...


class NaiveExp:
    """Reference implementation: one exponentiation modulo N^2."""

    def __init__(self, e: int, p: int, q: int):
        if e < 0 or p <= 0 or q <= 0:
            raise ValueError("exponent and factors must be non-negative")
        self.e = e
        self.nn = (p * q) ** 2

    def exp(self, x: int) -> int:
        return int(gmpy2.powmod(x, self.e, self.nn))


class CrtExp:
    """`x ** e mod N^2` through the Chinese remainder theorem.

    The exponent is reduced modulo phi(p^2) = p^2 - p and phi(q^2) = q^2 - q,
    and the two half-size results are recombined with beta = (p^2)^-1 mod q^2.
    The reduction is only valid for x coprime to N.
    """

    def __init__(self, e: int, p: int, q: int):
        if e < 0 or p <= 0 or q <= 0:
            raise ValueError("exponent and factors must be non-negative")
        self.pp = p * p
        self.qq = q * q
        self.e_mod_phi_pp = e % (self.pp - p)
        self.e_mod_phi_qq = e % (self.qq - q)
        self.beta = invert(self.pp, self.qq)

    def exp(self, x: int) -> int:
        r1 = gmpy2.powmod(x % self.pp, self.e_mod_phi_pp, self.pp)
        r2 = gmpy2.powmod(x % self.qq, self.e_mod_phi_qq, self.qq)
        return int((r2 - r1) * self.beta % self.qq * self.pp + r1)

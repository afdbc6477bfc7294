"""
Paillier encryption with generator g = N + 1.

EncryptionKey carries N only and performs encryption and the homomorphic
operations. DecryptionKey carries the factorization of N together with every
CRT constant decryption needs, all derived once at construction.
"""

import logging
from dataclasses import InitVar, dataclass, field
from typing import Optional, Tuple

from fast_paillier.config import DEFAULT_PRIME_BITS
from fast_paillier.crypto.exp import CrtExp, FactorizedExp, FixedBaseExp
from fast_paillier.crypto.primes import generate_primes, is_probable_prime
from fast_paillier.crypto.sampling import (
    RandomSource,
    gcd,
    invert,
    l_function,
    lcm,
    powmod,
    sample_in_mult_group,
)
from fast_paillier.errors import (
    InvalidCiphertext,
    InvalidKey,
    InvalidPlaintext,
    InvalidRandomness,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncryptionKey:
    n: int
    nn: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.n < 3 or self.n % 2 == 0:
            raise InvalidKey("N must be an odd integer >= 3")
        object.__setattr__(self, "nn", self.n * self.n)

    @classmethod
    def from_n(cls, n: int) -> "EncryptionKey":
        """Wrap an externally issued modulus."""
        return cls(n=n)

    @property
    def g(self) -> int:
        return self.n + 1

    @property
    def bits(self) -> int:
        return self.n.bit_length()

    # ── Validation ────────────────────────────────
    def _plaintext(self, m: int, reduce: bool, what: str = "plaintext") -> int:
        if reduce:
            return m % self.n
        if not 0 <= m < self.n:
            raise InvalidPlaintext(f"{what} must be in [0, N)")
        return m

    def _ciphertext(self, c: int) -> int:
        if not 0 <= c < self.nn:
            raise InvalidCiphertext("ciphertext must be in [0, N^2)")
        return c

    def _randomness(self, r: int) -> int:
        if not 1 <= r < self.n:
            raise InvalidRandomness("randomness must be in [1, N)")
        if gcd(r, self.n) != 1:
            raise InvalidRandomness("randomness must be coprime to N")
        return r

    def _message_term(self, m: int) -> int:
        # (1 + N)^m = 1 + m*N (mod N^2)
        return (1 + m * self.n) % self.nn

    # ── Encryption ────────────────────────────────
    def encrypt_with_randomness(self, m: int, r: int, reduce: bool = False) -> int:
        """Encrypt *m* with caller-chosen blinding *r*.

        Deterministic; meant for tests and proof protocols that need to
        reproduce a ciphertext.
        """
        m = self._plaintext(m, reduce)
        r = self._randomness(r)
        return self._message_term(m) * powmod(r, self.n, self.nn) % self.nn

    def encrypt_with_nonce(
        self, m: int, rng: Optional[RandomSource] = None, reduce: bool = False
    ) -> Tuple[int, int]:
        """Encrypt *m* and also return the blinding value used."""
        m = self._plaintext(m, reduce)
        r = sample_in_mult_group(self.n, rng)
        return self.encrypt_with_randomness(m, r), r

    def encrypt(self, m: int, rng: Optional[RandomSource] = None, reduce: bool = False) -> int:
        return self.encrypt_with_nonce(m, rng, reduce)[0]

    def rerandomize(self, c: int, rng: Optional[RandomSource] = None) -> int:
        """Multiply a fresh r^N into *c*; the plaintext is unchanged."""
        c = self._ciphertext(c)
        r = sample_in_mult_group(self.n, rng)
        return c * powmod(r, self.n, self.nn) % self.nn

    # ── Homomorphic operations ────────────────────
    def add(self, c1: int, c2: int) -> int:
        """Ciphertext of m1 + m2 mod N."""
        return self._ciphertext(c1) * self._ciphertext(c2) % self.nn

    def add_plaintext(self, c: int, m: int, reduce: bool = False) -> int:
        """Ciphertext of m_c + m mod N, without blinding the added term."""
        c = self._ciphertext(c)
        m = self._plaintext(m, reduce)
        return c * self._message_term(m) % self.nn

    def neg(self, c: int) -> int:
        """Ciphertext of -m mod N."""
        c = self._ciphertext(c)
        try:
            return invert(c, self.nn)
        except ZeroDivisionError:
            raise InvalidCiphertext("ciphertext is not invertible modulo N^2") from None

    def sub(self, c1: int, c2: int) -> int:
        """Ciphertext of m1 - m2 mod N."""
        return self.add(c1, self.neg(c2))

    def mul_scalar(
        self,
        c: int,
        k: int,
        table: Optional[FixedBaseExp] = None,
        reduce: bool = False,
    ) -> int:
        """Ciphertext of k * m mod N.

        Pass a table from `precompute(c)` when the same ciphertext is
        multiplied by many scalars.
        """
        c = self._ciphertext(c)
        k = self._plaintext(k, reduce, what="scalar")
        if table is not None:
            if table.base != c or table.modulus != self.nn:
                raise ValueError("table was built for a different base or key")
            return table.exp(k)
        return powmod(c, k, self.nn)

    def precompute(self, c: int, max_bits: Optional[int] = None, window: Optional[int] = None) -> FixedBaseExp:
        """Build a fixed-base table for *c*, owned by the caller.

        Covers every scalar in [0, N) unless *max_bits* says otherwise.
        """
        c = self._ciphertext(c)
        return FixedBaseExp(c, self.nn, self.bits if max_bits is None else max_bits, window)

    def __repr__(self) -> str:
        return f"EncryptionKey(bits={self.bits})"


@dataclass(frozen=True)
class DecryptionKey:
    """Secret key. Construction checks that p and q are distinct primes unless
    *verify* is False, which is reserved for primes already tested by the caller.
    """

    p: int = field(repr=False)
    q: int = field(repr=False)
    verify: InitVar[bool] = True

    encryption_key: EncryptionKey = field(init=False, repr=False, compare=False)
    pp: int = field(init=False, repr=False, compare=False)
    qq: int = field(init=False, repr=False, compare=False)
    pp_inv_qq: int = field(init=False, repr=False, compare=False)
    p_inv_q: int = field(init=False, repr=False, compare=False)
    hp: int = field(init=False, repr=False, compare=False)
    hq: int = field(init=False, repr=False, compare=False)
    _crt_n: FactorizedExp = field(init=False, repr=False, compare=False)

    def __post_init__(self, verify: bool):
        p, q = self.p, self.q
        if p == q:
            raise InvalidKey("p and q must be distinct")
        if p < 3 or q < 3 or p % 2 == 0 or q % 2 == 0:
            raise InvalidKey("p and q must be odd primes")
        if gcd(p, q) != 1:
            raise InvalidKey("p and q must be coprime")
        n = p * q
        if gcd(n, (p - 1) * (q - 1)) != 1:
            raise InvalidKey("gcd(N, (p - 1)(q - 1)) must be 1")
        if verify and not (is_probable_prime(p) and is_probable_prime(q)):
            raise InvalidKey("p and q must be prime")

        ek = EncryptionKey(n)
        pp, qq = p * p, q * q
        derived = {
            "encryption_key": ek,
            "pp": pp,
            "qq": qq,
            "pp_inv_qq": invert(pp, qq),
            "p_inv_q": invert(p, q),
            "hp": self._h(ek.g, p, pp),
            "hq": self._h(ek.g, q, qq),
            "_crt_n": CrtExp(n, p, q),
        }
        for name, value in derived.items():
            object.__setattr__(self, name, value)

    @staticmethod
    def _h(g: int, x: int, xx: int) -> int:
        # (L_x(g^(x-1) mod x^2))^-1 mod x
        try:
            return invert(l_function(powmod(g % xx, x - 1, xx), x), x)
        except ZeroDivisionError:
            raise InvalidKey("p and q must be prime") from None

    @classmethod
    def from_primes(cls, p: int, q: int, rng: Optional[RandomSource] = None) -> "DecryptionKey":
        """Build a key from externally supplied primes, checking they are prime."""
        for x in (p, q):
            if not is_probable_prime(x, rng):
                raise InvalidKey("p and q must be prime")
        return cls(p=p, q=q, verify=False)

    @classmethod
    def generate(
        cls,
        bits: Optional[int] = None,
        rng: Optional[RandomSource] = None,
        safe_primes: bool = False,
    ) -> "DecryptionKey":
        """Generate a fresh key from two *bits*-bit primes (a 2 * bits-bit modulus)."""
        bits = DEFAULT_PRIME_BITS if bits is None else bits
        logger.debug("generating Paillier key from %d-bit primes (safe_primes=%s)", bits, safe_primes)
        p, q = generate_primes(bits, rng, safe_primes=safe_primes)
        return cls(p=p, q=q, verify=False)

    # ── Parameters ────────────────────────────────
    @property
    def n(self) -> int:
        return self.encryption_key.n

    @property
    def nn(self) -> int:
        return self.encryption_key.nn

    @property
    def bits(self) -> int:
        return self.encryption_key.bits

    @property
    def lam(self) -> int:
        """Carmichael function lambda(N) = lcm(p - 1, q - 1)."""
        return lcm(self.p - 1, self.q - 1)

    @property
    def mu(self) -> int:
        """lambda^-1 mod N, since L(g^lambda mod N^2) = lambda mod N for g = N + 1."""
        return invert(self.lam, self.n)

    # ── Decryption ────────────────────────────────
    def decrypt(self, c: int) -> int:
        """Recover m from *c* using two half-size exponentiations.

        m_p = L_p(c^(p-1) mod p^2) * hp mod p, m_q likewise, then Garner's
        formula m = m_p + ((m_q - m_p) * p^-1 mod q) * p.
        """
        if not 0 <= c < self.nn:
            raise InvalidCiphertext("ciphertext must be in [0, N^2)")
        if gcd(c, self.n) != 1:
            raise InvalidCiphertext("ciphertext is not invertible modulo N^2")

        p, q = self.p, self.q
        m_p = l_function(powmod(c % self.pp, p - 1, self.pp), p) * self.hp % p
        m_q = l_function(powmod(c % self.qq, q - 1, self.qq), q) * self.hq % q
        return m_p + (m_q - m_p) * self.p_inv_q % q * p

    # ── Encryption with the trapdoor ──────────────
    def encrypt_with_randomness(self, m: int, r: int, reduce: bool = False) -> int:
        """Same result as the public key, with r^N computed modulo p^2 and q^2."""
        ek = self.encryption_key
        m = ek._plaintext(m, reduce)
        r = ek._randomness(r)
        return ek._message_term(m) * self._crt_n.exp(r) % self.nn

    def encrypt_with_nonce(
        self, m: int, rng: Optional[RandomSource] = None, reduce: bool = False
    ) -> Tuple[int, int]:
        m = self.encryption_key._plaintext(m, reduce)
        r = sample_in_mult_group(self.n, rng)
        return self.encrypt_with_randomness(m, r), r

    def encrypt(self, m: int, rng: Optional[RandomSource] = None, reduce: bool = False) -> int:
        return self.encrypt_with_nonce(m, rng, reduce)[0]

    def rerandomize(self, c: int, rng: Optional[RandomSource] = None) -> int:
        c = self.encryption_key._ciphertext(c)
        r = sample_in_mult_group(self.n, rng)
        return c * self._crt_n.exp(r) % self.nn

    def __repr__(self) -> str:
        return f"DecryptionKey(bits={self.bits})"


def generate_keypair(
    bits: Optional[int] = None,
    rng: Optional[RandomSource] = None,
    safe_primes: bool = False,
) -> Tuple[EncryptionKey, DecryptionKey]:
    dk = DecryptionKey.generate(bits, rng, safe_primes)
    return dk.encryption_key, dk

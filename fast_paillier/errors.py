"""
Error kinds raised by fast-paillier.
Input errors also derive from ValueError; environmental failures do not.
"""


class PaillierError(Exception):
    """Root of every error raised by this package."""


class GenerationError(PaillierError):
    """Prime search exceeded its budget or the randomness source failed."""


class InvalidKey(PaillierError, ValueError):
    """Key material does not describe a valid Paillier key."""


class InvalidPlaintext(PaillierError, ValueError):
    """Plaintext (or scalar) outside [0, N)."""


class InvalidCiphertext(PaillierError, ValueError):
    """Ciphertext outside [0, N^2) or not invertible modulo N^2."""


class InvalidRandomness(PaillierError, ValueError):
    """Blinding value outside [1, N) or not coprime to N."""


class RandomSourceExhausted(PaillierError):
    """The randomness source could not supply a usable value."""

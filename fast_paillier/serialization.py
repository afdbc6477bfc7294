"""
pydantic models mapping keys and ciphertexts to a structured format.

Big integers travel as lowercase hex strings (decimal strings are capped by
CPython's int/str conversion limit for large moduli) and are parsed from hex
strings or plain ints. Derived fields are recomputed on load and must match.
The decryption key model carries secret material; where it is written is the
caller's responsibility.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer, model_validator

from fast_paillier.crypto.paillier import DecryptionKey, EncryptionKey


def _parse_big_int(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return int(value, 16)
        except ValueError:
            raise ValueError("expected a hex encoded integer") from None
    return value


BigInt = Annotated[
    int,
    BeforeValidator(_parse_big_int),
    PlainSerializer(lambda v: format(v, "x"), return_type=str),
    Field(ge=0),
]


# ── Models ─────────────────────────────────────────
class EncryptionKeyModel(BaseModel):
    n: BigInt
    nn: BigInt

    @model_validator(mode="after")
    def _check_derived(self) -> "EncryptionKeyModel":
        key = EncryptionKey.from_n(self.n)
        if self.nn != key.nn:
            raise ValueError("nn does not match n")
        return self

    @classmethod
    def from_key(cls, key: EncryptionKey) -> "EncryptionKeyModel":
        return cls(n=key.n, nn=key.nn)

    def to_key(self) -> EncryptionKey:
        return EncryptionKey.from_n(self.n)


class DecryptionKeyModel(BaseModel):
    n: BigInt
    nn: BigInt
    p: BigInt
    q: BigInt
    pp: BigInt
    qq: BigInt
    pp_inv_qq: BigInt
    p_inv_q: BigInt
    hp: BigInt
    hq: BigInt

    @model_validator(mode="after")
    def _check_derived(self) -> "DecryptionKeyModel":
        key = DecryptionKey.from_primes(self.p, self.q)
        mismatched = [
            name
            for name, value in self._derived(key).items()
            if getattr(self, name) != value
        ]
        if mismatched:
            raise ValueError(f"fields do not match p and q: {', '.join(mismatched)}")
        return self

    @staticmethod
    def _derived(key: DecryptionKey) -> dict:
        return {
            "n": key.n,
            "nn": key.nn,
            "pp": key.pp,
            "qq": key.qq,
            "pp_inv_qq": key.pp_inv_qq,
            "p_inv_q": key.p_inv_q,
            "hp": key.hp,
            "hq": key.hq,
        }

    @classmethod
    def from_key(cls, key: DecryptionKey) -> "DecryptionKeyModel":
        return cls(p=key.p, q=key.q, **cls._derived(key))

    def to_key(self) -> DecryptionKey:
        return DecryptionKey(p=self.p, q=self.q)


class CiphertextModel(BaseModel):
    c: BigInt

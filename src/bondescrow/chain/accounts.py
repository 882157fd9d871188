"""
Accounts: identities backed by secp256k1 keys.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..crypto.hashing import SHA256Hasher
from ..crypto.signatures import PrivateKey, PublicKey


@dataclass(frozen=True)
class Account:
    """An identity and the key it was derived from."""

    address: str
    public_key: PublicKey = field(repr=False)
    label: str = ""

    @classmethod
    def from_private_key(cls, private_key: PrivateKey, label: str = "") -> "Account":
        public_key = private_key.get_public_key()
        return cls(address=public_key.to_address(), public_key=public_key, label=label)

    @classmethod
    def generate(cls, label: str = "") -> "Account":
        """Create an account from a fresh random key."""
        return cls.from_private_key(PrivateKey.generate(), label)

    @classmethod
    def from_seed(cls, seed: str, label: Optional[str] = None) -> "Account":
        """Deterministic account derived from a seed phrase (tests and demos)."""
        key_bytes = SHA256Hasher.hash(f"bondescrow-account:{seed}").value
        return cls.from_private_key(
            PrivateKey.from_bytes(key_bytes), seed if label is None else label
        )

    def __str__(self) -> str:
        return self.address

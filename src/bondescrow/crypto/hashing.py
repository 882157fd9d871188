"""
SHA-256 digests for event chaining and account derivation.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Hash:
    """A 32-byte digest."""

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != 32:
            raise ValueError(f"Digest must be 32 bytes, got {len(self.value)}")

    @classmethod
    def from_hex(cls, hex_string: str) -> "Hash":
        return cls(bytes.fromhex(hex_string))

    def to_hex(self) -> str:
        return self.value.hex()

    def __str__(self) -> str:
        return self.to_hex()


class SHA256Hasher:
    """SHA-256 over raw bytes, text and canonical JSON."""

    @staticmethod
    def hash(data: Union[bytes, str]) -> Hash:
        """Digest of ``data``; text is UTF-8 encoded first."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        return Hash(hashlib.sha256(data).digest())

    @staticmethod
    def hash_json(payload: Any) -> Hash:
        """Digest of the sorted-key JSON encoding, so dict ordering never matters.

        Values JSON cannot encode natively are hashed by their ``str()``.
        """
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
        return SHA256Hasher.hash(canonical)

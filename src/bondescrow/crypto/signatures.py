"""
secp256k1 keys behind account identities.

An account address is ``0x`` followed by the first 20 bytes of the double
SHA-256 of the compressed public key.
"""

from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .hashing import SHA256Hasher

# secp256k1 group order
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
ADDRESS_BYTES = 20


@dataclass(frozen=True)
class PrivateKey:
    """Secret scalar of an account."""

    _key: ec.EllipticCurvePrivateKey

    @classmethod
    def generate(cls) -> "PrivateKey":
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def from_bytes(cls, raw: bytes) -> "PrivateKey":
        """Key from a 32-byte big-endian scalar in ``[1, CURVE_ORDER)``."""
        scalar = int.from_bytes(raw, byteorder="big")
        if len(raw) != 32 or not 0 < scalar < CURVE_ORDER:
            raise ValueError("secp256k1 private key must be a 32-byte scalar below the group order")
        return cls(ec.derive_private_key(scalar, ec.SECP256K1()))

    @classmethod
    def from_hex(cls, hex_string: str) -> "PrivateKey":
        return cls.from_bytes(bytes.fromhex(hex_string))

    def to_bytes(self) -> bytes:
        return self._key.private_numbers().private_value.to_bytes(32, byteorder="big")

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    def get_public_key(self) -> "PublicKey":
        return PublicKey(self._key.public_key())

    def __repr__(self) -> str:
        return "PrivateKey(<hidden>)"


@dataclass(frozen=True)
class PublicKey:
    """Public point of an account; the address is derived from it."""

    _key: ec.EllipticCurvePublicKey

    def to_bytes(self, compressed: bool = True) -> bytes:
        """SEC1 point encoding."""
        point_format = PublicFormat.CompressedPoint if compressed else PublicFormat.UncompressedPoint
        return self._key.public_bytes(Encoding.X962, point_format)

    def to_hex(self, compressed: bool = True) -> str:
        return self.to_bytes(compressed).hex()

    def to_address(self) -> str:
        digest = SHA256Hasher.hash(SHA256Hasher.hash(self.to_bytes()).value)
        return "0x" + digest.value[:ADDRESS_BYTES].hex()

    def __str__(self) -> str:
        return f"PublicKey({self.to_address()})"

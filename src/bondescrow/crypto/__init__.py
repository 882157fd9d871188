"""
Cryptographic primitives for bond escrow.

This module provides SHA-256 hashing and secp256k1 keys.
"""

from .hashing import Hash, SHA256Hasher
from .signatures import PrivateKey, PublicKey

__all__ = [
    "Hash",
    "SHA256Hasher",
    "PrivateKey",
    "PublicKey",
]

"""
Cryptographic primitives for demo identities.

This module provides:
- Keccak-256 hashing
- secp256k1 key generation and public key derivation
- Ethereum-style address derivation

Design Notes:
-------------
Demo wallets behave like real accounts: an address is the last 20 bytes of
keccak256(public_key), hex-encoded with a 0x prefix. Connecting with the
same credential always yields the same address.

Bid amounts are NOT encrypted here; sealing is a storage/visibility
contract enforced by the service facade.
"""

import re
import secrets
from dataclasses import dataclass

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1


# =============================================================================
# Constants
# =============================================================================

# secp256k1 curve order (number of points on the curve)
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

_HEX_KEY = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: address derivation, credential-to-key derivation.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Key Generation
# =============================================================================


@dataclass
class KeyPair:
    """
    An ECDSA keypair on secp256k1.

    Attributes:
        private_key: 32-byte secret key (integer in [1, order-1])
        public_key: 64-byte uncompressed public key (x || y coordinates)
    """
    private_key: bytes
    public_key: bytes

    @property
    def address(self) -> str:
        return address_from_public_key(self.public_key)


def generate_keypair() -> KeyPair:
    """
    Generate a new random keypair.

    Uses cryptographically secure random number generator.
    """
    private_key_int = secrets.randbelow(SECP256K1_ORDER - 1) + 1
    private_key = private_key_int.to_bytes(32, byteorder="big")
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    Derive public key from private key.

    Args:
        private_key: 32-byte private key

    Returns:
        64-byte uncompressed public key
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    public_key_point = secp256k1.privtopub(private_key)
    x_bytes = public_key_point[0].to_bytes(32, byteorder="big")
    y_bytes = public_key_point[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


def keypair_from_credentials(credentials: str) -> KeyPair:
    """
    Derive a keypair from a user-supplied credential.

    A 32-byte hex string is used directly as the private key; any other
    string is hashed with keccak256 first. Out-of-range scalars are
    re-hashed until they fall in [1, order-1].
    """
    if not credentials:
        raise ValueError("Credentials must be non-empty")

    if _HEX_KEY.match(credentials):
        private_key = hex_to_bytes(credentials)
    else:
        private_key = keccak256(credentials.encode("utf-8"))

    while not 0 < int.from_bytes(private_key, "big") < SECP256K1_ORDER:
        private_key = keccak256(private_key)

    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def address_from_public_key(public_key: bytes) -> str:
    """
    Derive address from public key (Ethereum-style).

    address = "0x" + hex(keccak256(public_key)[-20:])
    """
    if len(public_key) != 64:
        raise ValueError("Public key must be 64 bytes")
    return bytes_to_hex(keccak256(public_key)[-20:])


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


__all__ = [
    "SECP256K1_ORDER",
    "KeyPair",
    "keccak256",
    "generate_keypair",
    "private_key_to_public_key",
    "keypair_from_credentials",
    "address_from_public_key",
    "bytes_to_hex",
    "hex_to_bytes",
]

"""
Hash Primitives

Digest helpers shared by the ledger and the signature scheme:
- SHA-256 for block hashes
- Double SHA-256 for Bitcoin message digests and Base58Check checksums
- HASH160 (RIPEMD-160 of SHA-256) for address derivation

SHA-256 comes from the `cryptography` package. RIPEMD-160 comes from
pycryptodome, since OpenSSL builds do not always expose it.
"""

from cryptography.hazmat.primitives import hashes
from Crypto.Hash import RIPEMD160


DIGEST_SIZE = 32  # SHA-256 output in bytes
HASH160_SIZE = 20


def sha256(data: bytes) -> bytes:
    """
    Compute the SHA-256 digest of data.

    Args:
        data: Input bytes

    Returns:
        32-byte digest
    """
    digest = hashes.Hash(hashes.SHA256())
    digest.update(data)
    return digest.finalize()


def sha256_hex(data: bytes) -> str:
    """SHA-256 digest as a 64-character lowercase hex string."""
    return sha256(data).hex()


def double_sha256(data: bytes) -> bytes:
    """SHA-256 applied twice (Bitcoin's hash256)."""
    return sha256(sha256(data))


def hash160(data: bytes) -> bytes:
    """
    RIPEMD-160 of SHA-256, the digest behind P2PKH addresses.

    Returns:
        20-byte digest
    """
    return RIPEMD160.new(sha256(data)).digest()

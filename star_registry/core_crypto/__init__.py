# Core Cryptography Module
"""
Hash primitives used across the registry:
- SHA-256 (block hashes)
- Double SHA-256 (message digests, checksums)
- HASH160 (address derivation)
"""

from .hashing import sha256, sha256_hex, double_sha256, hash160

__all__ = [
    'sha256',
    'sha256_hex',
    'double_sha256',
    'hash160',
]

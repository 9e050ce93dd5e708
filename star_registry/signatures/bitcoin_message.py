"""
Bitcoin Signed Message Module

Implements the "Bitcoin Signed Message" scheme used by wallets to prove
control of an address:
- Magic-prefixed message, hashed with double SHA-256
- Compact recoverable ECDSA signature over secp256k1 (65 bytes, base64)
- Public key recovery from the signature
- Address comparison via HASH160

Signature Format (before base64):
    [header (1 byte) | r (32 bytes) | s (32 bytes)]

    header - 27 = flag byte:
        0..3    uncompressed key, P2PKH address
        4..7    compressed key, P2PKH address
        8..11   compressed key, P2SH-P2WPKH address
        12..15  compressed key, native segwit (bech32) address

Security features:
- The address is never trusted: the key is recovered from the signature
  and must hash to the address
- Signing uses RFC 6979 deterministic nonces and low-S normalization
"""

import base64
import hashlib
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import base58
from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.util import sigdecode_string, sigencode_string

from ..core_crypto.hashing import double_sha256, hash160


logger = logging.getLogger(__name__)


# Constants
CURVE = SECP256k1
MESSAGE_MAGIC = b"\x18Bitcoin Signed Message:\n"
SIGNATURE_SIZE = 65     # header + r + s
HEADER_BASE = 27
P2PKH_VERSION = 0x00    # mainnet
TESTNET_P2PKH_VERSION = 0x6f

SEGWIT_P2SH_P2WPKH = "p2sh(p2wpkh)"
SEGWIT_P2WPKH = "p2wpkh"


def encode_varint(n: int) -> bytes:
    """Encode an integer as a Bitcoin CompactSize varint."""
    if n < 0xfd:
        return bytes([n])
    if n <= 0xffff:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xffffffff:
        return b"\xfe" + n.to_bytes(4, "little")
    return b"\xff" + n.to_bytes(8, "little")


def message_digest(message: str) -> bytes:
    """
    Compute the digest a wallet signs for a text message.

    Args:
        message: The message text (UTF-8 encoded before hashing)

    Returns:
        32-byte double SHA-256 of the magic-prefixed message
    """
    data = message.encode("utf-8")
    return double_sha256(MESSAGE_MAGIC + encode_varint(len(data)) + data)


def pubkey_to_address(public_key: bytes, version: int = P2PKH_VERSION) -> str:
    """Encode a serialized public key as a Base58Check P2PKH address."""
    payload = bytes([version]) + hash160(public_key)
    return base58.b58encode_check(payload).decode("ascii")


@dataclass(frozen=True)
class DecodedSignature:
    """Parsed compact signature."""
    recovery: int
    compressed: bool
    segwit_type: Optional[str]
    signature: bytes  # r || s, 64 bytes


def decode_signature(signature: str) -> DecodedSignature:
    """
    Decode a base64 compact signature.

    Raises:
        ValueError: If the encoding, length, or header is invalid
    """
    raw = base64.b64decode(signature, validate=True)
    if len(raw) != SIGNATURE_SIZE:
        raise ValueError(f"Invalid signature length: {len(raw)}")

    flag = raw[0] - HEADER_BASE
    if not 0 <= flag <= 15:
        raise ValueError(f"Invalid signature header: {raw[0]}")

    if not flag & 8:
        segwit_type = None
    elif not flag & 4:
        segwit_type = SEGWIT_P2SH_P2WPKH
    else:
        segwit_type = SEGWIT_P2WPKH

    return DecodedSignature(
        recovery=flag & 3,
        compressed=bool(flag & 12),
        segwit_type=segwit_type,
        signature=raw[1:],
    )


def _recover_candidates(sig: bytes, digest: bytes) -> Tuple[VerifyingKey, ...]:
    """Recover the public keys that could have produced sig over digest."""
    return tuple(VerifyingKey.from_public_key_recovery_with_digest(
        sig, digest, CURVE,
        hashfunc=hashlib.sha256,
        sigdecode=sigdecode_string,
    ))


def _expected_hash(address: str) -> bytes:
    """HASH160 payload of a Base58Check address (version byte dropped)."""
    return base58.b58decode_check(address)[1:]


def verify_message(message: str, address: str, signature: str) -> bool:
    """
    Verify a Bitcoin signed message.

    Args:
        message: The exact message text that was signed
        address: Base58Check address claimed as signer
        signature: Base64 compact signature

    Returns:
        True if the recovered key hashes to the address, False otherwise
    """
    try:
        decoded = decode_signature(signature)
        if decoded.segwit_type == SEGWIT_P2WPKH:
            logger.debug("bech32 addresses are not supported: %s", address)
            return False
        if decoded.recovery > 1:
            # Only arises when r overflowed the group order
            logger.debug("unsupported recovery id %d", decoded.recovery)
            return False

        expected = _expected_hash(address)
        digest = message_digest(message)
        encoding = "compressed" if decoded.compressed else "uncompressed"

        for candidate in _recover_candidates(decoded.signature, digest):
            key_hash = hash160(candidate.to_string(encoding))
            if decoded.segwit_type == SEGWIT_P2SH_P2WPKH:
                key_hash = hash160(b"\x00\x14" + key_hash)
            if key_hash == expected:
                return True
        return False
    except Exception as exc:
        logger.debug("signature rejected for %s: %s", address, exc)
        return False


class KeyPair:
    """
    secp256k1 key pair that can sign Bitcoin messages.

    Used by wallets, tests and the demo; the registry itself only verifies.
    """

    def __init__(self, signing_key: SigningKey, compressed: bool = True):
        self._signing_key = signing_key
        self._compressed = compressed

    @classmethod
    def generate(cls, compressed: bool = True) -> 'KeyPair':
        """Generate a new random key pair."""
        return cls(SigningKey.generate(curve=CURVE), compressed)

    @classmethod
    def from_secret(cls, secret: int, compressed: bool = True) -> 'KeyPair':
        """Create a key pair from a private scalar."""
        return cls(SigningKey.from_secret_exponent(secret, curve=CURVE), compressed)

    @property
    def compressed(self) -> bool:
        return self._compressed

    def public_bytes(self) -> bytes:
        """Serialized public key (33 bytes compressed, 65 uncompressed)."""
        encoding = "compressed" if self._compressed else "uncompressed"
        return self._signing_key.get_verifying_key().to_string(encoding)

    def address(self, version: int = P2PKH_VERSION) -> str:
        """P2PKH address of this key."""
        return pubkey_to_address(self.public_bytes(), version)

    def sign(self, message: str) -> str:
        """
        Sign a message in the compact recoverable format.

        Returns:
            Base64 signature accepted by verify_message and by wallets
        """
        digest = message_digest(message)
        order = CURVE.order
        sig = self._signing_key.sign_digest_deterministic(
            digest, hashfunc=hashlib.sha256, sigencode=sigencode_string
        )

        # Low-S normalization
        r, s = sigdecode_string(sig, order)
        if s > order // 2:
            s = order - s
        sig = sigencode_string(r, s, order)

        own_key = self._signing_key.get_verifying_key().to_string()
        for recovery, candidate in enumerate(_recover_candidates(sig, digest)):
            if candidate.to_string() == own_key:
                break
        else:
            raise ValueError("Could not determine recovery id")

        header = HEADER_BASE + recovery + (4 if self._compressed else 0)
        return base64.b64encode(bytes([header]) + sig).decode("ascii")


def sign_message(private_key: int, message: str, compressed: bool = True) -> str:
    """Sign a message with a raw private scalar."""
    return KeyPair.from_secret(private_key, compressed).sign(message)

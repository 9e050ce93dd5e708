# Signatures Module
"""
Bitcoin signed-message scheme:
- Compact recoverable secp256k1 signatures
- P2PKH and P2SH-P2WPKH address checks
"""

from .bitcoin_message import (
    KeyPair,
    verify_message,
    sign_message,
    message_digest,
    pubkey_to_address,
    decode_signature,
)

__all__ = [
    'KeyPair',
    'verify_message',
    'sign_message',
    'message_digest',
    'pubkey_to_address',
    'decode_signature',
]

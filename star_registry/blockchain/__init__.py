# Blockchain Module
"""
Blockchain Ledger implementation including:
- Hex-encoded JSON block payloads
- SHA-256 hash chaining
- Genesis bootstrap
- Serialized single-writer appends

Security features:
- Immutable blocks (frozen dataclass)
- Full chain validation reporting every issue
"""

# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    from . import ledger
    return getattr(ledger, name)

__all__ = [
    'Block',
    'Blockchain',
    'StarRecord',
    'ValidationIssue',
    'IssueKind',
    'create_blockchain',
    'encode_payload',
    'decode_body',
    'GENESIS_HEIGHT',
    'GENESIS_PAYLOAD',
]

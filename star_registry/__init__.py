# Star Registry
"""
Append-only, hash-linked ledger with Bitcoin-signature-gated star
ownership registration.
"""

__version__ = "1.0.0"

# Registry Module
"""
Ownership-proof protocol that gates star registration on the blockchain.
"""

# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    from . import ownership
    return getattr(ownership, name)

__all__ = [
    'StarRegistry',
    'build_challenge',
    'parse_challenge_time',
    'create_star_registry',
]

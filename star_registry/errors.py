"""
Star Registry Exceptions

Two families:
- Defect-class errors (ChainDefectError): internal invariants broke. A
  boundary layer should map these to a server fault.
- Caller errors (SubmitError): the ownership proof was rejected. The
  caller recovers by requesting a new challenge and signing again.
"""


class StarRegistryError(Exception):
    """Base exception for star_registry."""


class ConfigError(StarRegistryError):
    """Settings are missing, invalid, or inconsistent."""


class ChainDefectError(StarRegistryError):
    """Internal chain invariant violated."""


class AppendError(ChainDefectError):
    """Encoding or hashing failed while sealing a block."""


class GenesisAccessError(StarRegistryError):
    """Payload requested from the genesis block (its payload is a sentinel)."""


class SubmitError(StarRegistryError):
    """Star submission rejected."""


class ExpiredMessageError(SubmitError):
    """Ownership message failed the timing window check."""


class InvalidSignatureError(SubmitError):
    """Signature does not verify against the message and address."""


class MalformedMessageError(SubmitError):
    """Ownership message does not carry a parseable timestamp."""


class InvalidStarError(SubmitError):
    """Star data cannot be encoded into a block payload."""

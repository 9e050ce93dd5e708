"""
Ownership Proof Module

Registers stars on the blockchain behind a challenge/response proof of
address ownership:

    1. issue_challenge(address)  -> "<address>:<timestamp>:starRegistry"
    2. the wallet signs the challenge (Bitcoin signed message)
    3. submit(address, message, signature, star)
         -> encode star -> timing check -> signature check -> append

Nothing is stored between steps 1 and 3: the timestamp travels inside the
message and the signature binds it to the address.

Author: Star Registry Project
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ..blockchain.ledger import Block, Blockchain
from ..config import RegistrySettings, resolve_settings
from ..errors import (
    ExpiredMessageError,
    InvalidSignatureError,
    InvalidStarError,
    MalformedMessageError,
)
from ..signatures.bitcoin_message import verify_message


logger = logging.getLogger(__name__)


MESSAGE_SEPARATOR = ":"


# ============================================================================
# Message Helpers
# ============================================================================

def build_challenge(address: str, timestamp: int, tag: str) -> str:
    """Format a challenge message."""
    return MESSAGE_SEPARATOR.join((address, str(timestamp), tag))


def parse_challenge_time(message: str) -> int:
    """
    Extract the issue timestamp from a challenge message.

    Raises:
        MalformedMessageError: If the second field is not an integer
    """
    parts = message.split(MESSAGE_SEPARATOR) if isinstance(message, str) else []
    if len(parts) < 2:
        raise MalformedMessageError(f"Malformed ownership message: {message!r}")
    try:
        return int(parts[1])
    except ValueError:
        raise MalformedMessageError(
            f"Ownership message has no valid timestamp: {message!r}"
        ) from None


# ============================================================================
# Star Registry
# ============================================================================

class StarRegistry:
    """
    Ownership-proof gate in front of a Blockchain.

    Each submission is self-contained: the registry keeps no challenge
    state, and a successful submission appends exactly one block.
    """

    def __init__(
        self,
        blockchain: Optional[Blockchain] = None,
        clock: Callable[[], float] = time.time,
        settings: Optional[RegistrySettings] = None,
        verifier: Callable[[str, str, str], bool] = verify_message
    ):
        """
        Initialize the registry.

        Args:
            blockchain: Existing chain to append to (new one if None)
            clock: Source of wall-clock seconds
            settings: Registry settings (environment defaults if None)
            verifier: verify(message, address, signature) -> bool
        """
        self._settings = resolve_settings(settings)
        self._clock = clock
        self._verify = verifier
        self._blockchain = blockchain or Blockchain(
            clock=clock,
            genesis_payload={'data': self._settings.genesis_data},
        )

    @property
    def blockchain(self) -> Blockchain:
        return self._blockchain

    @property
    def window_seconds(self) -> int:
        return self._settings.ownership_window_seconds

    def _now(self) -> int:
        return int(self._clock())

    # ========================================================================
    # Protocol
    # ========================================================================

    def issue_challenge(self, address: str) -> str:
        """
        Build the message a wallet must sign to register a star.

        Args:
            address: Wallet address claiming ownership

        Returns:
            "<address>:<unix seconds>:<protocol tag>"
        """
        if not address:
            raise ValueError("Address cannot be empty")
        return build_challenge(address, self._now(), self._settings.protocol_tag)

    def submit(
        self,
        address: str,
        message: str,
        signature: str,
        star: Any
    ) -> Block:
        """
        Verify an ownership proof and register the star.

        Args:
            address: Wallet address that signed the message
            message: Challenge from issue_challenge
            signature: Base64 Bitcoin message signature
            star: Star data (JSON-serializable)

        Returns:
            The sealed block holding {"star": star, "owner": address}

        Raises:
            InvalidStarError: If the star cannot be encoded
            MalformedMessageError: If the message carries no timestamp
            ExpiredMessageError: If the timing window check fails
            InvalidSignatureError: If the signature does not verify
        """
        try:
            block = Block.create({'star': star, 'owner': address})
        except (TypeError, ValueError) as exc:
            logger.warning("Rejected star for %s: payload not encodable (%s)", address, exc)
            raise InvalidStarError(f"Star data cannot be encoded: {exc}") from exc

        issued_at = parse_challenge_time(message)
        elapsed = self._now() - issued_at

        # Rejects submissions made before the window has fully elapsed
        if elapsed < self.window_seconds:
            logger.warning(
                "Rejected star for %s: message obsolete (elapsed %ds, window %ds)",
                address, elapsed, self.window_seconds
            )
            raise ExpiredMessageError(
                "Message signature obsolete - max admissible time before "
                f"signing is: {self.window_seconds} seconds."
            )

        if not self._verify(message, address, signature):
            logger.warning("Rejected star for %s: signature does not verify", address)
            raise InvalidSignatureError("Message not signed")

        block = self._blockchain.append(block)
        logger.info("Registered star for %s in block #%d", address, block.height)
        return block

    # ========================================================================
    # Boundary Queries
    # ========================================================================

    def chain_height(self) -> int:
        return self._blockchain.height()

    def block_by_height(self, height: int) -> Optional[Dict[str, Any]]:
        block = self._blockchain.find_by_height(height)
        return block.to_dict() if block else None

    def block_by_hash(self, block_hash: str) -> Optional[Dict[str, Any]]:
        block = self._blockchain.find_by_hash(block_hash)
        return block.to_dict() if block else None

    def stars_by_address(self, address: str) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self._blockchain.stars_for_owner(address)]

    def validate_chain(self) -> List[str]:
        """Issue strings for the whole chain; empty means valid."""
        return [str(issue) for issue in self._blockchain.validate()]


# ============================================================================
# Convenience Functions
# ============================================================================

def create_star_registry(
    settings: Optional[RegistrySettings] = None
) -> StarRegistry:
    """Create a registry on a fresh blockchain."""
    return StarRegistry(settings=settings)

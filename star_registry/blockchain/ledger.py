"""
Blockchain Ledger Module

Implements an append-only, hash-linked chain of blocks:
- Hex-encoded JSON payloads (reversible)
- SHA-256 hash over every field except the hash itself
- Genesis bootstrap with a sentinel payload
- Serialized appends (single writer)
- Full chain validation that reports every issue it finds

Security features:
- Immutable blocks (frozen dataclass); sealing builds a new instance
- Every block re-verifies its own hash
- Every link is checked against the predecessor's hash

Author: Star Registry Project
"""

import json
import logging
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..core_crypto.hashing import sha256_hex
from ..errors import AppendError, GenesisAccessError


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

GENESIS_HEIGHT = 0
GENESIS_PAYLOAD = {'data': 'Genesis Block'}


def encode_payload(payload: Any) -> str:
    """Encode a JSON-compatible payload as hex of its UTF-8 JSON bytes."""
    return json.dumps(payload).encode('utf-8').hex()


def decode_body(body: str) -> Any:
    """Reverse encode_payload."""
    return json.loads(bytes.fromhex(body).decode('utf-8'))


# ============================================================================
# Block Structure (Immutable)
# ============================================================================

@dataclass(frozen=True)
class Block:
    """
    Immutable block structure for the blockchain.

    A block starts unsealed (height 0, no previous hash, timestamp 0,
    no hash). The chain seals it exactly once by building a new instance
    carrying height, previous_hash, timestamp and hash together.
    """
    height: int
    body: str                    # hex-encoded JSON payload
    previous_hash: Optional[str]
    timestamp: int               # seconds since epoch
    hash: Optional[str] = None

    @classmethod
    def create(cls, payload: Any) -> 'Block':
        """
        Create an unsealed block around a payload.

        Args:
            payload: JSON-serializable data

        Returns:
            Unsealed block
        """
        return cls(
            height=0,
            body=encode_payload(payload),
            previous_hash=None,
            timestamp=0,
        )

    @property
    def is_genesis(self) -> bool:
        # Unsealed blocks also sit at height 0 but carry caller payloads
        return self.height == GENESIS_HEIGHT and self.hash is not None

    @property
    def is_sealed(self) -> bool:
        return self.hash is not None

    def _hash_fields(self) -> Dict[str, Any]:
        return {
            'body': self.body,
            'hash': None,
            'height': self.height,
            'previous_hash': self.previous_hash,
            'timestamp': self.timestamp,
        }

    def compute_hash(self) -> str:
        """Compute the digest over all fields with hash blanked."""
        canonical = json.dumps(
            self._hash_fields(), sort_keys=True, separators=(',', ':')
        )
        return sha256_hex(canonical.encode('utf-8'))

    def verify_integrity(self) -> bool:
        """
        Recompute the hash and compare it to the stored one.

        Returns:
            True iff the stored hash matches; False for unsealed blocks
        """
        if self.hash is None:
            return False
        try:
            expected = self.compute_hash()
        except (TypeError, ValueError):
            return False
        if expected != self.hash:
            logger.warning(
                "Block %d hash mismatch: stored=%s computed=%s",
                self.height, self.hash, expected
            )
            return False
        return True

    def decode_payload(self) -> Any:
        """
        Decode the payload back into structured data.

        Raises:
            GenesisAccessError: If this is the genesis block
        """
        if self.is_genesis:
            raise GenesisAccessError("Genesis block carries no caller payload")
        return decode_body(self.body)

    def to_dict(self) -> Dict[str, Any]:
        """Convert block to dictionary for serialization."""
        return {
            'height': self.height,
            'body': self.body,
            'previous_hash': self.previous_hash,
            'timestamp': self.timestamp,
            'hash': self.hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """Create block from dictionary."""
        return cls(
            height=data['height'],
            body=data['body'],
            previous_hash=data.get('previous_hash'),
            timestamp=data['timestamp'],
            hash=data.get('hash'),
        )

    def __str__(self) -> str:
        hash_str = self.hash[:16] if self.hash else 'unsealed'
        prev_str = self.previous_hash[:16] if self.previous_hash else 'none'
        return (
            f"Block #{self.height}\n"
            f"  Hash: {hash_str}...\n"
            f"  Prev: {prev_str}...\n"
            f"  Time: {self.timestamp}"
        )


# ============================================================================
# Star Records
# ============================================================================

@dataclass(frozen=True)
class StarRecord:
    """Decoded payload of a star block."""
    star: Any
    owner: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'StarRecord':
        return cls(star=payload['star'], owner=payload['owner'])

    def to_dict(self) -> Dict[str, Any]:
        return {'star': self.star, 'owner': self.owner}


# ============================================================================
# Validation Findings
# ============================================================================

class IssueKind(Enum):
    """Kinds of problems chain validation can report."""
    HASH_MISMATCH = "hash_mismatch"
    PREVIOUS_HASH_MISMATCH = "previous_hash_mismatch"


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding from Blockchain.validate()."""
    height: int
    block_hash: Optional[str]
    kind: IssueKind
    message: str

    def __str__(self) -> str:
        return self.message


# ============================================================================
# Blockchain
# ============================================================================

class Blockchain:
    """
    Single-writer, in-memory blockchain.

    Features:
    - Genesis block created at construction
    - Appends serialized by a lock
    - Lookup by hash and height
    - Star ownership queries
    - Validation that aggregates every issue
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        genesis_payload: Optional[Any] = None
    ):
        """
        Initialize a new blockchain.

        Args:
            clock: Source of wall-clock seconds for block timestamps
            genesis_payload: Sentinel payload for the genesis block
        """
        self._blocks: List[Block] = []
        self._lock = threading.RLock()
        self._clock = clock
        self._genesis_payload = (
            GENESIS_PAYLOAD if genesis_payload is None else genesis_payload
        )

        self.initialize()

    def initialize(self) -> None:
        """Append the genesis block if the chain is empty."""
        with self._lock:
            if not self._blocks:
                self.append(Block.create(self._genesis_payload))

    def _snapshot(self) -> List[Block]:
        with self._lock:
            return list(self._blocks)

    @property
    def chain(self) -> List[Block]:
        """Get the blockchain (read-only copy)."""
        return self._snapshot()

    @property
    def length(self) -> int:
        """Get blockchain length."""
        return len(self._snapshot())

    @property
    def last_block(self) -> Optional[Block]:
        """Get the last block in the chain, or None if empty."""
        blocks = self._snapshot()
        return blocks[-1] if blocks else None

    def height(self) -> int:
        """Height of the last block; -1 for an empty chain."""
        return len(self._snapshot()) - 1

    def append(self, block: Block) -> Block:
        """
        Seal a block onto the end of the chain.

        Args:
            block: Block carrying the payload; its seal fields are ignored

        Returns:
            The sealed block as stored in the chain

        Raises:
            AppendError: If the block cannot be encoded or hashed
        """
        with self._lock:
            height = len(self._blocks)
            previous_hash = self._blocks[-1].hash if self._blocks else None
            try:
                timestamp = int(self._clock())
                unsealed = replace(
                    block,
                    height=height,
                    previous_hash=previous_hash,
                    timestamp=timestamp,
                    hash=None,
                )
                sealed = replace(unsealed, hash=unsealed.compute_hash())
            except (TypeError, ValueError) as exc:
                raise AppendError(
                    f"An error occurred on adding block to blockchain: {exc}"
                ) from exc

            self._blocks.append(sealed)

        logger.info("Appended block #%d %s", sealed.height, sealed.hash)
        return sealed

    def find_by_hash(self, block_hash: str) -> Optional[Block]:
        """Return the first block with the given hash, or None."""
        for block in self._snapshot():
            if block.hash == block_hash:
                return block
        return None

    def find_by_height(self, height: int) -> Optional[Block]:
        """Return the block at the given height, or None."""
        blocks = self._snapshot()
        if isinstance(height, bool) or not isinstance(height, int):
            return None
        if not 0 <= height < len(blocks):
            return None
        block = blocks[height]
        return block if block.height == height else None

    def stars_for_owner(self, address: str) -> List[StarRecord]:
        """
        Get every star registered by an address, in chain order.

        Decode failures propagate: star payloads are written by the chain
        itself, so a failure means the chain is corrupt.
        """
        records = []
        for block in self._snapshot():
            if block.is_genesis:
                continue
            payload = block.decode_payload()
            if isinstance(payload, dict) and payload.get('owner') == address:
                records.append(StarRecord.from_payload(payload))
        return records

    def validate(self) -> List[ValidationIssue]:
        """
        Validate the entire blockchain.

        Returns:
            Every issue found; an empty list means the chain is valid
        """
        issues: List[ValidationIssue] = []
        blocks = self._snapshot()

        for index, block in enumerate(blocks):
            if not block.verify_integrity():
                issues.append(ValidationIssue(
                    height=block.height,
                    block_hash=block.hash,
                    kind=IssueKind.HASH_MISMATCH,
                    message=f"Invalid block hash {block.hash} at height {block.height}",
                ))

            if index > 0:
                expected = blocks[index - 1].hash
                if block.previous_hash != expected:
                    issues.append(ValidationIssue(
                        height=block.height,
                        block_hash=block.hash,
                        kind=IssueKind.PREVIOUS_HASH_MISMATCH,
                        message=(
                            f"Block {block.height} has invalid previous hash: "
                            f"{block.previous_hash}, expected: {expected}"
                        ),
                    ))

        if issues:
            logger.warning("Chain validation found %d issue(s)", len(issues))
        else:
            logger.debug("Chain validation passed for %d block(s)", len(blocks))
        return issues

    def is_valid(self) -> bool:
        """True if validate() reports nothing."""
        return not self.validate()

    def to_json(self) -> str:
        """Serialize blockchain to JSON."""
        blocks = self._snapshot()
        return json.dumps({
            'height': len(blocks) - 1,
            'chain': [block.to_dict() for block in blocks],
        }, indent=2)


# ============================================================================
# Convenience Functions
# ============================================================================

def create_blockchain(genesis_data: Optional[str] = None) -> Blockchain:
    """Create a new blockchain, optionally with custom genesis data."""
    if genesis_data is None:
        return Blockchain()
    return Blockchain(genesis_payload={'data': genesis_data})

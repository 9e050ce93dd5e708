"""
Security tests for Star Registry.

Tests specifically for security-related scenarios:
- Forged or replayed ownership proofs
- Tampered blocks
- Attack-shaped input
"""

from dataclasses import replace

import pytest

from star_registry.blockchain.ledger import Block, Blockchain, IssueKind, encode_payload
from star_registry.errors import (
    ExpiredMessageError, InvalidSignatureError, MalformedMessageError,
)
from star_registry.registry.ownership import StarRegistry
from star_registry.signatures.bitcoin_message import verify_message


@pytest.fixture
def registry(clock, settings):
    return StarRegistry(clock=clock, settings=settings)


class TestOwnershipForgery:
    """An address can only be claimed with its own key."""

    def test_claiming_someone_elses_address(self, registry, clock, alice, bob):
        """Bob signs a challenge issued for Alice's address."""
        message = registry.issue_challenge(alice.address())
        clock.advance(301)
        with pytest.raises(InvalidSignatureError):
            registry.submit(alice.address(), message, bob.sign(message), {'s': 1})

    def test_tampered_timestamp_breaks_signature(self, registry, clock, alice):
        """Rewriting the issue time invalidates the signature."""
        address = alice.address()
        message = registry.issue_challenge(address)
        signature = alice.sign(message)

        forged = f"{address}:{int(clock.now) - 1000}:starRegistry"
        with pytest.raises(InvalidSignatureError):
            registry.submit(address, forged, signature, {'s': 1})
        assert registry.chain_height() == 0

    def test_empty_signature(self, registry, clock, alice):
        message = registry.issue_challenge(alice.address())
        clock.advance(301)
        with pytest.raises(InvalidSignatureError):
            registry.submit(alice.address(), message, "", {'s': 1})

    def test_injection_shaped_message(self, registry, alice):
        with pytest.raises(MalformedMessageError):
            registry.submit(alice.address(), "'; DROP TABLE stars;--", "sig", {})

    def test_non_string_message(self, registry, alice):
        with pytest.raises(MalformedMessageError):
            registry.submit(alice.address(), None, "sig", {})

    def test_future_timestamp_rejected(self, registry, clock, alice):
        """A message dated in the future has negative elapsed time."""
        address = alice.address()
        message = f"{address}:{int(clock.now) + 10_000}:starRegistry"
        with pytest.raises(ExpiredMessageError):
            registry.submit(address, message, alice.sign(message), {'s': 1})

    def test_verify_never_raises(self, alice):
        for sig in ("", "====", "A" * 88, "\x00\xff", "😀"):
            assert verify_message("m", alice.address(), sig) is False
        assert verify_message("m", "", alice.sign("m")) is False
        assert verify_message("m", "0OIl", alice.sign("m")) is False


class TestTamperDetection:
    """Tampering with sealed blocks is always reported."""

    def _chain(self):
        bc = Blockchain()
        for owner in ("A", "B", "A"):
            bc.append(Block.create({'star': 'x', 'owner': owner}))
        return bc

    def test_rewritten_owner_detected(self):
        bc = self._chain()
        target = bc._blocks[2]
        bc._blocks[2] = replace(target, body=encode_payload({'star': 'x', 'owner': 'A'}))

        issues = bc.validate()
        assert [i.height for i in issues if i.kind == IssueKind.HASH_MISMATCH] == [2]

    def test_resealed_block_breaks_successor_link(self):
        """Recomputing a tampered block's hash shifts the problem to the next link."""
        bc = self._chain()
        target = bc._blocks[1]
        tampered = replace(target, body=encode_payload({'star': 'y', 'owner': 'B'}))
        bc._blocks[1] = replace(tampered, hash=tampered.compute_hash())

        issues = bc.validate()
        assert len(issues) == 1
        assert issues[0].kind == IssueKind.PREVIOUS_HASH_MISMATCH
        assert issues[0].height == 2

    def test_tampered_genesis_detected(self):
        bc = self._chain()
        bc._blocks[0] = replace(bc._blocks[0], body=encode_payload({'data': 'evil'}))
        heights = {i.height for i in bc.validate()}
        assert 0 in heights

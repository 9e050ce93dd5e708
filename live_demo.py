#!/usr/bin/env python
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                         STAR REGISTRY LIVE DEMO                              ║
╚══════════════════════════════════════════════════════════════════════════════╝

Walks through the ownership-proof protocol end to end:
- Genesis block bootstrap
- Challenge message issuance
- Bitcoin message signing with a wallet key
- Timing window and signature checks
- Star lookup by owner
- Chain validation and tamper detection

Time is simulated so the demo does not wait out the real window.
"""

import logging
from dataclasses import replace

from star_registry.config import load_settings
from star_registry.errors import SubmitError
from star_registry.registry.ownership import StarRegistry
from star_registry.signatures.bitcoin_message import KeyPair


class DemoClock:
    """Wall clock the demo can fast-forward."""

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "═" * 70)
    print(f"  {title}")
    print("═" * 70)


def print_step(step_num, description):
    """Print a numbered step"""
    print(f"\n  [{step_num}] {description}")


def main():
    logging.basicConfig(level=logging.INFO, format="  %(levelname)s %(name)s: %(message)s")

    clock = DemoClock()
    settings = load_settings()
    registry = StarRegistry(clock=clock, settings=settings)

    print_header("PART 1: CHAIN BOOTSTRAP")
    genesis = registry.blockchain.chain[0]
    print(genesis)
    print(f"\n  Height: {registry.chain_height()}")

    print_header("PART 2: OWNERSHIP PROOF")
    alice = KeyPair.generate()
    address = alice.address()

    print_step("2.1", "Requesting a challenge message")
    message = registry.issue_challenge(address)
    print(f"  Message: {message}")

    print_step("2.2", "Signing the message with the wallet key")
    signature = alice.sign(message)
    print(f"  Signature: {signature[:32]}...")

    star = {
        'dec': "68° 52' 56.9",
        'ra': '16h 29m 1.0s',
        'story': 'Found star using https://www.google.com/sky/',
    }

    print_step("2.3", "Submitting right away")
    try:
        registry.submit(address, message, signature, star)
    except SubmitError as exc:
        print(f"  [X] Rejected: {exc}")

    print_step("2.4", f"Submitting after {settings.ownership_window_seconds}s")
    clock.now += settings.ownership_window_seconds
    block = registry.submit(address, message, signature, star)
    print(f"  [OK] Registered in block #{block.height}")
    print(block)

    print_step("2.5", "Submitting with someone else's signature")
    mallory = KeyPair.generate()
    try:
        registry.submit(address, message, mallory.sign(message), star)
    except SubmitError as exc:
        print(f"  [X] Rejected: {exc}")

    print_header("PART 3: QUERIES")
    for record in registry.stars_by_address(address):
        print(f"  {record['owner'][:12]}... -> {record['star']['story']}")

    print_header("PART 4: VALIDATION")
    print(f"  Issues: {registry.validate_chain() or 'none'}")

    print_step("4.1", "Corrupting block #1 in memory")
    chain = registry.blockchain
    chain._blocks[1] = replace(chain._blocks[1], timestamp=0)
    for issue in registry.validate_chain():
        print(f"  [!] {issue}")


if __name__ == "__main__":
    main()

"""
Integration tests for Star Registry.

Tests end-to-end workflows combining multiple modules.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from star_registry.blockchain.ledger import Block, Blockchain
from star_registry.registry.ownership import StarRegistry
from star_registry.signatures.bitcoin_message import KeyPair


class TestStarWorkflow:
    """Challenge -> sign -> submit -> query -> validate."""

    def test_full_registration_flow(self, clock, settings):
        registry = StarRegistry(clock=clock, settings=settings)
        wallets = [KeyPair.from_secret(secret) for secret in (11, 22, 33)]
        expected = {kp.address(): [] for kp in wallets}

        # Interleave submissions from several addresses
        for round_no in range(3):
            for kp in wallets:
                address = kp.address()
                message = registry.issue_challenge(address)
                clock.advance(301)
                star = {'story': f'{address[:6]}-{round_no}'}
                registry.submit(address, message, kp.sign(message), star)
                expected[address].append({'star': star, 'owner': address})

        assert registry.chain_height() == 9
        for address, stars in expected.items():
            assert registry.stars_by_address(address) == stars
        assert registry.validate_chain() == []

    def test_uncompressed_wallet(self, clock, settings):
        registry = StarRegistry(clock=clock, settings=settings)
        kp = KeyPair.from_secret(77, compressed=False)
        message = registry.issue_challenge(kp.address())
        clock.advance(600)
        block = registry.submit(kp.address(), message, kp.sign(message), {'s': 'u'})
        assert registry.block_by_hash(block.hash)['height'] == 1


class TestConcurrentAppends:
    """Appends from many threads keep the chain consistent."""

    def test_parallel_appends(self):
        bc = Blockchain()
        workers, per_worker = 8, 25

        def work(worker_id):
            return [
                bc.append(Block.create({'worker': worker_id, 'n': n}))
                for n in range(per_worker)
            ]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = [b for blocks in pool.map(work, range(workers)) for b in blocks]

        total = workers * per_worker
        assert bc.height() == total
        assert sorted(b.height for b in results) == list(range(1, total + 1))
        chain = bc.chain
        for i in range(1, len(chain)):
            assert chain[i].previous_hash == chain[i - 1].hash
        assert bc.validate() == []

    def test_reads_during_writes(self):
        bc = Blockchain()
        stop = threading.Event()
        problems = []

        def reader():
            while not stop.is_set():
                for block in bc.chain:
                    if not block.is_sealed:
                        problems.append(block)

        thread = threading.Thread(target=reader)
        thread.start()
        try:
            for n in range(200):
                bc.append(Block.create({'n': n}))
        finally:
            stop.set()
            thread.join()

        assert problems == []
        assert bc.is_valid()

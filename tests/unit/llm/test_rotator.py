"""Unit tests for ProviderPoolRotator."""

import threading

import pytest

from generation_layer.llm.rotator import ProviderPair, ProviderPoolRotator


class TestRotationOrder:
    """Credential index cycles fastest, model index advances on wrap."""

    def test_full_cycle_visits_every_pair_once(self):
        rotator = ProviderPoolRotator(["k1", "k2", "k3"], ["m1", "m2"])

        seen = [rotator.next() for _ in range(rotator.size)]

        assert len(seen) == 6
        assert len(set(seen)) == 6
        assert set(seen) == set(rotator.pairs())

    def test_credential_advances_before_model(self):
        rotator = ProviderPoolRotator(["k1", "k2"], ["m1", "m2"])

        seen = [rotator.next() for _ in range(4)]

        assert seen == [
            ProviderPair("k1", "m1"),
            ProviderPair("k2", "m1"),
            ProviderPair("k1", "m2"),
            ProviderPair("k2", "m2"),
        ]

    def test_second_cycle_repeats_first(self):
        rotator = ProviderPoolRotator(["k1", "k2"], ["m1", "m2", "m3"])

        first = [rotator.next() for _ in range(rotator.size)]
        second = [rotator.next() for _ in range(rotator.size)]

        assert first == second

    def test_single_pair_pool(self):
        rotator = ProviderPoolRotator(["only"], ["model"])

        assert rotator.size == 1
        assert rotator.next() == rotator.next() == ProviderPair("only", "model")

    def test_pairs_matches_rotation_order(self):
        rotator = ProviderPoolRotator(["a", "b"], ["x", "y"])

        expected = rotator.pairs()

        assert [rotator.next() for _ in range(rotator.size)] == expected


class TestValidation:

    def test_empty_credentials_rejected(self):
        with pytest.raises(ValueError, match="credential"):
            ProviderPoolRotator([], ["m1"])

    def test_empty_models_rejected(self):
        with pytest.raises(ValueError, match="model"):
            ProviderPoolRotator(["k1"], [])


def test_concurrent_callers_share_one_sequence():
    """Threads calling next() together still cover every pair equally."""
    rotator = ProviderPoolRotator(["k1", "k2", "k3", "k4"], ["m1", "m2", "m3"])
    results: list[ProviderPair] = []
    lock = threading.Lock()

    def worker():
        for _ in range(rotator.size * 5):
            pair = rotator.next()
            with lock:
                results.append(pair)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == rotator.size * 20
    for pair in rotator.pairs():
        assert results.count(pair) == 20

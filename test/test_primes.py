import unittest

import numpy as np
import pytest

import kernelbench.reference as ref
import kernelbench.vectorized as vec
from kernelbench.errors import InvalidArgumentError
from kernelbench.testutils import all_providers, trial_division_primes

PROVIDER_MODULES = [ref, vec]


class TestCountPrimes(unittest.TestCase):
    def test_known_values(self):
        expected = {0: 0, 1: 0, 2: 1, 3: 2, 4: 2, 10: 4, 100: 25, 1000: 168}
        for provider in all_providers():
            for limit, count in expected.items():
                with self.subTest(provider=provider.name, limit=limit):
                    assert provider.count_primes(limit) == count

    def test_negative_limit_gives_zero(self):
        for provider in all_providers():
            assert provider.count_primes(-1) == 0
            assert provider.count_primes(-1000) == 0

    def test_limit_10_000(self):
        for provider in all_providers():
            assert provider.count_primes(10_000) == 1229

    def test_limit_one_million_vectorized(self):
        assert vec.count_primes(1_000_000) == 78498

    def test_numpy_integer_limit_accepted(self):
        assert ref.count_primes(np.int64(100)) == 25
        assert vec.count_primes(np.int32(100)) == 25

    def test_non_integer_limit_fails(self):
        for provider in all_providers():
            for limit in (2.5, "10", None, True):
                with self.subTest(provider=provider.name, limit=limit):
                    with self.assertRaises(InvalidArgumentError):
                        provider.count_primes(limit)


class TestEnumeratePrimes(unittest.TestCase):
    def test_limit_30(self):
        expected = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]
        for provider in all_providers():
            assert list(provider.enumerate_primes(30)) == expected

    def test_small_limits(self):
        for provider in all_providers():
            assert list(provider.enumerate_primes(-5)) == []
            assert list(provider.enumerate_primes(0)) == []
            assert list(provider.enumerate_primes(1)) == []
            assert list(provider.enumerate_primes(2)) == [2]
            assert list(provider.enumerate_primes(3)) == [2, 3]

    def test_reference_returns_list(self):
        assert isinstance(ref.enumerate_primes(10), list)

    def test_vectorized_returns_int64_array(self):
        primes = vec.enumerate_primes(10)
        assert isinstance(primes, np.ndarray)
        assert primes.dtype == np.int64

    def test_count_matches_length(self):
        for provider in all_providers():
            for limit in (97, 98, 1024, 4099):
                assert len(provider.enumerate_primes(limit)) == provider.count_primes(limit)


@pytest.mark.parametrize("module", PROVIDER_MODULES, ids=lambda m: m.NAME)
def test_agrees_with_trial_division(module):
    primes = trial_division_primes(2000)
    for limit in range(0, 2001):
        expected = [p for p in primes if p <= limit]
        assert list(module.enumerate_primes(limit)) == expected
        assert module.count_primes(limit) == len(expected)


class TestSieveBits(unittest.TestCase):
    def test_one_entry_per_odd_candidate(self):
        bits = vec.sieve_bits(21)
        # candidates 3, 5, 7, ..., 21
        assert bits.tolist() == [1, 1, 1, 0, 1, 1, 0, 1, 1, 0]

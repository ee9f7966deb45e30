"""Odd-only bit sieve over a NumPy byte arena.

The arena layout matches the pure-python sieve: bit ``i & 7`` of byte
``i >> 3`` stands for the odd number ``2*i + 3``. Multiples are cleared with
``np.bitwise_and.at`` so that several indices hitting the same byte in one
pass are all applied.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from kernelbench.validation import (
    WORKING_SET_SLACK_BYTES,
    allocation_guard,
    check_prime_limit,
    ensure_alloc_fits,
    prime_count_upper_bound,
)

_CLEAR_MASKS = np.invert(np.left_shift(np.uint8(1), np.arange(8, dtype=np.uint8)))

# Clearing the multiples of 3 holds about sieve_size / 3 int64 indices, an
# int64 temporary of the same length and their uint8 masks.
_BYTES_PER_SIEVE_ENTRY = 8
# flatnonzero indices plus the concatenated result
_BYTES_PER_LISTED_PRIME = 16


def count_primes_bytes(limit: int) -> int:
    """Estimated peak memory of :func:`count_primes` in bytes."""
    sieve_size = max((limit - 1) // 2, 0)
    return sieve_size * _BYTES_PER_SIEVE_ENTRY + WORKING_SET_SLACK_BYTES


def enumerate_primes_bytes(limit: int) -> int:
    """Estimated peak memory of :func:`enumerate_primes` in bytes."""
    return count_primes_bytes(limit) + prime_count_upper_bound(limit) * _BYTES_PER_LISTED_PRIME


def sieve_bits(limit: int) -> NDArray[np.uint8]:
    """Run the sieve for ``limit > 2`` and return one 0/1 entry per odd candidate."""
    sieve_size = (limit - 1) // 2
    with allocation_guard(f"prime sieve up to {limit}"):
        arena = np.full((sieve_size + 7) >> 3, 0xFF, dtype=np.uint8)

    i = 0
    prime = 3
    while prime * prime <= limit:
        if arena[i >> 3] & (1 << (i & 7)):
            multiples = np.arange((prime * prime - 3) // 2, sieve_size, prime, dtype=np.int64)
            masks = _CLEAR_MASKS[multiples & 7]
            multiples >>= 3
            np.bitwise_and.at(arena, multiples, masks)
        i += 1
        prime = 2 * i + 3

    return np.unpackbits(arena, bitorder="little")[:sieve_size]


def count_primes(limit: int) -> int:
    """Count the primes ``<= limit``. Limits below 2 give 0."""
    limit = check_prime_limit(limit)
    if limit < 2:
        return 0
    if limit == 2:
        return 1
    ensure_alloc_fits(count_primes_bytes(limit), f"prime sieve up to {limit}")
    return 1 + int(np.count_nonzero(sieve_bits(limit)))


def enumerate_primes(limit: int) -> NDArray[np.int64]:
    """Return all primes ``<= limit`` in ascending order as an ``int64`` array."""
    limit = check_prime_limit(limit)
    if limit < 2:
        return np.zeros(0, dtype=np.int64)
    if limit == 2:
        return np.array([2], dtype=np.int64)
    ensure_alloc_fits(enumerate_primes_bytes(limit), f"prime list up to {limit}")

    odd_primes = np.flatnonzero(sieve_bits(limit)).astype(np.int64, copy=False)
    odd_primes *= 2
    odd_primes += 3
    return np.concatenate((np.array([2], dtype=np.int64), odd_primes))

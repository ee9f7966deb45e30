"""Odd-only bit sieve over a ``bytearray``."""

from __future__ import annotations

from kernelbench.validation import (
    WORKING_SET_SLACK_BYTES,
    allocation_guard,
    check_prime_limit,
    ensure_alloc_fits,
    prime_count_upper_bound,
)

# list slot (with over-allocation) plus a boxed int per listed prime
_BYTES_PER_LISTED_PRIME = 40


def count_primes_bytes(limit: int) -> int:
    """Estimated peak memory of :func:`count_primes` in bytes.

    The arena and three big ints of the same size live at once while the set
    bits are counted.
    """
    sieve_size = max((limit - 1) // 2, 0)
    return sieve_size + WORKING_SET_SLACK_BYTES


def enumerate_primes_bytes(limit: int) -> int:
    """Estimated peak memory of :func:`enumerate_primes` in bytes."""
    sieve_size = max((limit - 1) // 2, 0)
    return (
        (sieve_size + 7) // 8
        + prime_count_upper_bound(limit) * _BYTES_PER_LISTED_PRIME
        + WORKING_SET_SLACK_BYTES
    )


def _sieve(limit: int) -> tuple[bytearray, int]:
    # bit i of the arena stands for the odd number 2*i + 3
    sieve_size = (limit - 1) // 2
    with allocation_guard(f"prime sieve up to {limit}"):
        arena = bytearray(b"\xff") * ((sieve_size + 7) >> 3)

    i = 0
    prime = 3
    while prime * prime <= limit:
        if arena[i >> 3] & (1 << (i & 7)):
            j = (prime * prime - 3) // 2
            while j < sieve_size:
                arena[j >> 3] &= ~(1 << (j & 7))
                j += prime
        i += 1
        prime = 2 * i + 3
    return arena, sieve_size


def count_primes(limit: int) -> int:
    """Count the primes ``<= limit``.

    Limits below 2 give 0.

    """
    limit = check_prime_limit(limit)
    if limit < 2:
        return 0
    if limit == 2:
        return 1
    ensure_alloc_fits(count_primes_bytes(limit), f"prime sieve up to {limit}")

    arena, sieve_size = _sieve(limit)
    # padding bits of the last byte are still set, mask them out
    bits = int.from_bytes(arena, "little") & ((1 << sieve_size) - 1)
    return 1 + bits.bit_count()


def enumerate_primes(limit: int) -> list[int]:
    """Return all primes ``<= limit`` in ascending order."""
    limit = check_prime_limit(limit)
    if limit < 2:
        return []
    if limit == 2:
        return [2]
    ensure_alloc_fits(enumerate_primes_bytes(limit), f"prime list up to {limit}")

    arena, sieve_size = _sieve(limit)
    primes = [2]
    for i in range(sieve_size):
        if arena[i >> 3] & (1 << (i & 7)):
            primes.append(2 * i + 3)
    return primes

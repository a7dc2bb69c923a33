"""Core Key Generation Utility: primality testing, random prime search and RSA key derivation.

Everything random draws from an injected `RandomSource`. The `secrets` module is one and is used by default, tests
pass a mock to make witness and candidate sequences deterministic.

Typical usage example:

    check_prime(561)
    p = generate_prime(256)
    (n, e), (_, d) = generate_key_pair(512)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import secrets
from typing import Literal, Protocol, overload
import warnings

from rsaref.errors import KeyGenerationError
from rsaref.errors import PrimeSearchExhausted

PUBLIC_EXPONENT: int = 65537
DEFAULT_ROUNDS: int = 30
SECURE_KEY_SIZE: int = 2048
MIN_KEY_SIZE: int = 18

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0


class RandomSource(Protocol):
    """Source of random bits. Must be cryptographically secure outside of tests."""

    def randbits(self, k: int) -> int:
        ...

    def randbelow(self, exclusive_upper_bound: int) -> int:
        ...


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Odd-only sieve, crossing off from the square of each prime up to `n`.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, sieving them if the cache does not cover `n`.

    Args:
        n: The number up to which primes are needed. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order, covering at least `n` unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check `no` against the known small primes.

    Args:
         no: The number to check. Must be non-negative.
         n: Bound passed to `get_pre_primes()`.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def is_probably_prime(n: int, rounds: int = DEFAULT_ROUNDS, rng: RandomSource = secrets) -> bool:
    """Perform the Miller-Rabin primality test.

    Writes `n - 1` as `2**r * d` with `d` odd, then checks `rounds` independent witnesses drawn uniformly from
    `[2, n - 2]`. A single failing witness is final. A composite survives all rounds with probability at most
    `4**-rounds`.

    Args:
        n: The integer to test. Must be >= 0.
        rounds: Number of witnesses to try. Must be >= 1.
        rng: Source of witnesses. Defaults to `secrets`.

    Returns:
        True if `n` is probably prime, False if it is certainly composite or below 2.

    Raises:
        ValueError: If `rounds` is smaller than 1.
    """
    if rounds < 1:
        raise ValueError("rounds must be >= 1")
    if n <= 3:
        return n in (2, 3)
    if n % 2 == 0:
        return False
    tn = n - 1
    r = (tn & -tn).bit_length() - 1
    d = tn >> r
    for _ in range(rounds):
        a = rng.randbelow(n - 3) + 2
        x = pow(a, d, n)
        if x == 1 or x == tn:
            continue
        for _ in range(r - 1):
            x = pow(x, 2, n)
            if x == tn:
                break
            if x == 1:
                return False
        else:
            return False
    return True


def check_prime(candidate: int, rounds: int = DEFAULT_ROUNDS, rng: RandomSource = secrets, n: int = 10000) -> bool:
    """Trial division by the small primes up to `n`, followed by Miller-Rabin.

    Gives the same answer as `is_probably_prime` but discards most composites without drawing a single witness.

    Args:
        candidate: The candidate prime to test.
        rounds: Number of Miller-Rabin witnesses.
        rng: Source of witnesses.
        n: Bound of the small primes used for trial division. Defaults to 10000.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    return is_probably_prime(candidate, rounds, rng)


def generate_prime(bits: int,
                   rng: RandomSource = secrets,
                   rounds: int = DEFAULT_ROUNDS,
                   max_attempts: int | None = None,
                   msb: int = 1) -> int:
    """Search for a random probable prime of exactly `bits` bits.

    Every candidate has its top `msb` bits and its lowest bit set, so it is odd and of full length. With `msb=2` the
    product of two such primes has exactly twice as many bits.

    Args:
        bits: Bit length of the prime. Must be >= 2.
        rng: Source of candidates and witnesses.
        rounds: Miller-Rabin rounds per candidate.
        max_attempts: Candidates to draw before giving up. Defaults to `10 * bits`.
        msb: Number of top bits to force, 1 or 2.

    Returns:
        A probable prime `p` with `p.bit_length() == bits`.

    Raises:
        ValueError: On invalid arguments.
        PrimeSearchExhausted: If no candidate passed within `max_attempts`.
    """
    if bits < 2:
        raise ValueError("bits must be >= 2")
    if msb not in (1, 2):
        raise ValueError("msb must be 1 or 2")
    if max_attempts is None:
        max_attempts = 10 * bits
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    msk = (1 << bits - 1) | 1
    if msb == 2:
        msk |= 1 << bits - 2
    for _ in range(max_attempts):
        candidate = rng.randbits(bits) | msk
        if check_prime(candidate, rounds, rng):
            return candidate
    raise PrimeSearchExhausted(bits, max_attempts)


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers, as well as the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def modinv(a: int, m: int) -> int:
    """Modular inverse of `a` modulo `m`, in the range `[0, m)`.

    Raises:
        KeyGenerationError: If `a` and `m` are not coprime.
    """
    g, s, _ = eea(a, m)
    if g != 1:
        raise KeyGenerationError(f"{a} has no inverse modulo the totient (gcd {g}), retry with different primes.")
    return s % m


@overload
def generate_key_pair(size: int,
                      pub: int = PUBLIC_EXPONENT,
                      rng: RandomSource = secrets,
                      rounds: int = DEFAULT_ROUNDS,
                      max_attempts: int = 8,
                      expose_primes: Literal[False] = False) -> tuple[tuple[int, int], tuple[int, int]]:
    ...


@overload
def generate_key_pair(size: int,
                      pub: int = PUBLIC_EXPONENT,
                      rng: RandomSource = secrets,
                      rounds: int = DEFAULT_ROUNDS,
                      max_attempts: int = 8,
                      expose_primes: Literal[True] = False) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    ...


def generate_key_pair(
    size: int,
    pub: int = PUBLIC_EXPONENT,
    rng: RandomSource = secrets,
    rounds: int = DEFAULT_ROUNDS,
    max_attempts: int = 8,
    expose_primes: bool = False
) -> tuple[tuple[int, int], tuple[int, int]] | tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Draws two distinct primes of `ceil(size / 2)` bits, then derives `d` as the inverse of `pub` modulo
    `phi(n) = (p - 1)(q - 1)`. If `pub` is not invertible, or not below `phi(n)`, both primes are thrown away and
    drawn again. Both primes have their two top bits set, so the modulus has exactly `2 * ceil(size / 2)` bits: `size`
    for even sizes, one more for odd ones.

    Args:
        size: The modulus size in bits. Must be >= 18, so that phi(n) always exceeds 65537. Sizes below 2048 warn.
        pub: The public exponent. Defaults to 65537.
        rng: Source of randomness.
        rounds: Miller-Rabin rounds per prime candidate.
        max_attempts: Number of prime pairs to try before giving up.
        expose_primes: Whether to return the primes too. Only meant for testing.

    Returns:
        A tuple of (public, private) sub-tuples (modulus, exponent), or for the private part
        (modulus, exponent, p, q) if `expose_primes` is set.

    Raises:
        ValueError: If `size` is too small.
        KeyGenerationError: If no pair of primes admitted an inverse within `max_attempts`.
    """
    if size < MIN_KEY_SIZE:
        raise ValueError(f"Size must be >= {MIN_KEY_SIZE}.")
    if size < SECURE_KEY_SIZE:
        warnings.warn(f"{size}-bit RSA keys are insecure! Use for demonstration only.", RuntimeWarning)
    half = (size + 1) // 2
    for _ in range(max_attempts):
        p = generate_prime(half, rng, rounds, msb=2)
        q = generate_prime(half, rng, rounds, msb=2)
        while p == q:  # (Un)Likely story.
            q = generate_prime(half, rng, rounds, msb=2)
        n = p * q
        totient = (p - 1) * (q - 1)
        if pub >= totient:
            continue
        try:
            d = modinv(pub, totient)
        except KeyGenerationError:
            continue
        if not expose_primes:
            del p, q
            return (n, pub), (n, d)
        return (n, pub), (n, d, p, q)
    raise KeyGenerationError(f"No prime pair admitting an inverse below phi(n) found in {max_attempts} attempts.")

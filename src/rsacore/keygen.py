"""Core Key Generation Utility, focusing on the generation of random probable primes and the private exponent.

Primes are drawn at random and filtered through a Miller-Rabin test. The private exponent is derived with the extended
Euclidean algorithm. Every random draw goes through an injectable generator so runs can be reproduced with a seed.

Typical usage example:

    p = generate_prime(512)
    is_prime(p, rounds=20)
    (e, n), (d, _) = generate_key_pair(1024)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import random
import secrets
import time
from typing import Literal, overload
import warnings

from rsacore.errors import NoModularInverse

DEFAULT_PUBLIC_EXPONENT: int = 65537
DEFAULT_ROUNDS: int = 5
MINIMUM_KEY_SIZE: int = 6
SECURE_KEY_SIZE: int = 1024

_SYSTEM_RANDOM = secrets.SystemRandom()

logger = logging.getLogger(__name__)


def _resolve_rng(rng: random.Random | None) -> random.Random:
    """Fall back to the OS-backed generator when no generator was injected."""
    return _SYSTEM_RANDOM if rng is None else rng


def is_prime(n: int, rounds: int = DEFAULT_ROUNDS, rng: random.Random | None = None) -> bool:
    """Perform the Miller-Rabin primality test.

    Args:
        n: Integer to be tested.
        rounds: Number of random witnesses to try. Must be >= 1.
        rng: Source of the witnesses. Defaults to the system generator.

    Returns:
        True if `n` is probably prime, False if it is certainly composite.

    Raises:
        ValueError: If `rounds` is not positive.
    """
    if rounds < 1:
        raise ValueError("rounds must be >= 1")
    if n <= 3:
        return n == 2 or n == 3
    if n % 2 == 0:
        return False
    rng = _resolve_rng(rng)
    tw = n - 1
    s = (tw & -tw).bit_length() - 1
    d = tw >> s
    for _ in range(rounds):
        a = rng.randrange(2, n - 1)
        x = pow(a, d, n)
        if x == 1 or x == tw:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == tw:
                break
        else:
            return False
    return True


def generate_prime(bit_length: int, rounds: int = DEFAULT_ROUNDS, rng: random.Random | None = None) -> int:
    """Generate a probable prime of exactly `bit_length` bits.

    Draws random odd candidates with the top bit set until one passes `is_prime`. There is no cap on the number of
    draws, the density of primes makes a long run vanishingly unlikely.

    Args:
        bit_length: Size of the prime in bits. Must be >= 2.
        rounds: Miller-Rabin rounds per candidate.
        rng: Source of the candidates and witnesses. Defaults to the system generator.

    Returns:
        A probable prime `p` with `p.bit_length() == bit_length`.

    Raises:
        ValueError: If `bit_length` is below 2.
    """
    if bit_length < 2:
        raise ValueError("bit_length must be >= 2")
    rng = _resolve_rng(rng)
    msk = (1 << bit_length - 1) | 1
    tries = 0
    while True:
        tries += 1
        candidate = rng.getrandbits(bit_length) | msk
        if is_prime(candidate, rounds, rng):
            logger.debug("Found %d-bit prime after %d candidates", bit_length, tries)
            return candidate


def modular_inverse(a: int, m: int) -> int | None:
    """Compute the inverse of `a` modulo `m` with the Extended Euclidean Algorithm.

    Only the cofactor of `a` is tracked, the one of `m` is never needed.

    Args:
        a: The number to invert.
        m: The modulus. Must be positive.

    Returns:
        The inverse in range [0, m), or None if `a` and `m` are not coprime.
    """
    t0, t1 = 0, 1
    r0, r1 = m, a
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        t0, t1 = t1, t0 - q * t1
    if r0 != 1:
        return None
    if t0 < 0:
        t0 += m
    return t0


def _validate(size: int, pub: int) -> None:
    """Reject key parameters no key pair can be built from."""
    # Primes of 2 bits leave only 3, so p and q could never differ.
    if size < MINIMUM_KEY_SIZE:
        raise ValueError(f"Size must be at least {MINIMUM_KEY_SIZE}.")
    if pub < 3 or pub % 2 == 0:
        raise ValueError("Public exponent must be odd and at least 3.")
    if size < SECURE_KEY_SIZE:
        warnings.warn(f"Key size {size} is insecure! Use for testing only.", RuntimeWarning, stacklevel=3)


def generate_primes(size: int,
                    pub: int = DEFAULT_PUBLIC_EXPONENT,
                    rounds: int = DEFAULT_ROUNDS,
                    rng: random.Random | None = None) -> tuple[int, int]:
    """Generate a pair of distinct primes for a key of `size` bits.

    Args:
        size: The key size to generate the prime pair for. Must be >= `MINIMUM_KEY_SIZE`; each prime has
            `size // 2` bits.
        pub: The public exponent the primes are meant for. Only validated here.
        rounds: Miller-Rabin rounds per candidate.
        rng: Source of randomness. Defaults to the system generator.

    Returns:
        Two distinct primes of `size // 2` bits each.

    Raises:
        ValueError: If `size` or `pub` does not meet requirements.
    """
    _validate(size, pub)
    rng = _resolve_rng(rng)
    p = generate_prime(size // 2, rounds, rng)
    q = generate_prime(size // 2, rounds, rng)
    while p == q:  # (Un)Likely story, except for tiny sizes.
        q = generate_prime(size // 2, rounds, rng)
    return p, q


@overload
def generate_key_pair(size: int,
                      pub: int = DEFAULT_PUBLIC_EXPONENT,
                      rounds: int = DEFAULT_ROUNDS,
                      rng: random.Random | None = None,
                      expose_primes: Literal[False] = False) -> tuple[tuple[int, int], tuple[int, int]]:
    ...


@overload
def generate_key_pair(size: int,
                      pub: int = DEFAULT_PUBLIC_EXPONENT,
                      rounds: int = DEFAULT_ROUNDS,
                      rng: random.Random | None = None,
                      expose_primes: Literal[True] = False) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    ...


def generate_key_pair(
    size: int,
    pub: int = DEFAULT_PUBLIC_EXPONENT,
    rounds: int = DEFAULT_ROUNDS,
    rng: random.Random | None = None,
    expose_primes: bool = False
) -> tuple[tuple[int, int], tuple[int, int]] | tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Draws the primes, then derives the private exponent as the inverse of `pub` modulo (p-1)(q-1).

    Args:
        size: The key size in bits. Must be >= `MINIMUM_KEY_SIZE`. Odd sizes round the primes down.
        pub: The public exponent. Defaults to 65537. Must be odd and >= 3.
        rounds: Miller-Rabin rounds per prime candidate.
        rng: Source of randomness. Defaults to the system generator.
        expose_primes: Whether to return the prime numbers as well. Defaults to False.

    Returns:
        A tuple of (public, private) sub-tuples (exponent, modulus) or if exposed for the private
        (exponent, modulus, p, q)

    Raises:
        ValueError: If `size` or `pub` does not meet requirements.
        NoModularInverse: If `pub` shares a factor with the totient.
    """
    start = time.perf_counter()
    p, q = generate_primes(size, pub, rounds, rng)
    n = p * q
    totient = (p - 1) * (q - 1)
    d = modular_inverse(pub, totient)
    if d is None:
        raise NoModularInverse(f"Public exponent {pub} is not coprime with the totient.")
    logger.debug("Generated %d-bit key pair in %.3fs", n.bit_length(), time.perf_counter() - start)
    if not expose_primes:
        del p, q
        return (pub, n), (d, n)
    return (pub, n), (d, n, p, q)

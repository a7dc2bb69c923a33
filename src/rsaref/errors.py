"""Exceptions raised by rsaref.

Each exception subclasses the built-in it refines, so callers catching the built-in keep working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class PrimeSearchExhausted(RuntimeError):
    """The bounded prime search ran out of attempts without finding a probable prime.

    Attributes:
        bits: Requested bit length of the prime.
        attempts: Number of candidates drawn before giving up.
    """

    def __init__(self, bits: int, attempts: int) -> None:
        super().__init__(f"No {bits}-bit prime found in {attempts} attempts. Check system random number generator.")
        self.bits = bits
        self.attempts = attempts


class KeyGenerationError(RuntimeError):
    """Key generation failed, retry with different primes."""


class DecodeError(ValueError):
    """An integer did not map back to valid text."""

"""Textbook RSA in an Academic Sense.

Provides key generation from two random probable primes, the raw modular exponentiation transform for encryption
and decryption, and a text codec mapping strings to message integers. No padding, no key formats: do not use it to
keep anything secret.

Typical usage example:

    p = generate_prime(256)
    pub, priv = generate_keys(512)
    c = pub.encrypt_text("Hi there!")
    r = priv.decrypt_text(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsaref.errors import DecodeError
from rsaref.errors import KeyGenerationError
from rsaref.errors import PrimeSearchExhausted
from rsaref.keygen import check_prime
from rsaref.keygen import generate_key_pair
from rsaref.keygen import generate_prime
from rsaref.keygen import is_probably_prime
from rsaref.keygen import modinv
from rsaref.rsa import decode
from rsaref.rsa import encode
from rsaref.rsa import generate_keys
from rsaref.rsa import round_trip
from rsaref.rsa import RoundTrip
from rsaref.rsa import RSAPrivKey
from rsaref.rsa import RSAPubKey
from rsaref.rsa import transform

__version__ = "0.1.0"
__all__ = [
    "RSAPrivKey",
    "RSAPubKey",
    "RoundTrip",
    "DecodeError",
    "KeyGenerationError",
    "PrimeSearchExhausted",
    "is_probably_prime",
    "check_prime",
    "generate_prime",
    "generate_key_pair",
    "generate_keys",
    "modinv",
    "transform",
    "encode",
    "decode",
    "round_trip",
]

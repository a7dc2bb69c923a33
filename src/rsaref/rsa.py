"""Provides the textbook RSA transform, the key types and the text codec.

Keys are immutable (modulus, exponent) pairs. Messages are raw integers in `[0, mod)` with no padding of any kind,
text is marshalled by reading its encoded bytes as one big-endian unsigned integer.

Typical usage example:

    pub, priv = generate_keys(512)
    c = pub.encrypt_text("Hi there!")
    r = priv.decrypt_text(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import secrets
from typing import Literal, NamedTuple, overload

from rsaref import keygen
from rsaref.errors import DecodeError


def transform(x: int, exponent: int, modulus: int) -> int:
    """Performs core RSA operation, `x**exponent mod modulus`. (Encrypt/Decrypt)

    No range check is made on `x`, values at or above `modulus` are silently reduced.

    Args:
        x: The int-marshalled message or ciphertext.
        exponent: Public exponent to encrypt, private exponent to decrypt.
        modulus: The key modulus.

    Returns:
        The transformed integer.

    Raises:
        ValueError: If the modulus is not positive or the exponent is negative.
    """
    if modulus < 1:
        raise ValueError("Modulus must be positive")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative")
    return pow(x, exponent, modulus)


def _checked(x: int, mod: int) -> int:
    if not 0 <= x < mod:
        raise ValueError("Message representative must be in range [0, mod-1]")
    return x


class RSAPubKey(NamedTuple):
    """RSA Public Key.

    Attributes:
        mod: The modulus of the keypair.
        expo: The public exponent.
    """
    mod: int
    expo: int

    @property
    def bsize(self) -> int:
        """Bytes needed to hold the modulus."""
        return (self.mod.bit_length() + 7) // 8

    @property
    def capacity(self) -> int:
        """Longest byte string that always encodes below the modulus."""
        return (self.mod.bit_length() - 1) // 8

    def encrypt(self, message: int) -> int:
        """Encrypt an int-marshalled message.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        return transform(_checked(message, self.mod), self.expo, self.mod)

    def encrypt_text(self, message: str, encoding: str = "utf-8") -> int:
        """Encode `message` as an integer and encrypt it.

        Args:
            message: Text to encrypt.
            encoding: Text encoding. Defaults to utf-8.

        Returns:
            The ciphertext integer.

        Raises:
            ValueError: If the encoded message does not fit below the modulus.
        """
        m = encode(message, encoding)
        if m >= self.mod:
            raise ValueError(f"Message too long for the key, at most {self.capacity} bytes fit safely")
        return self.encrypt(m)


class RSAPrivKey(NamedTuple):
    """RSA Private Key.

    Holds only the modulus and the private exponent, the primes are never kept.

    Attributes:
        mod: The modulus of the keypair.
        expo: The private exponent.
    """
    mod: int
    expo: int

    def __repr__(self) -> str:
        return f"RSAPrivKey(mod={self.mod}, expo=<hidden>)"

    def decrypt(self, ciphertext: int) -> int:
        """Decrypt an int ciphertext.

        Raises:
            ValueError: If the ciphertext is out of range for the current key.
        """
        return transform(_checked(ciphertext, self.mod), self.expo, self.mod)

    def decrypt_text(self, ciphertext: int, encoding: str = "utf-8") -> str:
        """Decrypt `ciphertext` and decode the result as text.

        Raises:
            DecodeError: If the recovered integer is not valid text, usually a sign of a wrong key or corruption.
        """
        return decode(self.decrypt(ciphertext), encoding)


class RoundTrip(NamedTuple):
    """Outcome of encrypting and decrypting a message.

    Attributes:
        message: The original text.
        plain: The message as an integer.
        cipher: The ciphertext.
        recovered: The decrypted integer.
        text: The decoded text, None if decoding failed.
        ok: Whether the decoded text equals the message.
    """
    message: str
    plain: int
    cipher: int
    recovered: int
    text: str | None
    ok: bool


def encode(text: str, encoding: str = "utf-8") -> int:
    """Converts text to an integer, reading its encoded bytes as big-endian unsigned.

    Leading NUL characters do not survive the trip back, as they become leading zero bytes.

    Args:
        text: The text to convert.
        encoding: Text encoding. Defaults to utf-8.

    Returns:
        The representative integer.
    """
    return int.from_bytes(text.encode(encoding), byteorder="big", signed=False)


def decode(value: int, encoding: str = "utf-8") -> str:
    """Converts an integer back into text, using its minimal big-endian byte representation.

    Args:
        value: The integer to unmarshal. Must be non-negative.
        encoding: Text encoding. Defaults to utf-8.

    Returns:
        The decoded text.

    Raises:
        ValueError: If `value` is negative.
        DecodeError: If the bytes are not valid in `encoding`.
    """
    if value < 0:
        raise ValueError("Value must be non-negative")
    raw = value.to_bytes((value.bit_length() + 7) // 8, byteorder="big", signed=False)
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Integer does not decode as {encoding} text: {exc.reason}") from exc


@overload
def generate_keys(total_bits: int,
                  pub: int = keygen.PUBLIC_EXPONENT,
                  rng: keygen.RandomSource = secrets,
                  rounds: int = keygen.DEFAULT_ROUNDS,
                  max_attempts: int = 8,
                  expose_primes: Literal[False] = False) -> tuple[RSAPubKey, RSAPrivKey]:
    ...


@overload
def generate_keys(total_bits: int,
                  pub: int = keygen.PUBLIC_EXPONENT,
                  rng: keygen.RandomSource = secrets,
                  rounds: int = keygen.DEFAULT_ROUNDS,
                  max_attempts: int = 8,
                  expose_primes: Literal[True] = False) -> tuple[RSAPubKey, RSAPrivKey, tuple[int, int]]:
    ...


def generate_keys(
    total_bits: int,
    pub: int = keygen.PUBLIC_EXPONENT,
    rng: keygen.RandomSource = secrets,
    rounds: int = keygen.DEFAULT_ROUNDS,
    max_attempts: int = 8,
    expose_primes: bool = False
) -> tuple[RSAPubKey, RSAPrivKey] | tuple[RSAPubKey, RSAPrivKey, tuple[int, int]]:
    """Generates an RSA key pair as key objects.

    See `keygen.generate_key_pair` for the arguments and failure modes.

    Returns:
        (public key, private key), followed by the (p, q) primes if `expose_primes` is set.
    """
    (n, e), priv = keygen.generate_key_pair(total_bits, pub, rng, rounds, max_attempts, expose_primes)
    if expose_primes:
        _, d, p, q = priv
        return RSAPubKey(n, e), RSAPrivKey(n, d), (p, q)
    return RSAPubKey(n, e), RSAPrivKey(n, priv[1])


def round_trip(message: str, pub: RSAPubKey, priv: RSAPrivKey, encoding: str = "utf-8") -> RoundTrip:
    """Encrypt `message` with `pub`, decrypt it with `priv` and report whether it survived.

    A mismatch, including recovered bytes that are not valid text, is reported through `RoundTrip.ok`.

    Raises:
        ValueError: If the message does not fit below the modulus.
    """
    m = encode(message, encoding)
    c = pub.encrypt_text(message, encoding)
    r = priv.decrypt(c)
    try:
        text: str | None = decode(r, encoding)
    except DecodeError:
        text = None
    return RoundTrip(message, m, c, r, text, text == message)

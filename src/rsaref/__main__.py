"""The Command Line Interface for the utility.

Running without a subcommand performs the demonstration: a 512-bit key pair is generated and printed, and the
message "TEST123" is encrypted, decrypted and compared. Values a subcommand needs but was not given are asked for
interactively, unless non-interactive mode is active.

Typical usage example:

    rsaref
    OR
    python -m rsaref keygen --keysize 1024
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import sys
import typing

import rsaref

DEMO_KEY_SIZE = 512
DEMO_MESSAGE = "TEST123"


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "demo":
        HelpData("Generate a key pair and round-trip a message. (Default)"),
    "keygen":
        HelpData("Key generation utility."),
    "encrypt":
        HelpData("Encryption utility."),
    "decrypt":
        HelpData("Decryption utility."),
    "prime":
        HelpData("Random probable prime generator."),
    "isprime":
        HelpData("Miller-Rabin primality check."),
    "keysize":
        HelpData(description="Key size (in bits).", format=int, default=DEMO_KEY_SIZE),
    "demo_message":
        HelpData(description="Message to round-trip.", default=DEMO_MESSAGE),
    "message":
        HelpData(description="Message to encrypt."),
    "modulus":
        HelpData(description="Key modulus (n).", format=int),
    "exponent":
        HelpData(description="Key exponent, public (e) to encrypt or private (d) to decrypt.", format=int),
    "ciphertext":
        HelpData(description="Ciphertext integer to decrypt.", format=int),
    "bits":
        HelpData(description="Prime size (in bits).", format=int, default=256),
    "number":
        HelpData(description="Integer to test for primality.", format=int),
    "rounds":
        HelpData(description="Miller-Rabin rounds.", format=int, default=rsaref.keygen.DEFAULT_ROUNDS),
}

needs = {
    "demo": ("keysize", "demo_message"),
    "keygen": ("keysize",),
    "encrypt": ("modulus", "exponent", "message"),
    "decrypt": ("modulus", "exponent", "ciphertext"),
    "prime": ("bits", "rounds"),
    "isprime": ("number", "rounds"),
}

keyparts = argparse.ArgumentParser(add_help=False)
keyparts.add_argument("--modulus", "-N", type=help_dict["modulus"].format, help=help_dict["modulus"].description)
keyparts.add_argument("--exponent", "-E", type=help_dict["exponent"].format, help=help_dict["exponent"].description)
keysize = argparse.ArgumentParser(add_help=False)
keysize.add_argument("--keysize", "-k", type=help_dict["keysize"].format, help=help_dict["keysize"].description)
rounds = argparse.ArgumentParser(add_help=False)
rounds.add_argument("--rounds", "-r", type=help_dict["rounds"].format, help=help_dict["rounds"].description)
corep = argparse.ArgumentParser(prog="rsaref")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsaref.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

demo = commands.add_parser("demo", parents=[keysize], help=help_dict["demo"].description)
demo.add_argument("--message",
                  "-m",
                  dest="demo_message",
                  type=help_dict["demo_message"].format,
                  help=help_dict["demo_message"].description)
commands.add_parser("keygen", parents=[keysize], help=help_dict["keygen"].description)
encrypt = commands.add_parser("encrypt", parents=[keyparts], help=help_dict["encrypt"].description)
encrypt.add_argument("--message", "-m", type=help_dict["message"].format, help=help_dict["message"].description)
decrypt = commands.add_parser("decrypt", parents=[keyparts], help=help_dict["decrypt"].description)
decrypt.add_argument("--ciphertext",
                     "-c",
                     type=help_dict["ciphertext"].format,
                     help=help_dict["ciphertext"].description)
prime = commands.add_parser("prime", parents=[rounds], help=help_dict["prime"].description)
prime.add_argument("--bits", "-b", type=help_dict["bits"].format, help=help_dict["bits"].description)
isprime = commands.add_parser("isprime", parents=[rounds], help=help_dict["isprime"].description)
isprime.add_argument("--number", type=help_dict["number"].format, help=help_dict["number"].description)


def input_handler(arg: str, non_interactive: bool, prntr: typing.Callable = print):
    """Resolve a missing argument: its default if it has one, otherwise ask for it."""
    helper_data = help_dict[arg]
    if helper_data.default is not None:
        return helper_data.default
    if non_interactive:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    cls = helper_data.format
    while True:
        ch = input(f"{arg}: ")
        if ch == "":
            prntr("Please provide a value.")
            continue
        try:
            return cls(ch)
        except ValueError:
            prntr(f"We could not convert your value to {cls.__name__}.")


def print_keys(pub: rsaref.RSAPubKey, priv: rsaref.RSAPrivKey, pspr: typing.Callable) -> None:
    pspr("\nPublic Key (n, e):")
    print(f"  n: {pub.mod}")
    print(f"  e: {pub.expo}")
    pspr("\nPrivate Key (n, d) - Demonstration only, keep it secret:")
    print(f"  d: {priv.expo}")


def main(argv: list[str] | None = None):
    """Core Command Line Interface."""
    args = corep.parse_args(argv)
    non_interactive = args.non_interactive

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not non_interactive:
            print(text)

    if not args.subcommand:
        args.subcommand = "demo"
    for reqs in needs[args.subcommand]:
        if getattr(args, reqs, None) is None:
            setattr(args, reqs, input_handler(reqs, non_interactive))
    match args.subcommand:
        case "demo":
            pspr(f"--- Textbook RSA (Educational Example, {args.keysize}-bit Key) ---")
            pub, priv = rsaref.generate_keys(args.keysize)
            print_keys(pub, priv, pspr)
            try:
                res = rsaref.round_trip(args.demo_message, pub, priv)
            except ValueError as exc:
                print(f"Message does not fit the key! {exc}")
                sys.exit(1)
            pspr(f"\nOriginal Message: \"{res.message}\"")
            pspr(f"Message as Number (m): {res.plain}")
            pspr(f"\nCiphertext (c): {res.cipher}")
            pspr(f"\nDecrypted Number (m'): {res.recovered}")
            if res.text is None:
                print("Decrypted number is not valid text!")
            else:
                pspr(f"Decrypted Message: \"{res.text}\"")
            if not res.ok:
                print("Round trip failed! Decrypted message does not match the original.")
                sys.exit(1)
            print("\nSuccess: The original and decrypted messages match.")
        case "keygen":
            pub, priv = rsaref.generate_keys(args.keysize)
            print_keys(pub, priv, pspr)
        case "encrypt":
            pub = rsaref.RSAPubKey(args.modulus, args.exponent)
            try:
                cipher = pub.encrypt_text(args.message)
            except ValueError as exc:
                print(f"Message does not fit the key! {exc}")
                sys.exit(1)
            pspr("Ciphertext:")
            print(cipher)
        case "decrypt":
            priv = rsaref.RSAPrivKey(args.modulus, args.exponent)
            try:
                clear = priv.decrypt_text(args.ciphertext)
            except rsaref.DecodeError:
                print("Decryption produced invalid text! Wrong key or corrupted ciphertext?")
                sys.exit(1)
            except ValueError as exc:
                print(f"Ciphertext does not fit the key! {exc}")
                sys.exit(1)
            pspr("Cleartext:")
            print(clear)
        case "prime":
            pspr(f"Probable prime ({args.bits} bits):")
            print(rsaref.generate_prime(args.bits, rounds=args.rounds))
        case "isprime":
            if rsaref.is_probably_prime(args.number, args.rounds):
                print(f"{args.number} is probably prime.")
            else:
                print(f"{args.number} is composite.")


if __name__ == "__main__":
    main()

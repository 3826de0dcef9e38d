"""The Command Line Interface for the utility.

Generates key pairs into JSON key files and encrypts or decrypts single-block messages with them. Ciphertexts are
printed wrapped in a base64 envelope so they can be copied around as text.

Typical usage example:

    rsacore keygen -p key.pub -P key.priv
    rsacore encrypt -p key.pub --message "Hi there!"
    python -m rsacore decrypt -P key.priv --message "MIIB..."
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import pathlib
import sys

import rsacore
from rsacore import keycodec
from rsacore import keygen
from rsacore import rsa

pubkey = argparse.ArgumentParser(add_help=False)
pubkey.add_argument("--public-key", "-p", type=pathlib.Path, required=True, help="Location of the public key file.")
privkey = argparse.ArgumentParser(add_help=False)
privkey.add_argument("--private-key",
                     "-P",
                     type=pathlib.Path,
                     required=True,
                     help="Location of the private key file.")
payloads = argparse.ArgumentParser(add_help=False)
payloads.add_argument("--message",
                      "-m",
                      required=True,
                      help="Message or path to file containing payload. If Path start with `P:`")
encp = argparse.ArgumentParser(add_help=False)
encp.add_argument("--encoding", "-e", choices=["utf-8", "utf-16", "ascii"], default="utf-8", help="Payload encoding.")
corep = argparse.ArgumentParser(prog="rsacore")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsacore.__version__}")
corep.add_argument("--quiet", "-q", action="store_true", help="Print results only")
corep.add_argument("--verbose", "-V", action="store_true", help="Log debug output to stderr")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands", required=True)

keygen_cmd = commands.add_parser("keygen", parents=[privkey, pubkey], help="Key generation utility.")
keygen_cmd.add_argument("--keysize",
                        type=int,
                        choices=[512, 1024, 2048, 3072, 4096],
                        default=2048,
                        help="Key size (in bits).")
keygen_cmd.add_argument("--pub-exponent",
                        type=int,
                        default=keygen.DEFAULT_PUBLIC_EXPONENT,
                        help="Exponent for the public key.")
keygen_cmd.add_argument("--rounds",
                        type=int,
                        default=keygen.DEFAULT_ROUNDS,
                        help="Miller-Rabin rounds per prime candidate.")
keygen_cmd.add_argument("--overwrite", "-o", action="store_true", help="Overwrite destination files if they exist.")
commands.add_parser("encrypt", parents=[pubkey, payloads, encp], help="Encryption utility.")
commands.add_parser("decrypt", parents=[privkey, payloads, encp], help="Decryption utility.")


def check_message(mess: str, enc: str) -> str:
    """Parse message for path-notice."""
    if mess.startswith("P:"):
        with open(mess[2:], "r", encoding=enc) as f:
            mess = f.read()
    return mess


def run(args: argparse.Namespace) -> int:
    """Execute the parsed subcommand."""

    def pspr(text: str):
        """Print only if not in quiet mode."""
        if not args.quiet:
            print(text)

    match args.subcommand:
        case "keygen":
            if (args.private_key.exists() or args.public_key.exists()) and not args.overwrite:
                print("Destination private or public key already exists!", file=sys.stderr)
                return 1
            keys = rsa.KeyPair.generate(args.keysize, args.pub_exponent, args.rounds)
            keycodec.write_key(args.private_key, rsa.export_private_key(keys.private))
            keycodec.write_key(args.public_key, rsa.export_public_key(keys.public))
            pspr("Key pair generated!")
        case "encrypt":
            message = check_message(args.message, args.encoding)
            pub = rsa.import_public_key(keycodec.read_key(args.public_key))
            ciph = pub.encrypt(message.encode(args.encoding))
            pspr("Ciphertext:")
            print(rsa.wrap_ciphertext(ciph).decode("ascii"))
        case "decrypt":
            message = check_message(args.message, "ascii")
            priv = rsa.import_private_key(keycodec.read_key(args.private_key))
            clear = priv.decrypt(rsa.unwrap_ciphertext(message.strip()))
            pspr("Cleartext:")
            print(clear.decode(args.encoding))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point. Returns the process exit status."""
    args = corep.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    try:
        return run(args)
    except (rsacore.RSAError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

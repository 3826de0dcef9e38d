"""Exceptions raised by rsacore.

Every error derives from `RSAError`, and additionally from the builtin exception a caller would expect in its place,
so existing `except ValueError` handlers keep working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class RSAError(Exception):
    """Base class for all rsacore errors."""


class MessageTooLong(RSAError, ValueError):
    """The plaintext does not fit into a single modulus block with PKCS#1 v1.5 overhead."""


class InvalidPadding(RSAError, ValueError):
    """The decrypted block is not a valid PKCS#1 v1.5 type 2 block.

    Signals a wrong key, a corrupted ciphertext or tampering. Deliberately carries no detail on which check failed.
    """


class NoModularInverse(RSAError, ArithmeticError):
    """The public exponent is not invertible modulo the totient, so no private exponent exists."""


class MalformedKeyMaterial(RSAError, ValueError):
    """Imported key text is not valid JSON, lacks a field or carries invalid base64."""


class MalformedCiphertext(RSAError, ValueError):
    """A wrapped ciphertext could not be unwrapped."""

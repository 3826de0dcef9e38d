"""PKCS#1 v1.5 encryption padding (block type 2).

    EM = 0x00 || 0x02 || PS || 0x00 || M

PS holds at least eight random nonzero octets, which is where the 11 octet overhead comes from.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import random
import secrets

from rsacore.errors import InvalidPadding
from rsacore.errors import MessageTooLong

PKCS1_OVERHEAD: int = 11

_SYSTEM_RANDOM = secrets.SystemRandom()

logger = logging.getLogger(__name__)


def max_message_length(modulus_bytes: int) -> int:
    """Largest message a block of `modulus_bytes` can carry. Negative for moduli too small to carry any."""
    return modulus_bytes - PKCS1_OVERHEAD


def _nonzero_byte(rng: random.Random) -> int:
    byte = rng.getrandbits(8)
    while byte == 0:
        byte = rng.getrandbits(8)
    return byte


def pad(message: bytes, modulus_bytes: int, rng: random.Random | None = None) -> bytes:
    """Pads the message into an encryption block.

    Args:
        message: The message to pad.
        modulus_bytes: Length of the modulus in bytes, which is the length of the result.
        rng: Source of the padding string. Defaults to the system generator.

    Returns:
        The padded block, exactly `modulus_bytes` long.

    Raises:
        MessageTooLong: If the message exceeds `modulus_bytes - 11`.
    """
    if len(message) > max_message_length(modulus_bytes):
        raise MessageTooLong(f"Message of {len(message)} bytes too long for a {modulus_bytes} byte modulus.")
    if rng is None:
        rng = _SYSTEM_RANDOM
    ps = bytes(_nonzero_byte(rng) for _ in range(modulus_bytes - len(message) - 3))
    logger.debug("Padded %d byte message with %d byte padding string", len(message), len(ps))
    return b"\x00\x02" + ps + b"\x00" + message


def unpad(padded: bytes) -> bytes:
    """Strips the padding from a decrypted block.

    Args:
        padded: The decrypted block.

    Returns:
        The message carried by the block.

    Raises:
        InvalidPadding: If the block is short, has the wrong header or has no separator.
    """
    if len(padded) < PKCS1_OVERHEAD or padded[0:2] != b"\x00\x02":
        raise InvalidPadding("Decryption error.")
    try:
        sep = padded.index(b"\x00", 2)
    except ValueError as exc:
        raise InvalidPadding("Decryption error.") from exc
    return padded[sep + 1:]

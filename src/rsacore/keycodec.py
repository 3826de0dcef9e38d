"""Key exchange format: flat JSON records of base64 encoded big-endian integers.

    {"e": "AQAB", "n": "..."}

The format is transparent and unauthenticated. It carries no version and no key identifier.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import binascii
import json
import pathlib

from rsacore.errors import MalformedKeyMaterial


def _int_to_b64(value: int) -> str:
    return base64.b64encode(value.to_bytes((value.bit_length() + 7) // 8, byteorder="big")).decode("ascii")


def _b64_to_int(value: str) -> int:
    return int.from_bytes(base64.b64decode(value.encode("ascii"), validate=True), byteorder="big")


def encode_record(fields: dict[str, int]) -> str:
    """Encodes named non-negative integers into a JSON record.

    Args:
        fields: Field name to integer mapping, in output order.

    Returns:
        The JSON text.
    """
    return json.dumps({name: _int_to_b64(value) for name, value in fields.items()})


def decode_record(text: str, names: tuple[str, ...]) -> dict[str, int]:
    """Decodes the named integers from a JSON record.

    Unknown fields are ignored.

    Args:
        text: The JSON text.
        names: The fields that must be present.

    Returns:
        Field name to integer mapping for `names`.

    Raises:
        MalformedKeyMaterial: If the text is not a JSON object, a field is missing or not valid base64.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedKeyMaterial("Key material is not valid JSON.") from exc
    if not isinstance(payload, dict):
        raise MalformedKeyMaterial("Key material must be a JSON object.")
    result = {}
    for name in names:
        value = payload.get(name)
        if not isinstance(value, str):
            raise MalformedKeyMaterial(f"Key material is missing field {name!r}.")
        try:
            result[name] = _b64_to_int(value)
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise MalformedKeyMaterial(f"Field {name!r} is not valid base64.") from exc
    return result


def write_key(file: pathlib.Path, text: str) -> None:
    """Writes exported key text to file."""
    with open(file, "w", encoding="utf-8") as f:
        f.write(text + "\n")


def read_key(file: pathlib.Path) -> str:
    """Reads exported key text from file."""
    with open(file, "r", encoding="utf-8") as f:
        return f.read().strip()

"""RSA from first principles, in an Academic Sense.

Provides probable-prime generation, key pair construction, PKCS#1 v1.5 encryption and decryption, and a plain JSON
key exchange format. Not hardened against side channels: for education and low-assurance use only.

Typical usage example:

    p = generate_prime(512)
    engine = RSAEngine.generate(2048)
    c = engine.encrypt(b"Hi there!")
    r = engine.decrypt(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsacore.errors import InvalidPadding
from rsacore.errors import MalformedCiphertext
from rsacore.errors import MalformedKeyMaterial
from rsacore.errors import MessageTooLong
from rsacore.errors import NoModularInverse
from rsacore.errors import RSAError
from rsacore.keygen import generate_key_pair
from rsacore.keygen import generate_prime
from rsacore.keygen import is_prime
from rsacore.keygen import modular_inverse
from rsacore.padding import pad
from rsacore.padding import unpad
from rsacore.rsa import export_private_key
from rsacore.rsa import export_public_key
from rsacore.rsa import import_private_key
from rsacore.rsa import import_public_key
from rsacore.rsa import KeyPair
from rsacore.rsa import PrivateKey
from rsacore.rsa import PublicKey
from rsacore.rsa import RSAEngine

__version__ = "0.1.0"
__all__ = [
    "KeyPair",
    "PrivateKey",
    "PublicKey",
    "RSAEngine",
    "generate_prime",
    "is_prime",
    "modular_inverse",
    "generate_key_pair",
    "pad",
    "unpad",
    "export_public_key",
    "export_private_key",
    "import_public_key",
    "import_private_key",
    "RSAError",
    "MessageTooLong",
    "InvalidPadding",
    "NoModularInverse",
    "MalformedKeyMaterial",
    "MalformedCiphertext",
]

"""Provides core RSA functionalities: PKCS#1 v1.5 encryption and decryption with self-generated keys.

Handles the key types and the engine tying them together, as well as supporting functions such as key import/export,
integer marshalling and a transport envelope for ciphertexts.

None of the arithmetic here is constant time. Do not use it where timing side channels matter.

Typical usage example:

    engine = RSAEngine.generate(2048)
    c = engine.encrypt(b"Hi there!")
    r = engine.decrypt(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import binascii
import dataclasses
import random

from pyasn1 import error
from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.type import namedtype
from pyasn1.type import univ
from pyasn1_modules import rfc8017

from rsacore import keycodec
from rsacore import keygen
from rsacore import padding
from rsacore.errors import MalformedCiphertext


class RSAMessage(univ.Sequence):
    """Due to the unfortunate fact that no RSA-based encryption wrapper exists we make our own!"""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("encryptionAlgorithm", rfc8017.AlgorithmIdentifier()),
        namedtype.NamedType("encryptedData", univ.OctetString()),
    )


@dataclasses.dataclass(frozen=True)
class PublicKey:
    """RSA public key.

    Attributes:
        e: The public exponent.
        n: The modulus.
    """
    e: int
    n: int

    @property
    def bsize(self) -> int:
        """Length of the modulus in bytes, which is also the ciphertext length."""
        return (self.n.bit_length() + 7) // 8

    def c_rsa(self, message: int) -> int:
        """Performs the core RSA encryption primitive.

        Args:
            message: The int-marshalled padded message.

        Returns:
            The encrypted message representative.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not 0 <= message < self.n:
            raise ValueError("Message representative must be in range [0, n-1]")
        return pow(message, self.e, self.n)

    def encrypt(self, message: bytes, rng: random.Random | None = None) -> bytes:
        """Use the public key to encrypt the message.

        Args:
            message: The message to encrypt. At most `bsize - 11` bytes.
            rng: Source of the padding string. Defaults to the system generator.

        Returns:
            The ciphertext, exactly `bsize` bytes long.

        Raises:
            MessageTooLong: If the message does not fit into one block.
        """
        em = padding.pad(message, self.bsize, rng)
        cm = self.c_rsa(bytes_to_integer(em))
        return integer_to_bytes(cm, self.bsize)


@dataclasses.dataclass(frozen=True)
class PrivateKey:
    """RSA private key.

    Attributes:
        d: The private exponent.
        n: The modulus.
    """
    d: int
    n: int

    @property
    def bsize(self) -> int:
        """Length of the modulus in bytes."""
        return (self.n.bit_length() + 7) // 8

    def c_rsa(self, ciphertext: int) -> int:
        """Performs the core RSA decryption primitive.

        Representatives beyond the modulus are not rejected, they are reduced and will fail to unpad.
        """
        return pow(ciphertext, self.d, self.n)

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypts the ciphertext using the private key.

        Args:
            ciphertext: The ciphertext to decrypt.

        Returns:
            The recovered message.

        Raises:
            InvalidPadding: If the decrypted block is malformed (wrong key or corrupted ciphertext).
        """
        m = self.c_rsa(bytes_to_integer(ciphertext))
        return padding.unpad(integer_to_bytes(m, self.bsize))


@dataclasses.dataclass(frozen=True)
class KeyPair:
    """Matching public and private keys, sharing one modulus.

    Attributes:
        public: The public key (e, n).
        private: The private key (d, n).
        p: Private Prime 1, only kept when exposed.
        q: Private Prime 2, only kept when exposed.
    """
    public: PublicKey
    private: PrivateKey
    p: int | None = dataclasses.field(default=None, repr=False)
    q: int | None = dataclasses.field(default=None, repr=False)

    @classmethod
    def generate(cls,
                 size: int,
                 pub_exp: int = keygen.DEFAULT_PUBLIC_EXPONENT,
                 rounds: int = keygen.DEFAULT_ROUNDS,
                 rng: random.Random | None = None,
                 expose_primes: bool = False) -> "KeyPair":
        """Generates a new key pair.

        Args:
            size: The size of the modulus in bits.
            pub_exp: The public exponent of the key.
            rounds: Miller-Rabin rounds per prime candidate.
            rng: Source of randomness. Defaults to the system generator.
            expose_primes: Whether to keep p and q on the key pair.

        Returns:
            A new key pair.
        """
        (e, n), (d, _, p, q) = keygen.generate_key_pair(size, pub_exp, rounds, rng, True)
        if not expose_primes:
            return cls(PublicKey(e, n), PrivateKey(d, n))
        return cls(PublicKey(e, n), PrivateKey(d, n), p, q)


class RSAEngine:
    """Encrypts and decrypts single PKCS#1 v1.5 blocks with a fixed key pair.

    The engine holds no state beyond its keys and random generator. Encryption is randomized by the padding, so two
    encryptions of the same message differ, but decryption always recovers the message.
    """

    def __init__(self, keys: KeyPair, rng: random.Random | None = None) -> None:
        self._keys = keys
        self._rng = rng

    @classmethod
    def generate(cls,
                 size: int,
                 pub_exp: int = keygen.DEFAULT_PUBLIC_EXPONENT,
                 rounds: int = keygen.DEFAULT_ROUNDS,
                 rng: random.Random | None = None,
                 expose_primes: bool = False) -> "RSAEngine":
        """Generates a key pair and wraps it in an engine sharing the same random generator."""
        return cls(KeyPair.generate(size, pub_exp, rounds, rng, expose_primes), rng)

    @classmethod
    def from_private_key(cls,
                         text: str,
                         pub_exp: int = keygen.DEFAULT_PUBLIC_EXPONENT,
                         rng: random.Random | None = None) -> "RSAEngine":
        """Rebuilds an engine from an exported private key.

        The export carries no public exponent, so the one the key was generated with has to be supplied.
        """
        priv = import_private_key(text)
        return cls(KeyPair(PublicKey(pub_exp, priv.n), priv), rng)

    @property
    def keys(self) -> KeyPair:
        """The key pair this engine operates with."""
        return self._keys

    @property
    def public_key(self) -> PublicKey:
        """The public half of `keys`."""
        return self._keys.public

    @property
    def private_key(self) -> PrivateKey:
        """The private half of `keys`."""
        return self._keys.private

    @property
    def modulus_bytes(self) -> int:
        """Length of every ciphertext, in bytes."""
        return self._keys.public.bsize

    @property
    def max_message_length(self) -> int:
        """Longest message `encrypt` accepts. Negative when the modulus cannot hold the padding."""
        return padding.max_message_length(self.modulus_bytes)

    def encrypt(self, message: bytes) -> bytes:
        """Pads and encrypts a message with the public key.

        Args:
            message: The plaintext. At most `max_message_length` bytes.

        Returns:
            The ciphertext, exactly `modulus_bytes` long.

        Raises:
            MessageTooLong: If the message does not fit in one block.
        """
        return self._keys.public.encrypt(message, self._rng)

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypts a ciphertext with the private key and strips the padding.

        Args:
            ciphertext: Output of `encrypt` under the matching public key.

        Returns:
            The original message.

        Raises:
            InvalidPadding: If the decrypted block is not a valid PKCS#1 v1.5 encryption block.
        """
        return self._keys.private.decrypt(ciphertext)

    def export_public_key(self) -> str:
        """Returns the public key as a JSON record, see `export_public_key`."""
        return export_public_key(self._keys.public)

    def export_private_key(self) -> str:
        """Returns the private key as a JSON record, see `export_private_key`."""
        return export_private_key(self._keys.private)


def export_public_key(key: PublicKey) -> str:
    """Exports the public key as a JSON record of base64 encoded big-endian integers."""
    return keycodec.encode_record({"e": key.e, "n": key.n})


def export_private_key(key: PrivateKey) -> str:
    """Exports the private key as a JSON record of base64 encoded big-endian integers."""
    return keycodec.encode_record({"d": key.d, "n": key.n})


def import_public_key(text: str) -> PublicKey:
    """Imports a public key exported by `export_public_key`.

    Raises:
        MalformedKeyMaterial: If the record is malformed.
    """
    fields = keycodec.decode_record(text, ("e", "n"))
    return PublicKey(fields["e"], fields["n"])


def import_private_key(text: str) -> PrivateKey:
    """Imports a private key exported by `export_private_key`.

    Raises:
        MalformedKeyMaterial: If the record is malformed.
    """
    fields = keycodec.decode_record(text, ("d", "n"))
    return PrivateKey(fields["d"], fields["n"])


def wrap_ciphertext(ciphertext: bytes) -> bytes:
    """Wraps a ciphertext into a base64 encoded DER envelope naming the rsaEncryption algorithm.

    Args:
        ciphertext: The raw ciphertext.

    Returns:
        Base64 encoded envelope.
    """
    enc_id = rfc8017.AlgorithmIdentifier()
    enc_id["algorithm"] = rfc8017.rsaEncryption
    enc_id["parameters"] = univ.Null("")
    pld = RSAMessage()
    pld["encryptionAlgorithm"] = enc_id
    pld["encryptedData"] = ciphertext
    return base64.b64encode(encoder.encode(pld))


def unwrap_ciphertext(armored: bytes | str) -> bytes:
    """Unwraps a ciphertext produced by `wrap_ciphertext`.

    Args:
        armored: Base64 encoded envelope.

    Returns:
        The raw ciphertext.

    Raises:
        MalformedCiphertext: If the envelope is not valid base64 or DER, or names another algorithm.
    """
    try:
        ctext = base64.b64decode(armored, validate=True)
        pld, rest = decoder.decode(ctext, asn1Spec=RSAMessage())
    except (binascii.Error, ValueError, error.PyAsn1Error) as exc:
        raise MalformedCiphertext("Ciphertext envelope could not be decoded.") from exc
    if rest:
        raise MalformedCiphertext("Trailing data after ciphertext envelope.")
    if pld["encryptionAlgorithm"]["algorithm"] != rfc8017.rsaEncryption:
        raise MalformedCiphertext("Unknown encryption algorithm.")
    return pld["encryptedData"].asOctets()


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer in accordance to preset procedures.

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int) -> bytes:
    """Converts an integer to a string, using a fixed-length byte representation.

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string.

    Returns:
        The representative bytes. (AKA Octet String)
    """
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)

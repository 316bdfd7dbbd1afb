"""
Cryptographic Helpers

Produce payloads the way the platform does: a fresh AES-256 key encrypts the
file with AES-GCM, and the key is wrapped with the instance's RSA public key.
"""

import base64
import os
from typing import Optional, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from instance_watcher.domain.encryption.value_objects import NONCE_SIZE, TAG_SIZE
from instance_watcher.infrastructure.hybrid_decryptor import oaep_padding


def generate_private_key(key_size: int = 2048) -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=key_size)


def private_key_pem(private_key: rsa.RSAPrivateKey, passphrase: Optional[bytes] = None) -> bytes:
    encryption = (
        serialization.BestAvailableEncryption(passphrase)
        if passphrase
        else serialization.NoEncryption()
    )
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )


def wrap_key(public_key: rsa.RSAPublicKey, key: bytes) -> str:
    """RSA-OAEP wrap a symmetric key and base64 encode it."""
    return base64.b64encode(public_key.encrypt(key, oaep_padding())).decode("ascii")


def seal(key: bytes, plaintext: bytes, nonce: Optional[bytes] = None) -> bytes:
    """Encrypt plaintext into the v1 wire format: nonce | tag | ciphertext."""
    nonce = nonce or os.urandom(NONCE_SIZE)
    combined = AESGCM(key).encrypt(nonce, plaintext, None)
    ciphertext, tag = combined[:-TAG_SIZE], combined[-TAG_SIZE:]
    return nonce + tag + ciphertext


def encrypt_for(
    public_key: rsa.RSAPublicKey,
    plaintext: bytes,
    key: Optional[bytes] = None,
) -> Tuple[str, bytes]:
    """
    Encrypt plaintext for an instance.

    Returns:
        Tuple of (base64 wrapped key, wire-format blob)
    """
    key = key or AESGCM.generate_key(bit_length=256)
    return wrap_key(public_key, key), seal(key, plaintext)

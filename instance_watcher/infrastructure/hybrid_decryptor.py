"""
Hybrid Decryptor Implementation

RSA-OAEP (SHA-256) key unwrap followed by AES-256-GCM payload decryption,
using the cryptography library in-process.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Optional

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..domain.encryption.decryptor import IPayloadDecryptor
from ..domain.encryption.value_objects import SYMMETRIC_KEY_SIZE, EncryptedPayload
from ..domain.errors import (
    KeyUnavailableError,
    KeyUnwrapError,
    PayloadAuthenticationError,
)

logger = logging.getLogger(__name__)


def oaep_padding() -> padding.OAEP:
    """OAEP padding with SHA-256 as both the MGF1 and the digest hash."""
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


class HybridDecryptor(IPayloadDecryptor):
    """
    Decrypts payloads encrypted for this instance's RSA key pair.

    The private key is loaded lazily on first use so an agent without a key
    can still process unencrypted jobs.
    """

    def __init__(
        self,
        private_key_path: Optional[str] = None,
        passphrase: Optional[str] = None,
        private_key: Optional[rsa.RSAPrivateKey] = None,
    ):
        """
        Initialize the decryptor.

        Args:
            private_key_path: PEM file holding the instance private key
            passphrase: Optional passphrase protecting the PEM file
            private_key: Already loaded key, takes precedence over the path
        """
        self.private_key_path = Path(private_key_path) if private_key_path else None
        self._passphrase = passphrase.encode("utf-8") if passphrase else None
        self._private_key = private_key

    def _load_private_key(self) -> rsa.RSAPrivateKey:
        if self._private_key is not None:
            return self._private_key

        if self.private_key_path is None:
            raise KeyUnavailableError("No private key path configured")

        try:
            pem = self.private_key_path.read_bytes()
        except OSError as e:
            raise KeyUnavailableError(
                f"Private key not readable at {self.private_key_path}: {e}", e
            )

        try:
            key = serialization.load_pem_private_key(pem, password=self._passphrase)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyUnavailableError(
                f"Private key at {self.private_key_path} could not be loaded: {e}", e
            )

        if not isinstance(key, rsa.RSAPrivateKey):
            raise KeyUnavailableError(
                f"Private key at {self.private_key_path} is not an RSA key"
            )

        logger.info(f"Loaded instance private key from {self.private_key_path}")
        self._private_key = key
        return key

    def unwrap_key(self, encrypted_key_b64: str) -> bytes:
        private_key = self._load_private_key()

        try:
            # Line-wrapped base64 is accepted; any other stray character is not
            wrapped = base64.b64decode("".join(encrypted_key_b64.split()), validate=True)
        except (binascii.Error, ValueError, TypeError, AttributeError) as e:
            raise KeyUnwrapError(f"Encryption key is not valid base64: {e}", e)

        try:
            key = private_key.decrypt(wrapped, oaep_padding())
        except ValueError as e:
            raise KeyUnwrapError("Failed to decrypt AES key with RSA private key", e)

        if len(key) != SYMMETRIC_KEY_SIZE:
            raise KeyUnwrapError(
                f"Unwrapped key is {len(key)} bytes, expected {SYMMETRIC_KEY_SIZE}"
            )
        return key

    def decrypt_payload(self, key: bytes, blob: bytes) -> bytes:
        if len(key) != SYMMETRIC_KEY_SIZE:
            raise KeyUnwrapError(
                f"Symmetric key is {len(key)} bytes, expected {SYMMETRIC_KEY_SIZE}"
            )

        payload = EncryptedPayload.from_bytes(blob)

        try:
            return AESGCM(key).decrypt(payload.nonce, payload.combined_ciphertext(), None)
        except InvalidTag as e:
            raise PayloadAuthenticationError(
                "Payload authentication failed: file is corrupt or was encrypted with another key",
                e,
            )

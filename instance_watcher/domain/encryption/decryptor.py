"""
Payload Decryptor Interface

Abstract interface for hybrid payload decryption.
The concrete RSA-OAEP + AES-GCM implementation lives in the infrastructure layer.
"""

from abc import ABC, abstractmethod


class IPayloadDecryptor(ABC):
    """
    Abstract interface for hybrid decryption.

    Both steps are fail-closed: any error raises a DecryptionError and no
    plaintext is returned.
    """

    @abstractmethod
    def unwrap_key(self, encrypted_key_b64: str) -> bytes:
        """
        Recover the symmetric key from its base64, asymmetrically wrapped form.

        Args:
            encrypted_key_b64: Wrapped key from the job descriptor

        Returns:
            Symmetric key of exactly SYMMETRIC_KEY_SIZE bytes

        Raises:
            KeyUnavailableError: If the private key cannot be loaded
            KeyUnwrapError: If the key cannot be decoded or unwrapped
        """
        pass  # pragma: no cover

    @abstractmethod
    def decrypt_payload(self, key: bytes, blob: bytes) -> bytes:
        """
        Authenticate and decrypt a wire-format blob.

        Args:
            key: Symmetric key returned by unwrap_key()
            blob: Downloaded bytes in the v1 wire format

        Returns:
            Plaintext bytes

        Raises:
            MalformedPayloadError: If the blob does not match the wire format
            PayloadAuthenticationError: If the tag does not verify
        """
        pass  # pragma: no cover

    def decrypt(self, encrypted_key_b64: str, blob: bytes) -> bytes:
        """
        Run key unwrap followed by payload decryption.

        Raises:
            DecryptionError: If either step fails
        """
        key = self.unwrap_key(encrypted_key_b64)
        return self.decrypt_payload(key, blob)

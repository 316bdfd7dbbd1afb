"""
Encryption Value Objects

Wire format of encrypted payloads delivered by the platform.

Version 1 layout (the only supported one):

    offset 0   12 bytes  nonce
    offset 12  16 bytes  AES-GCM authentication tag
    offset 28  ...       ciphertext

The trailing-tag layout is not detected or accepted: a wrong split would
surface as tag failures that look like corruption.
"""

from dataclasses import dataclass

from ..errors import MalformedPayloadError

WIRE_FORMAT_VERSION = 1
NONCE_SIZE = 12
TAG_SIZE = 16
HEADER_SIZE = NONCE_SIZE + TAG_SIZE
SYMMETRIC_KEY_SIZE = 32  # AES-256


@dataclass(frozen=True)
class EncryptedPayload:
    """
    Value object for one decryption unit (nonce, tag, ciphertext).

    Exists only while a job is being processed; never persisted.
    """
    nonce: bytes
    tag: bytes
    ciphertext: bytes

    def __post_init__(self):
        if len(self.nonce) != NONCE_SIZE:
            raise MalformedPayloadError(
                f"Nonce must be {NONCE_SIZE} bytes, got {len(self.nonce)}"
            )
        if len(self.tag) != TAG_SIZE:
            raise MalformedPayloadError(
                f"Authentication tag must be {TAG_SIZE} bytes, got {len(self.tag)}"
            )

    @classmethod
    def from_bytes(cls, blob: bytes) -> "EncryptedPayload":
        """
        Split a downloaded blob at the v1 offsets.

        Raises:
            MalformedPayloadError: If the blob is shorter than the header
        """
        if len(blob) < HEADER_SIZE:
            raise MalformedPayloadError(
                f"Encrypted payload is {len(blob)} bytes; "
                f"v{WIRE_FORMAT_VERSION} requires at least {HEADER_SIZE}"
            )
        return cls(
            nonce=bytes(blob[:NONCE_SIZE]),
            tag=bytes(blob[NONCE_SIZE:HEADER_SIZE]),
            ciphertext=bytes(blob[HEADER_SIZE:]),
        )

    def to_bytes(self) -> bytes:
        return self.nonce + self.tag + self.ciphertext

    def combined_ciphertext(self) -> bytes:
        """Ciphertext with the tag appended, as AEAD decrypt APIs expect."""
        return self.ciphertext + self.tag

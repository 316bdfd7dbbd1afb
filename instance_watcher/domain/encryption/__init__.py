"""
Encryption Domain

Payload wire format and the hybrid decryption contract.
"""

from .decryptor import IPayloadDecryptor
from .value_objects import (
    HEADER_SIZE,
    NONCE_SIZE,
    SYMMETRIC_KEY_SIZE,
    TAG_SIZE,
    WIRE_FORMAT_VERSION,
    EncryptedPayload,
)

__all__ = [
    "IPayloadDecryptor",
    "EncryptedPayload",
    "WIRE_FORMAT_VERSION",
    "NONCE_SIZE",
    "TAG_SIZE",
    "HEADER_SIZE",
    "SYMMETRIC_KEY_SIZE",
]

"""
Reversible transform for stored portal passwords.

Stored blobs are base64(nonce || AES-GCM ciphertext). The key is held in
memory for the process lifetime; plaintext passwords are only produced
right before a provider call.
"""
import base64
import binascii
import logging
from typing import Any, Dict, Optional

from cryptography.exceptions import InvalidTag

from autopunch.exceptions import ConfigurationError, DecryptionFailure
from .config import get_kms_config
from .crypto import KEY_SIZE, NONCE_SIZE, decrypt_aes_gcm, encrypt_aes_gcm

logger = logging.getLogger(__name__)


class CredentialCipher:

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ConfigurationError(f"Encryption key must be {KEY_SIZE} bytes, got {len(key)}")
        self._key = key

    def encrypt(self, password: str) -> str:
        ciphertext, nonce = encrypt_aes_gcm(password, self._key)
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, blob: str) -> str:
        """
        Decrypt a stored password blob.

        Raises:
            DecryptionFailure: If the blob is malformed or was not produced
                with this key
        """
        try:
            raw = base64.b64decode(blob.encode("ascii"), validate=True)
        except (binascii.Error, ValueError, AttributeError) as e:
            raise DecryptionFailure(f"Invalid encrypted password format: {e}") from e

        if len(raw) <= NONCE_SIZE:
            raise DecryptionFailure("Invalid encrypted password format: blob too short")

        try:
            return decrypt_aes_gcm(raw[NONCE_SIZE:], raw[:NONCE_SIZE], self._key)
        except InvalidTag as e:
            raise DecryptionFailure("Decryption failed: authentication tag mismatch") from e
        except (ValueError, UnicodeDecodeError) as e:
            raise DecryptionFailure(f"Decryption failed: {e}") from e


def build_cipher(kms_config: Optional[Dict[str, Any]] = None, kms_client=None) -> CredentialCipher:
    """
    Build the process-wide cipher from configuration.

    In "kms" mode the wrapped data key is unwrapped once here.

    Raises:
        ConfigurationError: If the key material is missing or malformed
    """
    config = kms_config or get_kms_config()

    if config["mode"] == "local":
        try:
            key = bytes.fromhex(config["key_hex"])
        except ValueError as e:
            raise ConfigurationError(f"AUTOPUNCH_ENCRYPTION_KEY must be hex: {e}") from e
        logger.info("Using local credential key")
        return CredentialCipher(key)

    from .service import KMSService

    try:
        wrapped = base64.b64decode(config["wrapped_dek"], validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(f"AUTOPUNCH_WRAPPED_DEK must be base64: {e}") from e

    key = KMSService(config, client=kms_client).decrypt_dek(wrapped)
    logger.info("Using KMS-wrapped credential key")
    return CredentialCipher(key)

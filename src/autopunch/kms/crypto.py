"""
AES-GCM encryption and decryption utilities.
"""
import secrets

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

# Standard nonce size for GCM is 12 bytes (96 bits)
NONCE_SIZE = 12
# AES-256 requires 32-byte keys
KEY_SIZE = 32


def generate_key() -> bytes:
    """Generate a random AES-256 key."""
    return AESGCM.generate_key(bit_length=KEY_SIZE * 8)


def encrypt_aes_gcm(plaintext: str, key: bytes) -> tuple[bytes, bytes]:
    """
    Encrypt plaintext using AES-GCM.

    Args:
        plaintext: The plaintext string to encrypt
        key: The encryption key (must be 32 bytes for AES-256)

    Returns:
        Tuple of (ciphertext, nonce)

    Raises:
        ValueError: If key size is incorrect
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes for AES-256, got {len(key)} bytes")

    nonce = secrets.token_bytes(NONCE_SIZE)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    return ciphertext, nonce


def decrypt_aes_gcm(ciphertext: bytes, nonce: bytes, key: bytes) -> str:
    """
    Decrypt ciphertext using AES-GCM.

    Raises:
        ValueError: If key or nonce size is incorrect
        cryptography.exceptions.InvalidTag: If decryption fails (wrong key, corrupted data, etc.)
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes for AES-256, got {len(key)} bytes")

    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)} bytes")

    return AESGCM(key).decrypt(nonce, ciphertext, None).decode("utf-8")

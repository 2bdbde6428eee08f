"""
Credential encryption: AES-GCM with a local or KMS-wrapped key.
"""
from .cipher import CredentialCipher, build_cipher
from .config import get_kms_config
from .crypto import generate_key

__all__ = ["CredentialCipher", "build_cipher", "get_kms_config", "generate_key"]

"""
Credential key configuration loaded from environment variables.

Two modes are supported:

- "local": a 32-byte AES key given as hex in AUTOPUNCH_ENCRYPTION_KEY
- "kms":   an AWS KMS wrapped data key (AUTOPUNCH_WRAPPED_DEK, base64) that is
           unwrapped once at startup with the key AWS_KMS_KEY_ID
"""
import os
import logging
from typing import Dict, Any

from dotenv import load_dotenv

from autopunch.exceptions import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)


def get_kms_config() -> Dict[str, Any]:
    """
    Get credential key configuration from environment variables.

    Returns:
        Dictionary with "mode" and the settings for that mode

    Raises:
        ConfigurationError: If required configuration is missing
    """
    local_key = os.getenv("AUTOPUNCH_ENCRYPTION_KEY")
    wrapped_dek = os.getenv("AUTOPUNCH_WRAPPED_DEK")

    if local_key:
        return {"mode": "local", "key_hex": local_key}

    if not wrapped_dek:
        raise ConfigurationError(
            "AUTOPUNCH_ENCRYPTION_KEY or AUTOPUNCH_WRAPPED_DEK environment variable is required"
        )

    config = get_aws_config()
    config.update({"mode": "kms", "wrapped_dek": wrapped_dek})
    return config


def get_aws_config() -> Dict[str, Any]:
    """
    AWS settings for the KMS client.

    Explicit access keys are optional; without them boto3 falls back to its
    default credential chain (instance role, shared config, ...).

    Raises:
        ConfigurationError: If the key id or region is missing
    """
    kms_key_id = os.getenv("AWS_KMS_KEY_ID")
    aws_region = os.getenv("AWS_DEFAULT_REGION") or os.getenv("AWS_REGION")

    if not kms_key_id:
        raise ConfigurationError("AWS_KMS_KEY_ID environment variable is required")

    if not aws_region:
        raise ConfigurationError("AWS_DEFAULT_REGION or AWS_REGION environment variable is required")

    return {
        "access_key_id": os.getenv("AWS_ACCESS_KEY_ID"),
        "secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY"),
        "kms_key_id": kms_key_id,
        "region": aws_region,
    }

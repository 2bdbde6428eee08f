"""
AWS KMS service for data key operations.
"""
import logging
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.exceptions import ClientError

from .config import get_aws_config

logger = logging.getLogger(__name__)


def _kms_client(config: Dict[str, Any]):
    return boto3.client(
        "kms",
        aws_access_key_id=config.get("access_key_id"),
        aws_secret_access_key=config.get("secret_access_key"),
        region_name=config["region"],
    )


class KMSService:
    """Generates and unwraps data encryption keys (DEKs) with AWS KMS."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, client=None):
        config = config or get_aws_config()
        self.kms_key_id = config["kms_key_id"]
        self.kms_client = client or _kms_client(config)

    def generate_data_key(self) -> Tuple[bytes, bytes]:
        """
        Generate a data encryption key (DEK) using AWS KMS.

        Returns:
            Tuple of (plaintext_dek, wrapped_dek)

        Raises:
            ClientError: If KMS operation fails
        """
        try:
            response = self.kms_client.generate_data_key(KeyId=self.kms_key_id, KeySpec="AES_256")
        except ClientError as e:
            logger.error(f"Failed to generate data key: {e}")
            raise

        logger.info(f"Generated data key using KMS key: {self.kms_key_id}")
        return response["Plaintext"], response["CiphertextBlob"]

    def decrypt_dek(self, wrapped_dek: bytes) -> bytes:
        """
        Decrypt a wrapped data encryption key using AWS KMS.

        Raises:
            ClientError: If KMS operation fails
        """
        try:
            response = self.kms_client.decrypt(CiphertextBlob=wrapped_dek, KeyId=self.kms_key_id)
        except ClientError as e:
            logger.error(f"Failed to decrypt data key: {e}")
            raise

        logger.info(f"Decrypted data key using KMS key: {self.kms_key_id}")
        return response["Plaintext"]

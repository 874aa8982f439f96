"""S3 access for the encrypted sops files."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from sopsprovider.shared.config import ProviderConfig
from sopsprovider.shared.errors import FetchError
from sopsprovider.sops.decryptor import EncryptedPayload, S3ObjectRef

logger = logging.getLogger(__name__)


class S3ObjectStore:
    """Reads encrypted files from S3."""

    def __init__(self, config: ProviderConfig, *, client: Any | None = None) -> None:
        self._client = client or boto3.client("s3", **config.client_kwargs(config.s3_endpoint))

    def fetch(self, bucket: str, key: str, declared_format: str | None = None) -> EncryptedPayload:
        """Download ``s3://bucket/key``.

        Raises:
            FetchError: If the object is missing or cannot be read.
        """
        logger.info("Getting object from S3: bucket=%s key=%s", bucket, key)
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            body = response["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            raise FetchError(f"Failed to read s3://{bucket}/{key}: {code}") from exc
        except BotoCoreError as exc:
            raise FetchError(f"Failed to read s3://{bucket}/{key}") from exc

        return EncryptedPayload(
            body=body,
            location=S3ObjectRef(bucket=bucket, key=key),
            declared_format=declared_format,
        )

"""Secrets Manager writer for decrypted values."""

from __future__ import annotations

import logging
from typing import Any

import boto3

from sopsprovider.shared.config import ProviderConfig

logger = logging.getLogger(__name__)


class SecretsManagerStore:
    """Overwrites the current value of an existing secret."""

    def __init__(self, config: ProviderConfig, *, client: Any | None = None) -> None:
        self._client = client or boto3.client(
            "secretsmanager", **config.client_kwargs(config.secretsmanager_endpoint)
        )

    def put_secret_string(self, secret_id: str, value: str) -> None:
        """Store ``value`` as the new current version of ``secret_id``.

        ``secret_id`` may be an ARN or a name.

        Raises:
            ClientError: If the secret cannot be written.
        """
        self._client.put_secret_value(SecretId=secret_id, SecretString=value)
        logger.info("Wrote secret %s", secret_id)

"""SSM Parameter Store writer for decrypted values."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from sopsprovider.shared.config import ProviderConfig
from sopsprovider.shared.constants import SSM_PARAMETER_TYPE
from sopsprovider.shared.errors import ParameterWriteError

logger = logging.getLogger(__name__)


def kms_key_id_from_arn(kms_key_arn: str | None) -> str | None:
    """Return the key id part of ``arn:aws:kms:<region>:<account>:key/<id>``."""
    if not kms_key_arn:
        return None
    parts = kms_key_arn.split("/")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


class SsmParameterStore:
    """Writes SecureString parameters, replacing any existing value."""

    def __init__(self, config: ProviderConfig, *, client: Any | None = None) -> None:
        self._client = client or boto3.client("ssm", **config.client_kwargs(config.ssm_endpoint))

    def put_secure_string(self, name: str, value: str, kms_key_arn: str | None = None) -> None:
        """Write ``value`` to parameter ``name``.

        The parameter is encrypted with the key named by ``kms_key_arn``,
        or the account default key when no key id can be derived from it.

        Raises:
            ParameterWriteError: If the write fails.
        """
        kwargs: dict[str, Any] = {
            "Name": name,
            "Value": value,
            "Type": SSM_PARAMETER_TYPE,
            "Overwrite": True,
        }
        key_id = kms_key_id_from_arn(kms_key_arn)
        if key_id:
            kwargs["KeyId"] = key_id

        try:
            self._client.put_parameter(**kwargs)
        except (ClientError, BotoCoreError) as exc:
            raise ParameterWriteError(f"Failed to write SSM parameter {name}") from exc
        logger.info("Wrote SSM parameter %s", name)

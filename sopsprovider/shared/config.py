"""Provider configuration loaded from environment variables.

The Lambda functions read these values at cold-start to configure the
sops invocation and the AWS clients.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from botocore.config import Config

from sopsprovider.shared.constants import (
    DEFAULT_AWS_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_AWS_READ_TIMEOUT_SECONDS,
    DEFAULT_DECRYPT_TIMEOUT_SECONDS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SOPS_BINARY,
)
from sopsprovider.shared.errors import ConfigurationError


@dataclass(frozen=True)
class ProviderConfig:
    """Runtime configuration sourced from Lambda environment variables."""

    aws_region: str | None = None

    # sops
    sops_binary: str = DEFAULT_SOPS_BINARY
    decrypt_timeout_seconds: float = DEFAULT_DECRYPT_TIMEOUT_SECONDS

    # AWS client behaviour
    aws_connect_timeout_seconds: float = DEFAULT_AWS_CONNECT_TIMEOUT_SECONDS
    aws_read_timeout_seconds: float = DEFAULT_AWS_READ_TIMEOUT_SECONDS

    # Raise instead of logging when PutParameter fails
    strict_parameter_writes: bool = False

    log_level: str = DEFAULT_LOG_LEVEL

    # Optional overrides (useful for local testing)
    s3_endpoint: str | None = None
    secretsmanager_endpoint: str | None = None
    ssm_endpoint: str | None = None

    def client_kwargs(self, endpoint_url: str | None = None) -> dict[str, Any]:
        """Keyword arguments for ``boto3.client`` honouring timeouts.

        Retries are disabled: CloudFormation retries the whole resource.
        """
        kwargs: dict[str, Any] = {
            "config": Config(
                connect_timeout=self.aws_connect_timeout_seconds,
                read_timeout=self.aws_read_timeout_seconds,
                retries={"total_max_attempts": 1},
            ),
        }
        if self.aws_region:
            kwargs["region_name"] = self.aws_region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        return kwargs


def normalise_boolean(value: bool | str) -> bool:
    """Coerce a boolean that may have been stringified on its way through CloudFormation."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value == "true":
            return True
        if value == "false":
            return False
        raise ValueError(f"Unexpected string value when normalising boolean: {value}")
    raise ValueError(f"Unexpected type {type(value).__name__}, {value!r} when normalising boolean")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return normalise_boolean(raw.strip().lower())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be 'true' or 'false', got {raw!r}") from exc


def _env_log_level(name: str, default: str) -> str:
    level = (os.environ.get(name) or default).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"{name} must be a logging level name, got {level!r}")
    return level


def load_provider_config() -> ProviderConfig:
    """Build ProviderConfig from environment variables set on the provider function."""
    return ProviderConfig(
        aws_region=os.environ.get("AWS_REGION") or None,
        sops_binary=os.environ.get("SOPS_BINARY") or DEFAULT_SOPS_BINARY,
        decrypt_timeout_seconds=_env_float("SOPS_DECRYPT_TIMEOUT", DEFAULT_DECRYPT_TIMEOUT_SECONDS),
        aws_connect_timeout_seconds=_env_float(
            "AWS_CONNECT_TIMEOUT", DEFAULT_AWS_CONNECT_TIMEOUT_SECONDS
        ),
        aws_read_timeout_seconds=_env_float("AWS_READ_TIMEOUT", DEFAULT_AWS_READ_TIMEOUT_SECONDS),
        strict_parameter_writes=_env_bool("STRICT_PARAMETER_WRITES", False),
        log_level=_env_log_level("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        s3_endpoint=os.environ.get("S3_ENDPOINT"),
        secretsmanager_endpoint=os.environ.get("SECRETSMANAGER_ENDPOINT"),
        ssm_endpoint=os.environ.get("SSM_ENDPOINT"),
    )

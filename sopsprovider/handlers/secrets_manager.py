"""Custom::SopsSecretsManager provider Lambda handler.

Decrypts a sops file from S3 and writes either selected values (as a JSON
object) or the whole decrypted file into an existing Secrets Manager
secret.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sopsprovider.backends.object_store import S3ObjectStore
from sopsprovider.backends.secret_store import SecretsManagerStore
from sopsprovider.handlers.events import LifecycleResponse
from sopsprovider.handlers.lifecycle import LifecycleHandler
from sopsprovider.handlers.properties import SecretsManagerProperties, parse_properties
from sopsprovider.shared.config import ProviderConfig, load_provider_config
from sopsprovider.shared.constants import SECRET_PHYSICAL_ID_PREFIX, WHOLE_FILE_DATA_KEY
from sopsprovider.shared.errors import DecodeFailed
from sopsprovider.sops.decryptor import Decryptor
from sopsprovider.sops.mapper import resolve_mappings

logger = logging.getLogger(__name__)


def whole_file_secret_string(document: Any) -> str:
    """Return the ``data`` field of a whole-file document verbatim."""
    value = document.get(WHOLE_FILE_DATA_KEY) if isinstance(document, dict) else None
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeFailed(f"Whole-file '{WHOLE_FILE_DATA_KEY}' field is not a string")
    return value


class SecretsManagerProvider(LifecycleHandler):
    """Publishes decrypted sops values to Secrets Manager."""

    def __init__(
        self,
        *,
        object_store: S3ObjectStore,
        decryptor: Decryptor,
        secret_store: SecretsManagerStore,
    ) -> None:
        self._object_store = object_store
        self._decryptor = decryptor
        self._secret_store = secret_store

    def handle_create(self, properties: dict[str, Any]) -> LifecycleResponse:
        props = parse_properties(SecretsManagerProperties, properties)
        secret_id = props.secret_id

        payload = self._object_store.fetch(props.s3_bucket, props.s3_path, props.file_type)
        document = self._decryptor.decrypt(
            payload, props.kms_key_arn, whole_file=props.whole_file
        )

        if props.whole_file:
            logger.info("Writing decoded data to secretsmanager as whole file: %s", secret_id)
            secret_string = whole_file_secret_string(document)
        else:
            mappings = props.mapping_entries
            logger.info("Mapping values from decoded data: %s", sorted(mappings))
            mapped = resolve_mappings(document, mappings)
            missing = sorted(set(mappings) - set(mapped))
            if missing:
                logger.warning("Mappings did not resolve and were skipped: %s", missing)
            logger.info("Writing decoded data to secretsmanager as JSON: %s", secret_id)
            secret_string = json.dumps(mapped, separators=(",", ":"), ensure_ascii=False)

        self._secret_store.put_secret_string(secret_id, secret_string)
        logger.info("Wrote data to secretsmanager")

        return LifecycleResponse(physical_resource_id=f"{SECRET_PHYSICAL_ID_PREFIX}{secret_id}")


# Cold-start initialisation

_provider: SecretsManagerProvider | None = None


def build_provider(config: ProviderConfig) -> SecretsManagerProvider:
    return SecretsManagerProvider(
        object_store=S3ObjectStore(config),
        decryptor=Decryptor(
            binary=config.sops_binary,
            timeout_seconds=config.decrypt_timeout_seconds,
        ),
        secret_store=SecretsManagerStore(config),
    )


def _init() -> SecretsManagerProvider:
    """Lazy-initialise the provider on first invocation."""
    global _provider  # noqa: PLW0603
    if _provider is None:
        config = load_provider_config()
        logging.getLogger("sopsprovider").setLevel(config.log_level)
        _provider = build_provider(config)
    return _provider


# Lambda entry point
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Provider-framework ``onEvent`` handler."""
    return _init().on_event(event)

"""Custom::SopsSSMParameter provider Lambda handler.

Decrypts a sops file from S3 and writes the single value found at
``SopsPath`` into an SSM SecureString parameter.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sopsprovider.backends.object_store import S3ObjectStore
from sopsprovider.backends.parameter_store import SsmParameterStore
from sopsprovider.handlers.events import DeleteEvent, LifecycleResponse
from sopsprovider.handlers.lifecycle import LifecycleHandler
from sopsprovider.handlers.properties import SsmParameterProperties, parse_properties
from sopsprovider.shared.config import ProviderConfig, load_provider_config
from sopsprovider.shared.constants import ENCODING_STRING, SSM_PHYSICAL_ID_PREFIX
from sopsprovider.shared.errors import ParameterWriteError, SecretNotFound
from sopsprovider.sops.decryptor import Decryptor
from sopsprovider.sops.mapper import resolve_mapping_path

logger = logging.getLogger(__name__)


class SsmParameterProvider(LifecycleHandler):
    """Publishes one decrypted sops value to an SSM parameter.

    With ``strict_writes`` off a failed PutParameter is logged and the
    resource still reports success.
    """

    def __init__(
        self,
        *,
        object_store: S3ObjectStore,
        decryptor: Decryptor,
        parameter_store: SsmParameterStore,
        strict_writes: bool = False,
    ) -> None:
        self._object_store = object_store
        self._decryptor = decryptor
        self._parameter_store = parameter_store
        self._strict_writes = strict_writes

    def handle_create(self, properties: dict[str, Any]) -> LifecycleResponse:
        props = parse_properties(SsmParameterProperties, properties)

        payload = self._object_store.fetch(props.s3_bucket, props.s3_path, props.file_type)
        document = self._decryptor.decrypt(payload, props.kms_key_arn, whole_file=False)

        value = resolve_mapping_path(document, props.sops_path, ENCODING_STRING)
        # SSM rejects empty values
        if not value:
            raise SecretNotFound(props.sops_path)

        logger.info("Writing SSM parameter %s", props.parameter_name)
        try:
            self._parameter_store.put_secure_string(
                props.parameter_name, value, props.kms_key_arn
            )
        except ParameterWriteError:
            if self._strict_writes:
                raise
            logger.exception(
                "Failed to write SSM parameter %s, continuing", props.parameter_name
            )

        # Random rather than derived from the parameter name
        physical_id = f"{SSM_PHYSICAL_ID_PREFIX}{uuid.uuid4()}"
        logger.info("SSM physical resource id is %s", physical_id)
        return LifecycleResponse(physical_resource_id=physical_id)

    def handle_delete(self, event: DeleteEvent) -> LifecycleResponse:
        logger.info("Delete requested for %s, leaving parameter in place", event.physical_resource_id)
        return super().handle_delete(event)


# Cold-start initialisation

_provider: SsmParameterProvider | None = None


def build_provider(config: ProviderConfig) -> SsmParameterProvider:
    return SsmParameterProvider(
        object_store=S3ObjectStore(config),
        decryptor=Decryptor(
            binary=config.sops_binary,
            timeout_seconds=config.decrypt_timeout_seconds,
        ),
        parameter_store=SsmParameterStore(config),
        strict_writes=config.strict_parameter_writes,
    )


def _init() -> SsmParameterProvider:
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
